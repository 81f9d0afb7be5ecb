"""ShotNotes configuration management."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".shotnotes"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "shotnotes.yaml"


class ScanLimits(BaseModel):
    """How many candidates each matcher inspects, from the front of the pool."""
    model_config = ConfigDict(frozen=True)

    related_content: int = Field(default=100, ge=1)
    temporal: int = Field(default=50, ge=1)
    semantic: int = Field(default=50, ge=1)
    visual: int = Field(default=50, ge=1)
    workflow: int | None = Field(default=None, ge=1)  # None = whole pool


class RecommendationSettings(BaseModel):
    """Feature toggles and thresholds for one engine instance."""
    model_config = ConfigDict(frozen=True)

    enable_content_discovery: bool = True
    enable_temporal_analysis: bool = True
    enable_semantic_similarity: bool = True
    enable_visual_similarity: bool = True
    # Reserved toggles; no matcher reads them yet
    enable_machine_learning: bool = True
    adaptive_weighting: bool = True
    privacy_mode: bool = False
    max_recommendations: int = Field(default=20, ge=1)
    minimum_similarity_score: float = Field(default=0.6, ge=0.0, le=1.0)
    temporal_window_days: int = Field(default=30, ge=1)
    scan_limits: ScanLimits = Field(default_factory=ScanLimits)


class LoggingConfig(BaseModel):
    """Configuration for log output."""
    level: str | None = None
    log_dir: str | None = None  # None = ~/.shotnotes/logs
    console: bool = True

    def model_post_init(self, __context: Any) -> None:
        """Apply environment variable fallbacks."""
        if self.level is None:
            self.level = os.getenv("SHOTNOTES_LOG_LEVEL", "INFO")


class ShotNotesConfig(BaseModel):
    """Main ShotNotes configuration."""
    version: str = "1.0"
    recommendations: RecommendationSettings = Field(default_factory=RecommendationSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_config() -> ShotNotesConfig:
    """Get default configuration."""
    return ShotNotesConfig()


def load_config(config_path: Path | None = None) -> ShotNotesConfig:
    """Load configuration from file or return defaults."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f)
            if data:
                return ShotNotesConfig.model_validate(data)

    return get_default_config()


def save_config(config: ShotNotesConfig, config_path: Path | None = None) -> None:
    """Save configuration to file."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)


def ensure_config_dir() -> Path:
    """Ensure ~/.shotnotes directory exists and return path."""
    DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    (DEFAULT_CONFIG_DIR / "logs").mkdir(exist_ok=True)
    return DEFAULT_CONFIG_DIR
