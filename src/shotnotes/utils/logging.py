"""Logging configuration for ShotNotes."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from shotnotes.config import DEFAULT_CONFIG_DIR, LoggingConfig


def setup_logging(
    level: str = "INFO",
    log_dir: Path | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up logging for ShotNotes.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (defaults to ~/.shotnotes/logs)
        console: Whether to log to console

    Returns:
        Configured logger
    """
    if log_dir is None:
        log_dir = DEFAULT_CONFIG_DIR / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("shotnotes")
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    # Console handler with rich formatting
    if console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        console_handler.setLevel(logging.DEBUG)
        logger.addHandler(console_handler)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    main_handler = logging.FileHandler(log_dir / "shotnotes.log")
    main_handler.setLevel(logging.INFO)
    main_handler.setFormatter(formatter)
    logger.addHandler(main_handler)

    error_handler = logging.FileHandler(log_dir / "error.log")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    logger.addHandler(error_handler)

    return logger


def setup_logging_from_config(config: LoggingConfig) -> logging.Logger:
    """Set up logging from the `logging` section of the config file."""
    return setup_logging(
        level=config.level or "INFO",
        log_dir=Path(config.log_dir).expanduser() if config.log_dir else None,
        console=config.console,
    )


def get_logger(name: str = "shotnotes") -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
