"""Pytest configuration and fixtures."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from shotnotes.config import RecommendationSettings
from shotnotes.models import Record, VisualAttributes

BASE_TIME = datetime(2026, 3, 2, 14, 0, 0)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def make_record():
    """Factory for records offset from a fixed base time."""
    counter = {"n": 0}

    def _make(
        record_id: str | None = None,
        text: str | None = None,
        tags: set[str] | None = None,
        is_document: bool | None = None,
        objects: int = 0,
        entities: set[str] | None = None,
        minutes: float = 0,
        days: float = 0,
        at: datetime | None = None,
    ) -> Record:
        counter["n"] += 1
        timestamp = at or BASE_TIME + timedelta(days=days, minutes=minutes)
        visual = None
        if is_document is not None:
            visual = VisualAttributes(is_document=is_document, prominent_object_count=objects)
        return Record(
            id=record_id or f"rec-{counter['n']:03d}",
            timestamp=timestamp,
            extracted_text=text,
            tags=tags,
            visual_attributes=visual,
            entities=entities,
        )

    return _make


@pytest.fixture
def settings():
    """Default recommendation settings."""
    return RecommendationSettings()
