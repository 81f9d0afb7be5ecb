"""Tests for data model types."""

from datetime import datetime

from shotnotes.models import (
    ClusterType,
    ContentCluster,
    Record,
    RelationshipType,
    TemporalPatternType,
    VisualAttributes,
)


def test_record_normalises_sets():
    record = Record(id="r1", timestamp=datetime(2026, 1, 1), tags=["a", "b", "a"], entities={"x"})

    assert record.tags == frozenset({"a", "b"})
    assert record.entities == frozenset({"x"})


def test_record_from_dict():
    record = Record.from_dict({
        "id": 7,
        "timestamp": "2026-01-01T10:00:00",
        "extracted_text": "hello",
        "tags": ["work"],
        "visual_attributes": {"is_document": True, "prominent_object_count": 3},
    })

    assert record.id == "7"
    assert record.timestamp == datetime(2026, 1, 1, 10, 0)
    assert record.visual_attributes == VisualAttributes(is_document=True, prominent_object_count=3)
    assert record.entities is None
    assert Record.from_dict(record.to_dict()) == record


def test_display_names():
    assert RelationshipType.VISUAL.display_name == "Visually Similar"
    assert TemporalPatternType.DAILY.display_name == "Daily Pattern"
    assert TemporalPatternType.PROJECT_CYCLE.display_name == "Project Cycle"
    assert ClusterType.MIXED.display_name == "Mixed Group"


def test_cluster_all_records():
    center = Record(id="c", timestamp=datetime(2026, 1, 1))
    other = Record(id="o", timestamp=datetime(2026, 1, 2))
    cluster = ContentCluster(
        id="cluster_x",
        center=center,
        related=(other,),
        cluster_type=ClusterType.TEMPORAL,
        average_similarity=0.7,
        temporal_span=86400,
    )

    assert cluster.all_records == (center, other)
    assert cluster.to_dict()["related_ids"] == ["o"]
