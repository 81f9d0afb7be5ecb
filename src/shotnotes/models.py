"""Data model for the ShotNotes recommendation engine.

Records are supplied by the record provider and only read here. Everything the
engine produces is a frozen dataclass, so consumers can hold on to results as
snapshots.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class RelationshipType(Enum):
    """Why two records are related."""
    TEMPORAL = "temporal"
    SEMANTIC = "semantic"
    VISUAL = "visual"
    WORKFLOW = "workflow"
    CONTEXTUAL = "contextual"
    THEMATIC = "thematic"
    DUPLICATE = "duplicate"
    VARIATION = "variation"

    @property
    def display_name(self) -> str:
        return {
            RelationshipType.TEMPORAL: "Time-based",
            RelationshipType.SEMANTIC: "Content-based",
            RelationshipType.VISUAL: "Visually Similar",
            RelationshipType.WORKFLOW: "Workflow",
            RelationshipType.CONTEXTUAL: "Context",
            RelationshipType.THEMATIC: "Theme",
            RelationshipType.DUPLICATE: "Duplicate",
            RelationshipType.VARIATION: "Variation",
        }[self]


class FeatureType(Enum):
    """Kinds of feature two records can share."""
    TEXT = "text"
    COLOR = "color"
    OBJECT = "object"
    LAYOUT = "layout"
    ENTITY = "entity"
    TAG = "tag"
    METADATA = "metadata"


class TemporalPatternType(Enum):
    """Recurring capture patterns."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    PROJECT_CYCLE = "project_cycle"
    MEETING_CYCLE = "meeting_cycle"
    WORKFLOW_CYCLE = "workflow_cycle"

    @property
    def display_name(self) -> str:
        if self.value.endswith("_cycle"):
            return self.value.replace("_", " ").title()
        return f"{self.value.title()} Pattern"


class Frequency(Enum):
    """How often a temporal pattern repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SEASONAL = "seasonal"
    IRREGULAR = "irregular"


class VisualFeatureType(Enum):
    """Visual features two records can share."""
    DOMINANT_COLOR = "dominant_color"
    LAYOUT = "layout"
    OBJECTS = "objects"
    TEXT = "text"
    COMPOSITION = "composition"


class WorkflowType(Enum):
    """Process a group of records appears to document."""
    DOCUMENTATION = "documentation"
    COMPARISON = "comparison"
    ITERATION = "iteration"
    RESEARCH = "research"
    TROUBLESHOOTING = "troubleshooting"


class ClusterType(Enum):
    """Dominant match category of a content cluster."""
    TEMPORAL = "temporal"
    SEMANTIC = "semantic"
    VISUAL = "visual"
    WORKFLOW = "workflow"
    MIXED = "mixed"

    @property
    def display_name(self) -> str:
        return {
            ClusterType.TEMPORAL: "Time-based Group",
            ClusterType.SEMANTIC: "Content Group",
            ClusterType.VISUAL: "Visual Group",
            ClusterType.WORKFLOW: "Workflow Group",
            ClusterType.MIXED: "Mixed Group",
        }[self]


# ========== Inputs ==========


@dataclass(frozen=True)
class VisualAttributes:
    """Visual analysis summary computed upstream."""
    is_document: bool
    prominent_object_count: int = 0


@dataclass(frozen=True)
class Record:
    """A content item (usually a screenshot)."""
    id: str
    timestamp: datetime
    extracted_text: str | None = None
    tags: frozenset[str] | None = None
    visual_attributes: VisualAttributes | None = None
    entities: frozenset[str] | None = None
    filename: str | None = None

    def __post_init__(self) -> None:
        # Accept any iterable for the set-valued fields
        if self.tags is not None and not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))
        if self.entities is not None and not isinstance(self.entities, frozenset):
            object.__setattr__(self, "entities", frozenset(self.entities))

    @property
    def has_text(self) -> bool:
        return bool(self.extracted_text)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "extracted_text": self.extracted_text,
            "tags": sorted(self.tags) if self.tags is not None else None,
            "visual_attributes": {
                "is_document": self.visual_attributes.is_document,
                "prominent_object_count": self.visual_attributes.prominent_object_count,
            } if self.visual_attributes else None,
            "entities": sorted(self.entities) if self.entities is not None else None,
            "filename": self.filename,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        """Build a record from the provider's dictionary form."""
        visual = data.get("visual_attributes")
        timestamp = data["timestamp"]
        return cls(
            id=str(data["id"]),
            timestamp=datetime.fromisoformat(timestamp) if isinstance(timestamp, str) else timestamp,
            extracted_text=data.get("extracted_text"),
            tags=data.get("tags"),
            visual_attributes=VisualAttributes(**visual) if visual else None,
            entities=data.get("entities"),
            filename=data.get("filename"),
        )


# ========== Related content ==========


@dataclass(frozen=True)
class MatchingFeature:
    """One feature shared by a pair of records."""
    feature_type: FeatureType
    similarity: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature_type": self.feature_type.value,
            "similarity": self.similarity,
            "description": self.description,
        }


@dataclass(frozen=True)
class RelatedItem:
    """A candidate record related to the source record."""
    record: Record
    similarity_score: float
    relationship_type: RelationshipType
    matching_features: tuple[MatchingFeature, ...] = ()
    temporal_proximity: float | None = None  # seconds
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record.id,
            "similarity_score": self.similarity_score,
            "relationship_type": self.relationship_type.value,
            "matching_features": [f.to_dict() for f in self.matching_features],
            "temporal_proximity": self.temporal_proximity,
            "explanation": self.explanation,
        }


# ========== Typed signal matches ==========


@dataclass(frozen=True)
class TemporalPattern:
    """A recurring capture pattern."""
    pattern_type: TemporalPatternType
    time_interval: float  # seconds
    confidence: float
    records: tuple[Record, ...]
    description: str
    predicted_next: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern_type": self.pattern_type.value,
            "time_interval": self.time_interval,
            "confidence": self.confidence,
            "record_ids": [r.id for r in self.records],
            "description": self.description,
            "predicted_next": self.predicted_next.isoformat() if self.predicted_next else None,
        }


@dataclass(frozen=True)
class TemporalMatch:
    pattern: TemporalPattern
    records: tuple[Record, ...]
    confidence: float
    time_span: float  # seconds
    frequency: Frequency

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern.to_dict(),
            "record_ids": [r.id for r in self.records],
            "confidence": self.confidence,
            "time_span": self.time_span,
            "frequency": self.frequency.value,
        }


@dataclass(frozen=True)
class SemanticMatch:
    record: Record
    semantic_similarity: float
    shared_entities: tuple[str, ...] = ()
    shared_concepts: tuple[str, ...] = ()
    context_similarity: float = 0.0
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record.id,
            "semantic_similarity": self.semantic_similarity,
            "shared_entities": list(self.shared_entities),
            "shared_concepts": list(self.shared_concepts),
            "context_similarity": self.context_similarity,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class VisualFeature:
    feature_type: VisualFeatureType
    confidence: float


@dataclass(frozen=True)
class VisualMatch:
    record: Record
    visual_similarity: float
    shared_visual_features: tuple[VisualFeature, ...] = ()
    color_similarity: float = 0.0
    layout_similarity: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record.id,
            "visual_similarity": self.visual_similarity,
            "shared_visual_features": [
                {"feature_type": f.feature_type.value, "confidence": f.confidence}
                for f in self.shared_visual_features
            ],
            "color_similarity": self.color_similarity,
            "layout_similarity": self.layout_similarity,
        }


@dataclass(frozen=True)
class WorkflowMatch:
    workflow_type: WorkflowType
    records: tuple[Record, ...]
    step_position: int
    workflow_confidence: float
    suggested_next_steps: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow_type": self.workflow_type.value,
            "record_ids": [r.id for r in self.records],
            "step_position": self.step_position,
            "workflow_confidence": self.workflow_confidence,
            "suggested_next_steps": list(self.suggested_next_steps),
        }


# ========== Results ==========


@dataclass(frozen=True)
class ProcessingMetrics:
    """Timing and rough resource figures for one recommendation cycle."""
    analysis_time: float = 0.0  # seconds
    total_comparisons: int = 0
    cache_hit_rate: float = 0.0
    memory_usage: int = 0  # bytes, estimated

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis_time": self.analysis_time,
            "total_comparisons": self.total_comparisons,
            "cache_hit_rate": self.cache_hit_rate,
            "memory_usage": self.memory_usage,
        }


@dataclass(frozen=True)
class RecommendationResult:
    """Everything found for one source record."""
    source: Record
    related_content: tuple[RelatedItem, ...] = ()
    temporal_matches: tuple[TemporalMatch, ...] = ()
    semantic_matches: tuple[SemanticMatch, ...] = ()
    visual_matches: tuple[VisualMatch, ...] = ()
    workflow_matches: tuple[WorkflowMatch, ...] = ()
    confidence: float = 0.0
    analysis_timestamp: datetime = field(default_factory=datetime.now)
    processing_metrics: ProcessingMetrics = field(default_factory=ProcessingMetrics)

    @property
    def total_matches(self) -> int:
        return (
            len(self.related_content)
            + len(self.temporal_matches)
            + len(self.semantic_matches)
            + len(self.visual_matches)
            + len(self.workflow_matches)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_id": self.source.id,
            "related_content": [r.to_dict() for r in self.related_content],
            "temporal_matches": [m.to_dict() for m in self.temporal_matches],
            "semantic_matches": [m.to_dict() for m in self.semantic_matches],
            "visual_matches": [m.to_dict() for m in self.visual_matches],
            "workflow_matches": [m.to_dict() for m in self.workflow_matches],
            "confidence": self.confidence,
            "analysis_timestamp": self.analysis_timestamp.isoformat(),
            "processing_metrics": self.processing_metrics.to_dict(),
        }


@dataclass(frozen=True)
class ContentCluster:
    """A group of related records anchored at a center record."""
    id: str
    center: Record
    related: tuple[Record, ...]
    cluster_type: ClusterType
    average_similarity: float
    temporal_span: float  # seconds

    @property
    def all_records(self) -> tuple[Record, ...]:
        return (self.center,) + self.related

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "center_id": self.center.id,
            "related_ids": [r.id for r in self.related],
            "cluster_type": self.cluster_type.value,
            "average_similarity": self.average_similarity,
            "temporal_span": self.temporal_span,
        }


@dataclass(frozen=True)
class ContentRelationship:
    """An edge of the content relationship graph."""
    source_id: str
    target_id: str
    relationship_strength: float
    relationship_types: tuple[RelationshipType, ...]
    directional: bool
    temporal_distance: float  # seconds
    last_updated: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "relationship_strength": self.relationship_strength,
            "relationship_types": [t.value for t in self.relationship_types],
            "directional": self.directional,
            "temporal_distance": self.temporal_distance,
            "last_updated": self.last_updated.isoformat(),
        }
