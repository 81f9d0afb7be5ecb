"""Signal matchers for ShotNotes.

Each matcher scans a bounded prefix of the candidate pool for one kind of
relationship:
- Related content (fused similarity)
- Temporal patterns (same time of day)
- Semantic matches (shared words and entities)
- Visual matches (color and layout proxies)
- Workflow sequences (tutorial/guide keywords)

Matchers never fail on missing data; they return an empty list instead. They
only read their inputs, so several can run over the same pool at once.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from datetime import datetime, timedelta
from typing import Any

from shotnotes.config import RecommendationSettings
from shotnotes.models import (
    Frequency,
    Record,
    RelatedItem,
    SemanticMatch,
    TemporalMatch,
    TemporalPattern,
    TemporalPatternType,
    VisualFeature,
    VisualFeatureType,
    VisualMatch,
    WorkflowMatch,
    WorkflowType,
)
from shotnotes.recommendation.classifier import RelationshipClassifier
from shotnotes.recommendation.similarity import SECONDS_PER_DAY, SimilarityScorer, time_delta

TEMPORAL_HOUR_TOLERANCE = 2
TEMPORAL_MIN_BUCKET = 3
TEMPORAL_PATTERN_CONFIDENCE = 0.8
TEMPORAL_PATTERN_SAMPLE = 5

SEMANTIC_TEXT_THRESHOLD = 0.3
SEMANTIC_MAX_MATCHES = 10

VISUAL_MAX_MATCHES = 10

WORKFLOW_KEYWORDS = ("step", "tutorial", "guide")
WORKFLOW_MIN_CANDIDATES = 2
WORKFLOW_CONFIDENCE = 0.7
WORKFLOW_SAMPLE = 5
WORKFLOW_NEXT_STEPS = ("Continue documentation sequence", "Review previous steps")


class AnalysisCancelled(Exception):
    """Raised inside a matcher when its cancel event has been set."""


class BaseMatcher(ABC):
    """Base class for signal matchers."""

    # Matcher name, used in logs
    name: str = "base"

    def __init__(
        self,
        settings: RecommendationSettings | None = None,
        scorer: SimilarityScorer | None = None,
        classifier: RelationshipClassifier | None = None,
    ) -> None:
        self.settings = settings or RecommendationSettings()
        self.scorer = scorer or SimilarityScorer(self.settings.temporal_window_days)
        self.classifier = classifier or RelationshipClassifier(self.scorer)

    @property
    def scan_limit(self) -> int | None:
        """Number of candidates inspected; None scans the whole pool."""
        return None

    @abstractmethod
    def match(
        self,
        source: Record,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> list[Any]:
        """Find matches for source among candidates.

        Args:
            source: Record to find matches for
            candidates: Candidate pool, never modified
            cancel_event: Checked between candidates

        Returns:
            Typed matches, best first
        """
        pass

    def _scan(
        self,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None,
    ) -> Iterator[Record]:
        """Iterate the bounded prefix of the pool, honouring cancellation."""
        limit = self.scan_limit
        sample = candidates if limit is None else candidates[:limit]
        for candidate in sample:
            if cancel_event is not None and cancel_event.is_set():
                raise AnalysisCancelled(f"{self.name} matcher cancelled")
            yield candidate


class RelatedContentMatcher(BaseMatcher):
    """Candidates whose fused similarity clears the minimum score."""

    name = "related_content"

    @property
    def scan_limit(self) -> int | None:
        return self.settings.scan_limits.related_content

    def match(
        self,
        source: Record,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None = None,
        max_results: int | None = None,
    ) -> list[RelatedItem]:
        if max_results is None:
            max_results = self.settings.max_recommendations

        items = []
        for candidate in self._scan(candidates, cancel_event):
            similarity = self.scorer.overall_similarity(source, candidate)
            if similarity < self.settings.minimum_similarity_score:
                continue

            items.append(RelatedItem(
                record=candidate,
                similarity_score=similarity,
                relationship_type=self.classifier.classify(source, candidate),
                matching_features=tuple(self.classifier.matching_features(source, candidate)),
                temporal_proximity=time_delta(source, candidate),
                explanation=self.classifier.explain(similarity),
            ))

        items.sort(key=lambda item: item.similarity_score, reverse=True)
        return items[:max_results]


class TemporalPatternMatcher(BaseMatcher):
    """Detects a daily habit of capturing at the source's time of day."""

    name = "temporal"

    @property
    def scan_limit(self) -> int | None:
        return self.settings.scan_limits.temporal

    def match(
        self,
        source: Record,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> list[TemporalMatch]:
        if not self.settings.enable_temporal_analysis:
            return []

        hour = source.timestamp.hour
        same_time_of_day = [
            candidate for candidate in self._scan(candidates, cancel_event)
            if abs(candidate.timestamp.hour - hour) <= TEMPORAL_HOUR_TOLERANCE
        ]

        if len(same_time_of_day) < TEMPORAL_MIN_BUCKET:
            return []

        now = datetime.now(source.timestamp.tzinfo)
        pattern = TemporalPattern(
            pattern_type=TemporalPatternType.DAILY,
            time_interval=SECONDS_PER_DAY,
            confidence=TEMPORAL_PATTERN_CONFIDENCE,
            records=(source, *same_time_of_day[:TEMPORAL_PATTERN_SAMPLE]),
            description=f"Screenshots taken around {hour}:00",
            predicted_next=now + timedelta(days=1),
        )

        return [TemporalMatch(
            pattern=pattern,
            records=tuple(same_time_of_day),
            confidence=TEMPORAL_PATTERN_CONFIDENCE,
            time_span=SECONDS_PER_DAY,
            frequency=Frequency.DAILY,
        )]


class SemanticMatcher(BaseMatcher):
    """Candidates sharing words or named entities with the source."""

    name = "semantic"

    @property
    def scan_limit(self) -> int | None:
        return self.settings.scan_limits.semantic

    def match(
        self,
        source: Record,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> list[SemanticMatch]:
        if not self.settings.enable_semantic_similarity:
            return []
        if not source.extracted_text:
            return []

        matches = []
        for candidate in self._scan(candidates, cancel_event):
            if not candidate.extracted_text:
                continue

            text_similarity = self.scorer.text_similarity(source, candidate)
            shared_entities = self.classifier.shared_entities(source, candidate)

            if text_similarity >= SEMANTIC_TEXT_THRESHOLD or shared_entities:
                matches.append(SemanticMatch(
                    record=candidate,
                    semantic_similarity=text_similarity,
                    shared_entities=tuple(shared_entities),
                    explanation="Shares similar text content",
                ))

        matches.sort(key=lambda m: m.semantic_similarity, reverse=True)
        return matches[:SEMANTIC_MAX_MATCHES]


class VisualMatcher(BaseMatcher):
    """Candidates that look alike by the color and layout proxies."""

    name = "visual"

    @property
    def scan_limit(self) -> int | None:
        return self.settings.scan_limits.visual

    def match(
        self,
        source: Record,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> list[VisualMatch]:
        if not self.settings.enable_visual_similarity:
            return []

        source_visual = source.visual_attributes
        if source_visual is None:
            return []

        matches = []
        for candidate in self._scan(candidates, cancel_event):
            candidate_visual = candidate.visual_attributes
            if candidate_visual is None:
                continue

            color = self.scorer.color_similarity(source_visual, candidate_visual)
            layout = self.scorer.layout_similarity(source_visual, candidate_visual)
            overall = (color + layout) / 2.0

            if overall < self.settings.minimum_similarity_score:
                continue

            features = [VisualFeature(VisualFeatureType.DOMINANT_COLOR, color)]
            if layout > 0:
                features.append(VisualFeature(VisualFeatureType.LAYOUT, layout))

            matches.append(VisualMatch(
                record=candidate,
                visual_similarity=overall,
                shared_visual_features=tuple(features),
                color_similarity=color,
                layout_similarity=layout,
            ))

        matches.sort(key=lambda m: m.visual_similarity, reverse=True)
        return matches[:VISUAL_MAX_MATCHES]


def has_workflow_keyword(text: str | None) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in WORKFLOW_KEYWORDS)


class WorkflowMatcher(BaseMatcher):
    """Spots documentation sequences such as tutorials and step-by-step guides."""

    name = "workflow"

    @property
    def scan_limit(self) -> int | None:
        return self.settings.scan_limits.workflow

    def match(
        self,
        source: Record,
        candidates: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> list[WorkflowMatch]:
        if not has_workflow_keyword(source.extracted_text):
            return []

        workflow_records = [
            candidate for candidate in self._scan(candidates, cancel_event)
            if has_workflow_keyword(candidate.extracted_text)
        ]

        if len(workflow_records) < WORKFLOW_MIN_CANDIDATES:
            return []

        return [WorkflowMatch(
            workflow_type=WorkflowType.DOCUMENTATION,
            records=tuple(workflow_records[:WORKFLOW_SAMPLE]),
            step_position=1,
            workflow_confidence=WORKFLOW_CONFIDENCE,
            suggested_next_steps=WORKFLOW_NEXT_STEPS,
        )]
