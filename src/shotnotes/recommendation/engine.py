"""Recommendation Engine - main orchestrator for ShotNotes discovery.

Coordinates:
1. Related content scoring
2. Temporal pattern detection
3. Semantic matching
4. Visual matching
5. Workflow detection

The five matchers run side by side in a thread pool over the same read-only
inputs and their results are merged in a fixed order. Consumers read the
engine's published state through immutable snapshots or subscribe to be told
when it changes.
"""

import asyncio
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial

from shotnotes.config import RecommendationSettings
from shotnotes.models import (
    ContentRelationship,
    ProcessingMetrics,
    Record,
    RecommendationResult,
    RelatedItem,
    SemanticMatch,
    TemporalMatch,
    TemporalPattern,
    VisualMatch,
    WorkflowMatch,
)
from shotnotes.recommendation.classifier import RelationshipClassifier
from shotnotes.recommendation.matchers import (
    RelatedContentMatcher,
    SemanticMatcher,
    TemporalPatternMatcher,
    VisualMatcher,
    WorkflowMatcher,
)
from shotnotes.recommendation.profile import DiscoveryProfile
from shotnotes.recommendation.similarity import SimilarityScorer
from shotnotes.utils.logging import get_logger

logger = get_logger(__name__)


# Per-category weights for the aggregate confidence
CONFIDENCE_WEIGHTS = {
    "related": 0.4,
    "temporal": 0.2,
    "semantic": 0.2,
    "visual": 0.1,
    "workflow": 0.1,
}

MATCHER_COUNT = 5

# Rough in-memory size of one record, for the memory usage estimate
RECORD_SIZE_ESTIMATE = 256

# Footprint estimates for published state
RELATIONSHIP_SIZE_ESTIMATE = 512
PROFILE_SIZE_ESTIMATE = 1024
RESULTS_SIZE_ESTIMATE = 2048


@dataclass(frozen=True)
class EngineState:
    """Snapshot of what the engine publishes to its consumers."""
    is_analyzing: bool
    last_analysis_results: RecommendationResult | None
    content_relationships: tuple[ContentRelationship, ...]
    temporal_patterns: tuple[TemporalPattern, ...]


StateListener = Callable[[EngineState], None]


def calculate_confidence(
    related: Sequence[RelatedItem],
    temporal: Sequence[TemporalMatch],
    semantic: Sequence[SemanticMatch],
    visual: Sequence[VisualMatch],
    workflow: Sequence[WorkflowMatch],
) -> float:
    """Match-count weighted average of the category weights."""
    counts = {
        "related": len(related),
        "temporal": len(temporal),
        "semantic": len(semantic),
        "visual": len(visual),
        "workflow": len(workflow),
    }
    total_matches = sum(counts.values())
    if total_matches == 0:
        return 0.0

    weighted = sum(count * CONFIDENCE_WEIGHTS[key] for key, count in counts.items())
    return min(1.0, weighted / total_matches)


class RecommendationEngine:
    """Main recommendation engine for ShotNotes."""

    def __init__(
        self,
        settings: RecommendationSettings | None = None,
        profile: DiscoveryProfile | None = None,
    ) -> None:
        self.settings = settings or RecommendationSettings()
        self.profile = profile or DiscoveryProfile()

        # Components
        self.scorer = SimilarityScorer(self.settings.temporal_window_days)
        self.classifier = RelationshipClassifier(self.scorer)
        self.related_matcher = RelatedContentMatcher(self.settings, self.scorer, self.classifier)
        self.temporal_matcher = TemporalPatternMatcher(self.settings, self.scorer, self.classifier)
        self.semantic_matcher = SemanticMatcher(self.settings, self.scorer, self.classifier)
        self.visual_matcher = VisualMatcher(self.settings, self.scorer, self.classifier)
        self.workflow_matcher = WorkflowMatcher(self.settings, self.scorer, self.classifier)

        # Single writer for the profile
        self._profile_lock = threading.Lock()

        # Published state
        self._state_lock = threading.Lock()
        self._active_analyses = 0
        self._last_results: RecommendationResult | None = None
        self._relationships: dict[tuple[str, str], ContentRelationship] = {}
        self._temporal_patterns: tuple[TemporalPattern, ...] = ()
        self._listeners: list[StateListener] = []

        logger.info("RecommendationEngine initialized")

    async def generate_recommendations(
        self,
        source: Record,
        corpus: Iterable[Record],
        max_results: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RecommendationResult:
        """Run every matcher for source against the corpus.

        Args:
            source: Record to find recommendations for
            corpus: All candidate records; the source itself is skipped
            max_results: Cap on related content (defaults to max_recommendations)
            cancel_event: Checked by the matchers between candidates; set by
                the engine when this call is cancelled

        Returns:
            Merged recommendation result
        """
        if not self.settings.enable_content_discovery:
            return RecommendationResult(source=source)

        if max_results is None:
            max_results = self.settings.max_recommendations

        candidates = [record for record in corpus if record.id != source.id]
        cancel = cancel_event or threading.Event()

        logger.info(f"Generating recommendations for record {source.id} ({len(candidates)} candidates)")

        start_time = time.time()
        loop = asyncio.get_running_loop()
        self._mark_analyzing(True)

        try:
            with ThreadPoolExecutor(max_workers=MATCHER_COUNT) as executor:
                tasks = [
                    loop.run_in_executor(
                        executor,
                        partial(self.related_matcher.match, source, candidates, cancel, max_results),
                    ),
                    loop.run_in_executor(executor, self.temporal_matcher.match, source, candidates, cancel),
                    loop.run_in_executor(executor, self.semantic_matcher.match, source, candidates, cancel),
                    loop.run_in_executor(executor, self.visual_matcher.match, source, candidates, cancel),
                    loop.run_in_executor(executor, self.workflow_matcher.match, source, candidates, cancel),
                ]
                try:
                    related, temporal, semantic, visual, workflow = await asyncio.gather(*tasks)
                except BaseException:
                    # Stop the remaining matchers before the pool shuts down
                    cancel.set()
                    raise

            logger.debug(
                f"Matches: related={len(related)} temporal={len(temporal)} "
                f"semantic={len(semantic)} visual={len(visual)} workflow={len(workflow)}"
            )

            confidence = calculate_confidence(related, temporal, semantic, visual, workflow)
            analysis_time = time.time() - start_time

            result = RecommendationResult(
                source=source,
                related_content=tuple(related),
                temporal_matches=tuple(temporal),
                semantic_matches=tuple(semantic),
                visual_matches=tuple(visual),
                workflow_matches=tuple(workflow),
                confidence=confidence,
                processing_metrics=ProcessingMetrics(
                    analysis_time=analysis_time,
                    total_comparisons=len(candidates) * MATCHER_COUNT,
                    cache_hit_rate=0.0,
                    memory_usage=RECORD_SIZE_ESTIMATE * len(candidates),
                ),
            )
        except BaseException:
            self._mark_analyzing(False)
            raise

        # Clears the analyzing flag along with the new results
        self._complete_cycle(result)

        logger.info(
            f"Generated {len(related)} recommendations with {confidence:.2f} "
            f"confidence in {analysis_time:.3f}s"
        )

        return result

    def _complete_cycle(self, result: RecommendationResult) -> None:
        """Apply a finished cycle to the profile and the published state.

        Results and the end of the analysis are published together, so
        listeners never see an idle engine holding the previous results.
        """
        with self._profile_lock:
            self.profile.update(result)

        with self._state_lock:
            self._last_results = result
            for item in result.related_content:
                key = (result.source.id, item.record.id)
                self._relationships[key] = ContentRelationship(
                    source_id=result.source.id,
                    target_id=item.record.id,
                    relationship_strength=item.similarity_score,
                    relationship_types=(item.relationship_type,),
                    directional=False,
                    temporal_distance=item.temporal_proximity or 0.0,
                )
            self._temporal_patterns = tuple(m.pattern for m in result.temporal_matches)
            self._active_analyses -= 1

        self._notify()

    def _mark_analyzing(self, started: bool) -> None:
        with self._state_lock:
            self._active_analyses += 1 if started else -1
        self._notify()

    # ========== Published State ==========

    def state(self) -> EngineState:
        """Get an immutable snapshot of the published state.

        Relationships accumulate across cycles, keyed by (source, target), so a
        clustering run over N records can publish up to 50 * N edges. They are
        only dropped by cleanup_resources().
        """
        with self._state_lock:
            return EngineState(
                is_analyzing=self._active_analyses > 0,
                last_analysis_results=self._last_results,
                content_relationships=tuple(self._relationships.values()),
                temporal_patterns=self._temporal_patterns,
            )

    @property
    def is_analyzing(self) -> bool:
        return self.state().is_analyzing

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state changes.

        Returns:
            Callable that removes the listener again
        """
        with self._state_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._state_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._state_lock:
            listeners = list(self._listeners)
        if not listeners:
            return

        snapshot = self.state()
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"State listener failed: {e}")

    # ========== Resources ==========

    @property
    def memory_footprint(self) -> int:
        """Approximate bytes held by published state."""
        with self._state_lock:
            relationships = len(self._relationships) * RELATIONSHIP_SIZE_ESTIMATE
            results = RESULTS_SIZE_ESTIMATE if self._last_results is not None else 0
        return relationships + PROFILE_SIZE_ESTIMATE + results

    def cleanup_resources(self) -> None:
        """Drop published relationships, patterns and the last results."""
        with self._state_lock:
            self._relationships.clear()
            self._temporal_patterns = ()
            self._last_results = None

        logger.debug("RecommendationEngine resources cleaned up")
        self._notify()
