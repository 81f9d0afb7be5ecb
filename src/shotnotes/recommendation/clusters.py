"""Greedy content clustering for ShotNotes.

Walks the corpus once, in input order. Each record not yet claimed becomes the
center of a cluster made of its related content above the similarity
threshold. Records that never clear the threshold are left out.
"""

import threading
from collections.abc import Sequence

from shotnotes.models import ClusterType, ContentCluster, Record, RecommendationResult
from shotnotes.recommendation.engine import RecommendationEngine
from shotnotes.utils.hashing import generate_group_id
from shotnotes.utils.logging import get_logger

logger = get_logger(__name__)

CLUSTER_MAX_RESULTS = 50


def determine_cluster_type(result: RecommendationResult) -> ClusterType:
    """Category with the most matches; mixed on a tie or when nothing matched."""
    counts = {
        ClusterType.TEMPORAL: len(result.temporal_matches),
        ClusterType.SEMANTIC: len(result.semantic_matches),
        ClusterType.VISUAL: len(result.visual_matches),
        ClusterType.WORKFLOW: len(result.workflow_matches),
    }
    best = max(counts.values())
    if best == 0:
        return ClusterType.MIXED

    leaders = [cluster_type for cluster_type, count in counts.items() if count == best]
    if len(leaders) > 1:
        return ClusterType.MIXED
    return leaders[0]


def temporal_span(records: Sequence[Record]) -> float:
    """Seconds between the earliest and latest record."""
    if not records:
        return 0.0
    timestamps = [r.timestamp for r in records]
    return (max(timestamps) - min(timestamps)).total_seconds()


class ClusterBuilder:
    """Partitions a corpus into relationship clusters."""

    def __init__(
        self,
        engine: RecommendationEngine | None = None,
        max_results: int = CLUSTER_MAX_RESULTS,
    ) -> None:
        self.engine = engine or RecommendationEngine()
        self.max_results = max_results

    async def find_clusters(
        self,
        records: Sequence[Record],
        cancel_event: threading.Event | None = None,
    ) -> list[ContentCluster]:
        """Find content clusters.

        Runs one recommendation cycle per unclaimed record, one after another,
        so the processed set is only ever touched by this loop.
        """
        logger.info(f"Finding content clusters in {len(records)} records")

        threshold = self.engine.settings.minimum_similarity_score
        clusters: list[ContentCluster] = []
        processed: set[str] = set()

        for record in records:
            if record.id in processed:
                continue

            result = await self.engine.generate_recommendations(
                record,
                records,
                max_results=self.max_results,
                cancel_event=cancel_event,
            )

            related = [
                item for item in result.related_content
                if item.similarity_score >= threshold and item.record.id not in processed
            ]
            if not related:
                continue

            members = [item.record for item in related]
            cluster = ContentCluster(
                id=generate_group_id("cluster", [record.id] + [m.id for m in members]),
                center=record,
                related=tuple(members),
                cluster_type=determine_cluster_type(result),
                average_similarity=sum(item.similarity_score for item in related) / len(related),
                temporal_span=temporal_span([record] + members),
            )
            clusters.append(cluster)

            # Mark all records in this cluster as processed
            processed.add(record.id)
            processed.update(m.id for m in members)

        logger.info(f"Found {len(clusters)} content clusters")
        return clusters
