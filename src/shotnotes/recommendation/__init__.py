"""ShotNotes Recommendation Engine.

Relates screenshots to each other to:
- Score multi-signal similarity
- Classify relationship types
- Produce ranked, explained recommendations
- Partition a corpus into content clusters
"""

from shotnotes.recommendation.classifier import RelationshipClassifier
from shotnotes.recommendation.clusters import ClusterBuilder
from shotnotes.recommendation.engine import EngineState, RecommendationEngine
from shotnotes.recommendation.matchers import AnalysisCancelled
from shotnotes.recommendation.profile import DiscoveryProfile
from shotnotes.recommendation.similarity import SimilarityScorer, jaccard

__all__ = [
    "AnalysisCancelled",
    "ClusterBuilder",
    "DiscoveryProfile",
    "EngineState",
    "RecommendationEngine",
    "RelationshipClassifier",
    "SimilarityScorer",
    "jaccard",
]
