"""Relationship classification and explanation for related records."""

from shotnotes.models import FeatureType, MatchingFeature, Record, RelationshipType
from shotnotes.recommendation.similarity import SimilarityScorer, time_delta

TEMPORAL_RELATION_SECONDS = 3600
SEMANTIC_RELATION_THRESHOLD = 0.7
TEXT_FEATURE_THRESHOLD = 0.3


class RelationshipClassifier:
    """Labels why two records are related."""

    def __init__(self, scorer: SimilarityScorer | None = None) -> None:
        self.scorer = scorer or SimilarityScorer()

    def classify(self, a: Record, b: Record) -> RelationshipType:
        """First matching rule wins: close in time, then near-identical text."""
        if time_delta(a, b) < TEMPORAL_RELATION_SECONDS:
            return RelationshipType.TEMPORAL

        if self.scorer.text_similarity(a, b) > SEMANTIC_RELATION_THRESHOLD:
            return RelationshipType.SEMANTIC

        return RelationshipType.CONTEXTUAL

    def matching_features(self, a: Record, b: Record) -> list[MatchingFeature]:
        features = []

        text_similarity = self.scorer.text_similarity(a, b)
        if text_similarity > TEXT_FEATURE_THRESHOLD:
            features.append(MatchingFeature(
                feature_type=FeatureType.TEXT,
                similarity=text_similarity,
                description="Similar text content",
            ))

        return features

    @staticmethod
    def shared_entities(a: Record, b: Record) -> list[str]:
        """Named entities present on both records, compared case-insensitively."""
        if not a.entities or not b.entities:
            return []

        other = {e.lower() for e in b.entities}
        return sorted({e.lower() for e in a.entities if e.lower() in other})

    @staticmethod
    def explain(score: float) -> str:
        # TODO: describe the strongest matching feature instead of a score tier
        if score > 0.8:
            return "Very similar content and context"
        if score > 0.6:
            return "Similar themes and elements"
        return "Some shared characteristics"
