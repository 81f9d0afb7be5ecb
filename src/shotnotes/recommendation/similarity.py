"""Pairwise similarity scoring for ShotNotes.

Combines up to four signals into one score in [0, 1]:
- Text (word-set Jaccard)
- Visual (coarse color and layout proxies)
- Temporal proximity within a sliding window
- Tags (tag-set Jaccard)

A signal only takes part when both records carry the data it needs, and the
fused score is normalised by the weights that actually took part.
"""

from collections.abc import Iterable

from shotnotes.models import Record, VisualAttributes

# Signal weights
TEXT_WEIGHT = 0.4
VISUAL_WEIGHT = 0.3
TEMPORAL_WEIGHT = 0.2
TAG_WEIGHT = 0.1

SECONDS_PER_DAY = 24 * 3600

# Same-kind (document vs. photo) stands in for a color distance
SAME_KIND_COLOR_SCORE = 0.8
DIFFERENT_KIND_COLOR_SCORE = 0.2


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B|, 0.0 when both are empty."""
    set_a = set(a)
    set_b = set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def tokenize(text: str) -> set[str]:
    """Lowercased whitespace-separated words."""
    return set(text.lower().split())


def time_delta(a: Record, b: Record) -> float:
    """Absolute time between two records in seconds."""
    return abs((a.timestamp - b.timestamp).total_seconds())


class SimilarityScorer:
    """Scores how alike two records are."""

    def __init__(self, temporal_window_days: int = 30) -> None:
        self.temporal_window_days = temporal_window_days

    @property
    def window_seconds(self) -> float:
        return self.temporal_window_days * SECONDS_PER_DAY

    def text_similarity(self, a: Record, b: Record) -> float:
        """Word overlap of the extracted text; 0.0 if either side has none."""
        if not a.extracted_text or not b.extracted_text:
            return 0.0
        return jaccard(tokenize(a.extracted_text), tokenize(b.extracted_text))

    def tag_similarity(self, a: Record, b: Record) -> float:
        if not a.tags or not b.tags:
            return 0.0
        return jaccard(
            {t.lower() for t in a.tags},
            {t.lower() for t in b.tags},
        )

    def temporal_similarity(self, a: Record, b: Record) -> float:
        return max(0.0, 1.0 - time_delta(a, b) / self.window_seconds)

    @staticmethod
    def color_similarity(v1: VisualAttributes, v2: VisualAttributes) -> float:
        """Coarse color proxy.

        Compares the document flag rather than real color histograms.
        """
        if v1.is_document == v2.is_document:
            return SAME_KIND_COLOR_SCORE
        return DIFFERENT_KIND_COLOR_SCORE

    @staticmethod
    def layout_similarity(v1: VisualAttributes, v2: VisualAttributes) -> float:
        """Layout proxy based on the number of prominent objects."""
        c1 = v1.prominent_object_count
        c2 = v2.prominent_object_count

        if c1 == 0 and c2 == 0:
            return 1.0
        if c1 == 0 or c2 == 0:
            return 0.0

        return max(0.0, 1.0 - abs(c1 - c2) / max(c1, c2))

    def visual_similarity(self, v1: VisualAttributes, v2: VisualAttributes) -> float:
        return (self.color_similarity(v1, v2) + self.layout_similarity(v1, v2)) / 2.0

    def overall_similarity(self, a: Record, b: Record) -> float:
        """Weighted fusion of every signal both records support."""
        total = 0.0
        weights = 0.0

        if a.extracted_text and b.extracted_text:
            total += self.text_similarity(a, b) * TEXT_WEIGHT
            weights += TEXT_WEIGHT

        if a.visual_attributes is not None and b.visual_attributes is not None:
            total += self.visual_similarity(a.visual_attributes, b.visual_attributes) * VISUAL_WEIGHT
            weights += VISUAL_WEIGHT

        # Temporal proximity always takes part
        total += self.temporal_similarity(a, b) * TEMPORAL_WEIGHT
        weights += TEMPORAL_WEIGHT

        if a.tags and b.tags:
            total += self.tag_similarity(a, b) * TAG_WEIGHT
            weights += TAG_WEIGHT

        if weights <= 0:
            return 0.0
        return min(1.0, max(0.0, total / weights))
