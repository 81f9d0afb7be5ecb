"""Discovery profile: per-user preference weights for recommendations.

The profile lives for the lifetime of the process. It is seeded with neutral
weights and touched after every completed recommendation cycle; the weights
themselves are not learned yet.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from shotnotes.models import RecommendationResult, RelationshipType, TemporalPatternType

NEUTRAL_WEIGHT = 0.5


def _neutral_relationship_weights() -> dict[RelationshipType, float]:
    return {t: NEUTRAL_WEIGHT for t in RelationshipType}


def _neutral_temporal_weights() -> dict[TemporalPatternType, float]:
    return {t: NEUTRAL_WEIGHT for t in TemporalPatternType}


@dataclass
class DiscoveryProfile:
    """Preference state consulted across the engine."""
    preferred_relationship_types: dict[RelationshipType, float] = field(
        default_factory=_neutral_relationship_weights
    )
    temporal_preferences: dict[TemporalPatternType, float] = field(
        default_factory=_neutral_temporal_weights
    )
    interaction_history: dict[str, int] = field(default_factory=dict)
    discovery_success_rate: float = 0.0
    average_exploration_depth: int = 3
    last_update: datetime = field(default_factory=datetime.now)

    def update(self, result: RecommendationResult) -> None:
        """Record that a recommendation cycle completed.

        Only the timestamp moves for now; user feedback is what would drive
        the weights.
        """
        self.last_update = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "preferred_relationship_types": {
                t.value: w for t, w in self.preferred_relationship_types.items()
            },
            "temporal_preferences": {
                t.value: w for t, w in self.temporal_preferences.items()
            },
            "interaction_history": dict(self.interaction_history),
            "discovery_success_rate": self.discovery_success_rate,
            "average_exploration_depth": self.average_exploration_depth,
            "last_update": self.last_update.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscoveryProfile":
        profile = cls()
        for key, weight in data.get("preferred_relationship_types", {}).items():
            profile.preferred_relationship_types[RelationshipType(key)] = float(weight)
        for key, weight in data.get("temporal_preferences", {}).items():
            profile.temporal_preferences[TemporalPatternType(key)] = float(weight)
        profile.interaction_history = dict(data.get("interaction_history", {}))
        profile.discovery_success_rate = float(data.get("discovery_success_rate", 0.0))
        profile.average_exploration_depth = int(data.get("average_exploration_depth", 3))
        if data.get("last_update"):
            profile.last_update = datetime.fromisoformat(data["last_update"])
        return profile
