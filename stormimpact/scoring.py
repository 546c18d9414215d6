"""
Scoring and ranking of event types.

Health score:   fatality_weight * mean fatalities + mean injuries
Economic score: mean property damage + mean crop damage

Two summaries are combined over the union of their keys; an event type
missing from one side contributes 0 for that side.
"""
import logging
from typing import Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


DEFAULT_FATALITY_WEIGHT = 2.0
DEFAULT_TOP_N = 5

RankedList = List[Tuple[Optional[str], float]]


def full_outer_join(
    left: Mapping[Optional[str], float],
    right: Mapping[Optional[str], float],
) -> Iterator[Tuple[Optional[str], float, float]]:
    """
    Iterate over the union of keys of two summaries.

    Keys come in first-seen order: every key of left, then the keys only
    present in right.

    Yields:
        (key, left value or 0, right value or 0)
    """
    for key in left:
        yield key, left[key], right.get(key, 0.0)
    for key in right:
        if key not in left:
            yield key, 0.0, right[key]


def rank_scores(scores: List[Tuple[Optional[str], float]]) -> RankedList:
    """Sort descending by score, keeping input order for ties."""
    return sorted(scores, key=lambda item: item[1], reverse=True)


def top_n(ranked: RankedList, n: int = DEFAULT_TOP_N) -> RankedList:
    """First n entries of a ranked list."""
    if n < 0:
        raise ValueError(f"top_n must be >= 0, got {n}")
    return ranked[:n]


def score_health(
    fatalities: Mapping[Optional[str], float],
    injuries: Mapping[Optional[str], float],
    fatality_weight: float = DEFAULT_FATALITY_WEIGHT,
) -> RankedList:
    """
    Rank event types by harm to population health.

    Args:
        fatalities: Mean fatalities per event type
        injuries: Mean injuries per event type
        fatality_weight: Multiplier on mean fatalities

    Returns:
        Ranked (event type, score) pairs
    """
    scores = [
        (event_type, fatality_weight * fatality_mean + injury_mean)
        for event_type, fatality_mean, injury_mean in full_outer_join(fatalities, injuries)
    ]
    logger.info(f"Scored {len(scores)} event types for health impact")
    return rank_scores(scores)


def score_economic(
    property_damage: Mapping[Optional[str], float],
    crop_damage: Mapping[Optional[str], float],
) -> RankedList:
    """
    Rank event types by economic damage.

    Args:
        property_damage: Mean property damage per event type
        crop_damage: Mean crop damage per event type

    Returns:
        Ranked (event type, score) pairs
    """
    scores = [
        (event_type, property_mean + crop_mean)
        for event_type, property_mean, crop_mean in full_outer_join(property_damage, crop_damage)
    ]
    logger.info(f"Scored {len(scores)} event types for economic impact")
    return rank_scores(scores)


class Scorer:
    """Scores and truncates rankings using a fixed weighting policy."""

    def __init__(
        self,
        fatality_weight: float = DEFAULT_FATALITY_WEIGHT,
        top_n: int = DEFAULT_TOP_N,
    ):
        if top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {top_n}")
        self.fatality_weight = fatality_weight
        self.top_n = top_n

    def health_scores(self, fatalities, injuries) -> RankedList:
        return score_health(fatalities, injuries, self.fatality_weight)

    def economic_scores(self, property_damage, crop_damage) -> RankedList:
        return score_economic(property_damage, crop_damage)

    def health_ranking(self, fatalities, injuries) -> RankedList:
        return self.truncate(self.health_scores(fatalities, injuries))

    def economic_ranking(self, property_damage, crop_damage) -> RankedList:
        return self.truncate(self.economic_scores(property_damage, crop_damage))

    def truncate(self, ranked: RankedList) -> RankedList:
        return top_n(ranked, self.top_n)
