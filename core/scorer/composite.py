#!/usr/bin/env python3
"""
Composite Scores - Deterministic weighted totals from dimension scores.

Standard:
    composite = 0.35*physical + 0.25*unsigned + 0.20*reachability + 0.20*engagement

Street casting:
    composite = 0.30*unsigned + 0.20*raw_potential + 0.25*physical
              + 0.15*authenticity + 0.10*age_match

Weights are integer percentages so the weighted sum is exact and
half-up rounding is stable.
"""

from typing import Dict, Optional, Tuple

from core.scorer.models import (
    AIAnalysis,
    StreetCastingAnalysis,
    DEFAULT_DIMENSION_SCORE,
)

STANDARD_WEIGHTS: Dict[str, int] = {
    'physical_potential': 35,
    'unsigned_probability': 25,
    'reachability': 20,
    'engagement_health': 20,
}

STREET_CASTING_WEIGHTS: Dict[str, int] = {
    'unsigned_probability': 30,
    'raw_potential': 20,
    'physical_potential': 25,
    'content_authenticity': 15,
    'age_match': 10,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (Python's round() is banker's)."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def _weighted(scores: Dict[str, Optional[float]], weights: Dict[str, int]) -> int:
    total = 0.0
    for name, weight in weights.items():
        score = scores.get(name)
        total += weight * (DEFAULT_DIMENSION_SCORE if score is None else score)
    return round_half_up(total / 100)


def standard_composite(scores: Dict[str, Optional[float]]) -> int:
    """Weighted standard composite; missing dimensions count as 50."""
    return _weighted(scores, STANDARD_WEIGHTS)


def street_casting_composite(scores: Dict[str, Optional[float]]) -> int:
    """Weighted street-casting composite; missing dimensions count as 50."""
    return _weighted(scores, STREET_CASTING_WEIGHTS)


def age_match_score(estimated_age: Optional[float], age_range: Tuple[int, int]) -> int:
    """
    How well an estimated age fits the target range.

    Args:
        estimated_age: Model's age estimate, None when unknown
        age_range: Inclusive (min, max) target ages

    Returns:
        100 inside the range, otherwise 100 - 10 per year outside (floor 0);
        50 when the age is unknown.
    """
    if estimated_age is None:
        return DEFAULT_DIMENSION_SCORE
    low, high = age_range
    if estimated_age < low:
        distance = low - estimated_age
    elif estimated_age > high:
        distance = estimated_age - high
    else:
        return 100
    return max(0, round_half_up(100 - 10 * distance))


def apply_composite(analysis: AIAnalysis, age_range: Tuple[int, int]) -> int:
    """
    Recompute the composite and overwrite any model-proposed total in place.

    Returns:
        The composite score.
    """
    scores = {
        'physical_potential': analysis.physical_potential.score,
        'unsigned_probability': analysis.unsigned_probability.score,
        'reachability': analysis.reachability.score,
        'engagement_health': analysis.engagement_health.score,
    }

    if isinstance(analysis, StreetCastingAnalysis):
        analysis.age_match_score = age_match_score(analysis.estimated_age, age_range)
        scores.update(
            raw_potential=analysis.raw_potential_score,
            content_authenticity=analysis.content_authenticity_score,
            age_match=analysis.age_match_score,
        )
        composite = street_casting_composite(scores)
        analysis.street_casting_score = composite
        analysis.overall_score = composite
        return composite

    composite = standard_composite(scores)
    analysis.overall_score = composite
    return composite
