"""
Unit tests for composite score formulas.

Tests verify:
- Standard and street-casting weights
- Half-up rounding (banker's rounding would give different totals)
- Age match scoring
- apply_composite overwrites model-proposed totals
"""
import pytest

from core.scorer.composite import (
    STANDARD_WEIGHTS,
    STREET_CASTING_WEIGHTS,
    age_match_score,
    apply_composite,
    round_half_up,
    standard_composite,
    street_casting_composite,
)
from core.scorer.models import AIAnalysis, DimensionScore, StreetCastingAnalysis


def _standard_scores(physical=80, unsigned=90, reach=60, engagement=70):
    return {
        'physical_potential': physical,
        'unsigned_probability': unsigned,
        'reachability': reach,
        'engagement_health': engagement,
    }


class TestWeights:

    def test_weights_sum_to_100(self):
        assert sum(STANDARD_WEIGHTS.values()) == 100
        assert sum(STREET_CASTING_WEIGHTS.values()) == 100


class TestRounding:

    @pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (76.49, 76), (76.5, 77)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestStandardComposite:

    def test_weighted_total(self):
        # 0.35*80 + 0.25*90 + 0.20*60 + 0.20*70 = 76.5
        assert standard_composite(_standard_scores()) == 77

    def test_deterministic(self):
        scores = _standard_scores(physical=63, unsigned=41, reach=88, engagement=12)
        assert standard_composite(scores) == standard_composite(dict(scores))

    def test_missing_dimension_counts_as_default(self):
        scores = _standard_scores()
        del scores['reachability']
        # reachability 60 -> 50 lowers the total by 2
        assert standard_composite(scores) == 75

    def test_bounds(self):
        assert standard_composite(_standard_scores(0, 0, 0, 0)) == 0
        assert standard_composite(_standard_scores(100, 100, 100, 100)) == 100


class TestStreetCastingComposite:

    def test_weighted_total(self):
        scores = {
            'unsigned_probability': 90,
            'raw_potential': 70,
            'physical_potential': 80,
            'content_authenticity': 60,
            'age_match': 100,
        }
        assert street_casting_composite(scores) == 80


class TestAgeMatch:

    @pytest.mark.parametrize("age,expected", [
        (21, 100),
        (18, 100),
        (25, 100),
        (30, 50),
        (12, 40),
        (26.5, 85),
        (40, 0),
    ])
    def test_distance_penalty(self, age, expected):
        assert age_match_score(age, (18, 25)) == expected

    def test_unknown_age(self):
        assert age_match_score(None, (18, 25)) == 50


class TestApplyComposite:

    def test_standard_overwrites_model_total(self):
        analysis = AIAnalysis(
            physical_potential=DimensionScore(score=80),
            unsigned_probability=DimensionScore(score=90),
            reachability=DimensionScore(score=60),
            engagement_health=DimensionScore(score=70),
            overall_score=99,
        )
        assert apply_composite(analysis, (18, 25)) == 77
        assert analysis.overall_score == 77

    def test_street_casting_sets_age_match_and_totals(self):
        analysis = StreetCastingAnalysis(
            physical_potential=DimensionScore(score=80),
            unsigned_probability=DimensionScore(score=90),
            raw_potential_score=70,
            content_authenticity_score=60,
            estimated_age=30,
            street_casting_score=1,
        )
        # unsigned 2700 + raw 1400 + physical 2000 + authenticity 900 + age 500 = 75
        assert apply_composite(analysis, (18, 25)) == 75
        assert analysis.age_match_score == 50
        assert analysis.street_casting_score == 75
        assert analysis.overall_score == 75
