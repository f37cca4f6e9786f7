"""Tests for percentile-rank scoring."""

import pandas as pd
import pytest

from workforce_report.metrics import InstitutionMetrics
from workforce_report.scoring import percentile_scores, round_half_up, score_population
from workforce_report.settings import DEFAULT_SETTINGS


def make_metrics(
    code,
    allocated_social=0,
    allocated_life=10,
    actual_social=0,
    actual_life=10,
    served=150,
    stability=0.0,
    expertise=0.0,
):
    return InstitutionMetrics(
        code=code,
        name=f"기관{code}",
        district="창원시",
        region="경남",
        allocated_social=allocated_social,
        allocated_life=allocated_life,
        actual_social=actual_social,
        actual_life=actual_life,
        served_persons=served,
        stability=stability,
        expertise=expertise,
        has_real_match=True,
        matched_persons=actual_social + actual_life,
    )


class TestPercentile:
    """Test the percentile formula and rounding."""

    def test_smaller_is_better_with_ties(self):
        scores = percentile_scores(pd.Series([0.0, 5.0, 5.0, 10.0]), larger_is_better=False)
        assert scores.tolist() == [100, 75, 75, 25]

    def test_larger_is_better(self):
        scores = percentile_scores(pd.Series([0.5, 0.2, 0.9]), larger_is_better=True)
        assert scores.tolist() == [67, 33, 100]

    def test_single_member_scores_full(self):
        assert percentile_scores(pd.Series([42.0]), larger_is_better=True).tolist() == [100]

    @pytest.mark.parametrize("value,expected", [(84.5, 85), (2.5, 3), (84.49, 84), (72.50000000000001, 73), (0.0, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestScorePopulation:
    """Test sub-scores, composite and ranking over a population."""

    def test_balance_prefers_ideal_ratio(self):
        """Verify 1 of 17 staff as social workers beats 1 of 6 at equal fill rates."""
        near_ideal = make_metrics("A", 1, 16, 1, 16, served=240)
        heavy = make_metrics("B", 1, 5, 1, 5, served=75)
        scored = {item.metrics.code: item for item in score_population([near_ideal, heavy])}
        assert scored["A"].fill_rate_score == scored["B"].fill_rate_score == 100
        assert scored["A"].balance_score == 100
        assert scored["B"].balance_score == 50
        assert scored["A"].balance_score > scored["B"].balance_score

    def test_dominant_institution(self):
        """Verify the composite of an institution better on every sub-score."""
        best = make_metrics("A", 1, 16, 1, 16, served=240, stability=1.0, expertise=1.0)
        worst = make_metrics("B", 1, 16, 1, 8, served=240)
        scored = score_population([worst, best])
        assert [item.metrics.code for item in scored] == ["A", "B"]
        assert scored[0].composite == 100
        assert scored[1].composite == 50
        assert scored[1].sub_scores == {
            "fill_rate": 50,
            "balance": 50,
            "stability": 50,
            "expertise": 50,
            "service": 50,
        }
        assert [item.rank for item in scored] == [1, 2]

    def test_scores_within_bounds(self):
        population = [
            make_metrics(str(i), 1, 10 + i, 1, 8 + (i % 4), served=100 + 7 * i, stability=i / 10, expertise=(i % 3) / 2)
            for i in range(10)
        ]
        for item in score_population(population):
            assert 0 <= item.composite <= 100
            for value in item.sub_scores.values():
                assert 0 <= value <= 100

    def test_population_sensitivity(self):
        """Verify removing one institution changes the remaining scores."""
        p = make_metrics("P", actual_life=10)
        q = make_metrics("Q", actual_life=9)
        r = make_metrics("R", actual_life=8)
        with_all = {item.metrics.code: item for item in score_population([p, q, r])}
        without_p = {item.metrics.code: item for item in score_population([q, r])}
        assert with_all["Q"].fill_rate_score == 67
        assert without_p["Q"].fill_rate_score == 100

    def test_stable_ties(self):
        """Verify equal composites keep input order."""
        scored = score_population([make_metrics("X"), make_metrics("Y"), make_metrics("Z")])
        assert [item.metrics.code for item in scored] == ["X", "Y", "Z"]
        assert {item.composite for item in scored} == {100}
        assert [item.rank for item in scored] == [1, 2, 3]

    def test_zero_allocation_excluded(self):
        scored = score_population([make_metrics("A"), make_metrics("Z", allocated_life=0)])
        assert [item.metrics.code for item in scored] == ["A"]
        assert scored[0].fill_rate_score == 100

    def test_empty_population(self):
        assert score_population([]) == []
        assert score_population([make_metrics("Z", allocated_life=0)]) == []

    def test_custom_weights(self):
        """Verify the composite follows configured weights."""
        weights = {"fill_rate": 1.0, "balance": 0.0, "stability": 0.0, "expertise": 0.0, "service": 0.0}
        settings = DEFAULT_SETTINGS.with_overrides(weights=weights)
        scored = score_population([make_metrics("A", actual_life=9), make_metrics("B")], settings)
        assert [(item.metrics.code, item.composite) for item in scored] == [("B", 100), ("A", 50)]
