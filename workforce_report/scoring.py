"""Percentile-rank scoring of institutions within the current population."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from workforce_report.metrics import InstitutionMetrics
from workforce_report.settings import DEFAULT_SETTINGS, Settings

# (sub-score, larger raw value is better)
SUB_SCORES: Tuple[Tuple[str, bool], ...] = (
    ("fill_rate", False),
    ("balance", False),
    ("stability", True),
    ("expertise", True),
    ("service", False),
)


@dataclass(frozen=True)
class ScoredInstitution:
    metrics: InstitutionMetrics
    fill_rate_score: int
    balance_score: int
    stability_score: int
    expertise_score: int
    service_score: int
    composite: int
    rank: int = 0

    @property
    def has_real_match(self) -> bool:
        return self.metrics.has_real_match

    @property
    def sub_scores(self) -> Dict[str, int]:
        return {
            "fill_rate": self.fill_rate_score,
            "balance": self.balance_score,
            "stability": self.stability_score,
            "expertise": self.expertise_score,
            "service": self.service_score,
        }


def round_half_up(value: float) -> int:
    # Trim float noise so 84.4999999999 from weighted sums rounds as 84.5.
    return int(math.floor(round(value, 9) + 0.5))


def is_eligible(metrics: InstitutionMetrics) -> bool:
    return metrics.allocated_total > 0


def raw_metrics(metrics: InstitutionMetrics, settings: Settings = DEFAULT_SETTINGS) -> Dict[str, float]:
    """Raw values ranked by each sub-score."""
    return {
        "fill_rate": abs(metrics.fill_rate - 100.0),
        "balance": abs(metrics.social_ratio - settings.ideal_ratio),
        "stability": metrics.stability,
        "expertise": metrics.expertise,
        "service": abs(metrics.service_ratio - settings.service_target),
    }


def percentile_scores(values: pd.Series, larger_is_better: bool) -> pd.Series:
    """Score each value as ``round((N - r) / N * 100)``.

    ``r`` is the number of values strictly better. A minimum-method rank in the
    "better first" direction equals ``r + 1`` for every member of a tie.
    """
    size = len(values)
    if size == 0:
        return values.astype(int)
    better_count = values.rank(method="min", ascending=not larger_is_better) - 1
    return ((size - better_count) / size * 100).map(round_half_up).astype(int)


def score_population(
    population: Sequence[InstitutionMetrics],
    settings: Settings = DEFAULT_SETTINGS,
) -> List[ScoredInstitution]:
    """Score and rank the eligible institutions of ``population``.

    Institutions without allocation are left out. Every call ranks from
    scratch against exactly the population passed in; ties on the composite
    keep input order.
    """
    eligible = [metrics for metrics in population if is_eligible(metrics)]
    if not eligible:
        return []
    frame = pd.DataFrame([raw_metrics(metrics, settings) for metrics in eligible])
    scores = pd.DataFrame(
        {name: percentile_scores(frame[name], larger) for name, larger in SUB_SCORES}
    )
    composite = sum(scores[name] * settings.weight(name) for name, _ in SUB_SCORES)
    scored = [
        ScoredInstitution(
            metrics=metrics,
            fill_rate_score=int(scores.at[i, "fill_rate"]),
            balance_score=int(scores.at[i, "balance"]),
            stability_score=int(scores.at[i, "stability"]),
            expertise_score=int(scores.at[i, "expertise"]),
            service_score=int(scores.at[i, "service"]),
            composite=round_half_up(float(composite[i])),
        )
        for i, metrics in enumerate(eligible)
    ]
    ranked = sorted(scored, key=lambda item: -item.composite)
    return [
        replace(item, rank=position)
        for position, item in enumerate(ranked, start=1)
    ]
