"""Population filters and tabular views of a reconciliation report."""
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence

import pandas as pd

from workforce_report.matching import suggest_candidates
from workforce_report.metrics import InstitutionMetrics
from workforce_report.models import Institution, Person
from workforce_report.pipeline import PersonEducationStatus
from workforce_report.scoring import ScoredInstitution

SCORE_COLUMNS = [
    "rank",
    "code",
    "name",
    "district",
    "composite",
    "fill_rate_score",
    "balance_score",
    "stability_score",
    "expertise_score",
    "service_score",
    "fill_rate",
    "allocated_total",
    "actual_total",
    "actual_social",
    "actual_life",
    "has_real_match",
]


def population_filter(
    exclude_closed: bool = False,
    districts: Optional[Iterable[str]] = None,
) -> Optional[Callable[[InstitutionMetrics], bool]]:
    """Build a predicate for :func:`build_report`, or ``None`` for no filter."""
    selected = set(districts or [])
    if not exclude_closed and not selected:
        return None

    def keep(metrics: InstitutionMetrics) -> bool:
        if exclude_closed and metrics.closed:
            return False
        if selected and metrics.district not in selected:
            return False
        return True

    return keep


def scores_frame(scored: Sequence[ScoredInstitution]) -> pd.DataFrame:
    """Ranked institutions as a dataframe, one row per institution."""
    rows = []
    for item in scored:
        metrics = item.metrics
        rows.append(
            {
                "rank": item.rank,
                "code": metrics.code,
                "name": metrics.name,
                "district": metrics.district,
                "composite": item.composite,
                "fill_rate_score": item.fill_rate_score,
                "balance_score": item.balance_score,
                "stability_score": item.stability_score,
                "expertise_score": item.expertise_score,
                "service_score": item.service_score,
                "fill_rate": round(metrics.fill_rate, 1),
                "allocated_total": metrics.allocated_total,
                "actual_total": metrics.actual_total,
                "actual_social": metrics.actual_social,
                "actual_life": metrics.actual_life,
                "has_real_match": metrics.has_real_match,
            }
        )
    return pd.DataFrame(rows, columns=SCORE_COLUMNS)


def education_frame(statuses: Sequence[PersonEducationStatus]) -> pd.DataFrame:
    rows = [
        {
            "name": status.name,
            "resident_id": status.resident_id,
            "institution_code": status.institution_code,
            "institution_name": status.institution_name,
            "job_type": status.job_type,
            "source": status.source,
            "method": status.method,
            "status": status.status.value,
        }
        for status in statuses
    ]
    return pd.DataFrame(
        rows,
        columns=["name", "resident_id", "institution_code", "institution_name", "job_type", "source", "method", "status"],
    )


def district_summary(metrics: Sequence[InstitutionMetrics]) -> pd.DataFrame:
    """Allocated and actual headcounts per district with the fill rate.

    Parameters
    ----------
    metrics:
        Raw inventory, zero-allocation institutions included.
    """
    columns = ["district", "institutions", "allocated", "actual", "fill_rate"]
    if not metrics:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(
        {
            "district": [item.district or "미분류" for item in metrics],
            "allocated": [item.allocated_total for item in metrics],
            "actual": [item.actual_total for item in metrics],
        }
    )
    grouped = df.groupby("district", as_index=False).agg(
        institutions=("allocated", "size"),
        allocated=("allocated", "sum"),
        actual=("actual", "sum"),
    )
    grouped["fill_rate"] = [
        round(actual / allocated * 100, 1) if allocated else 0.0
        for actual, allocated in zip(grouped["actual"], grouped["allocated"])
    ]
    return grouped[columns]


def review_frame(unmatched: Sequence[Person], institutions: Sequence[Institution]) -> pd.DataFrame:
    """Unmatched persons with their closest institution names for manual review."""
    rows: List[dict] = []
    for person in unmatched:
        suggestions = suggest_candidates(person, institutions)
        if not suggestions:
            rows.append(_review_row(person, None, None))
        for institution, score in suggestions:
            rows.append(_review_row(person, institution, score))
    return pd.DataFrame(
        rows,
        columns=[
            "name",
            "source",
            "row",
            "institution_name_raw",
            "district_raw",
            "candidate_code",
            "candidate_name",
            "candidate_score",
        ],
    )


def _review_row(person: Person, institution: Optional[Institution], score: Optional[float]) -> dict:
    return {
        "name": person.name,
        "source": person.source,
        "row": person.row,
        "institution_name_raw": person.institution_name_raw,
        "district_raw": person.district_raw,
        "candidate_code": institution.code if institution else None,
        "candidate_name": institution.name if institution else None,
        "candidate_score": round(score, 1) if score is not None else None,
    }
