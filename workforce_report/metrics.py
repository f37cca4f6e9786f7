"""Per-institution staffing metrics from reconciled matches."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Sequence

from workforce_report.activity import has_min_tenure
from workforce_report.dedup import MatchGroup
from workforce_report.fields import normalize_text
from workforce_report.models import SENIOR_CASE_WORKER, Institution, Person
from workforce_report.settings import DEFAULT_SETTINGS, Settings

EXPERIENCED_MARKERS = ("경력", "4년이상", "experienced")
NEWCOMER_MARKERS = ("신규", "new")


@dataclass(frozen=True)
class InstitutionMetrics:
    code: str
    name: str
    district: str
    region: str
    allocated_social: int
    allocated_life: int
    actual_social: int
    actual_life: int
    served_persons: int
    stability: float
    expertise: float
    has_real_match: bool
    matched_persons: int
    closed: bool = False

    @property
    def allocated_total(self) -> int:
        return self.allocated_social + self.allocated_life

    @property
    def actual_total(self) -> int:
        return self.actual_social + self.actual_life

    @property
    def fill_rate(self) -> float:
        if self.allocated_total <= 0:
            return 0.0
        return self.actual_total / self.allocated_total * 100

    @property
    def social_ratio(self) -> float:
        if self.actual_total <= 0:
            return 0.0
        return self.actual_social / self.actual_total

    @property
    def service_ratio(self) -> float:
        if self.actual_life <= 0:
            return 0.0
        return self.served_persons / self.actual_life


def is_experienced(person: Person) -> bool:
    if person.job_type == SENIOR_CASE_WORKER:
        return True
    marker = normalize_text(person.career_type).replace(" ", "").casefold()
    if any(token in marker for token in NEWCOMER_MARKERS):
        return False
    return any(token in marker for token in EXPERIENCED_MARKERS)


def _fraction(count: int, total: int) -> float:
    return count / total if total else 0.0


def institution_metrics(
    institution: Institution,
    groups: Sequence[MatchGroup],
    as_of: date,
    settings: Settings = DEFAULT_SETTINGS,
) -> InstitutionMetrics:
    """Aggregate one institution from its active, deduplicated matches.

    Without any reconciled person the headcounts fall back to the registry's
    hired counts and ``has_real_match`` is ``False``; tenure and expertise
    then have no person data and stay at zero.
    """
    allocated_social, allocated_life = institution.allocation(settings.allocation_basis)
    persons = [group.match.person for group in groups]
    social = [person for person in persons if person.is_social_worker]
    life = [person for person in persons if person.is_life_support]
    staff = social + life
    if persons:
        actual_social, actual_life = len(social), len(life)
        stability = _fraction(
            sum(1 for person in staff if has_min_tenure(person, as_of, settings.min_tenure_years)),
            len(staff),
        )
        expertise = _fraction(sum(1 for person in social if is_experienced(person)), len(social))
    else:
        actual_social = institution.hired_social_workers
        actual_life = institution.hired_life_support
        stability = 0.0
        expertise = 0.0
    return InstitutionMetrics(
        code=institution.code,
        name=institution.name,
        district=institution.district,
        region=institution.region,
        allocated_social=allocated_social,
        allocated_life=allocated_life,
        actual_social=actual_social,
        actual_life=actual_life,
        served_persons=institution.served_persons,
        stability=stability,
        expertise=expertise,
        has_real_match=bool(persons),
        matched_persons=len(persons),
        closed=institution.closed,
    )


def group_by_institution(groups: Sequence[MatchGroup]) -> Dict[int, List[MatchGroup]]:
    """Index groups by the identity of their matched institution object."""
    grouped: Dict[int, List[MatchGroup]] = defaultdict(list)
    for group in groups:
        grouped[id(group.match.institution)].append(group)
    return grouped


def aggregate_metrics(
    institutions: Sequence[Institution],
    groups: Sequence[MatchGroup],
    as_of: date,
    settings: Settings = DEFAULT_SETTINGS,
) -> List[InstitutionMetrics]:
    grouped = group_by_institution(groups)
    return [
        institution_metrics(institution, grouped.get(id(institution), []), as_of, settings)
        for institution in institutions
    ]
