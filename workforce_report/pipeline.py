"""End-to-end reconciliation: match, deduplicate, aggregate and score."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from workforce_report.activity import is_active
from workforce_report.completion import CompletionStatus, classify_completion
from workforce_report.dedup import MatchGroup, deduplicate
from workforce_report.matching import match_all
from workforce_report.metrics import InstitutionMetrics, aggregate_metrics
from workforce_report.models import (
    SOURCE_EMPLOYEE,
    SOURCE_PARTICIPANT,
    Institution,
    Person,
    build_institutions,
    build_persons,
)
from workforce_report.scoring import ScoredInstitution, is_eligible, score_population
from workforce_report.settings import DEFAULT_SETTINGS, Settings


@dataclass(frozen=True)
class PersonEducationStatus:
    name: str
    resident_id: str
    institution_code: str
    institution_name: str
    job_type: str
    source: str
    method: str
    status: CompletionStatus


@dataclass(frozen=True)
class Diagnostics:
    employee_count: int = 0
    participant_count: int = 0
    nameless_skipped: int = 0
    raw_match_count: int = 0
    unique_match_count: int = 0
    duplicate_count: int = 0
    rejected_without_id: int = 0
    unmatched_count: int = 0
    ambiguous_matches: int = 0
    active_count: int = 0
    matches_by_method: Dict[str, int] = field(default_factory=dict)
    population_size: int = 0
    excluded_institutions: Tuple[str, ...] = ()
    duplicate_institution_codes: Tuple[str, ...] = ()

    def as_dict(self) -> dict:
        return {
            "employee_count": self.employee_count,
            "participant_count": self.participant_count,
            "nameless_skipped": self.nameless_skipped,
            "raw_match_count": self.raw_match_count,
            "unique_match_count": self.unique_match_count,
            "duplicate_count": self.duplicate_count,
            "rejected_without_id": self.rejected_without_id,
            "unmatched_count": self.unmatched_count,
            "ambiguous_matches": self.ambiguous_matches,
            "active_count": self.active_count,
            "matches_by_method": dict(self.matches_by_method),
            "population_size": self.population_size,
            "excluded_institutions": list(self.excluded_institutions),
            "duplicate_institution_codes": list(self.duplicate_institution_codes),
        }


@dataclass(frozen=True)
class ReconciliationReport:
    scored: List[ScoredInstitution]
    education: List[PersonEducationStatus]
    metrics: List[InstitutionMetrics]
    unmatched: List[Person]
    institutions: List[Institution]
    diagnostics: Diagnostics


def group_is_active(group: MatchGroup, as_of: date) -> bool:
    """A termination recorded in any roster ends the person's activity."""
    return all(is_active(member.person, as_of) for member in group.members)


def education_status(group: MatchGroup) -> PersonEducationStatus:
    person = group.match.person
    return PersonEducationStatus(
        name=person.name,
        resident_id=person.resident_id,
        institution_code=group.match.institution.code,
        institution_name=group.match.institution.name,
        job_type=person.job_type,
        source=person.source,
        method=group.match.method,
        status=classify_completion(group.education_fields),
    )


def build_report(
    employees: Sequence,
    participants: Sequence,
    institutions: Sequence,
    as_of: date,
    settings: Settings = DEFAULT_SETTINGS,
    population_filter: Optional[Callable[[InstitutionMetrics], bool]] = None,
) -> ReconciliationReport:
    """Reconcile the three rosters of one snapshot and score the institutions.

    Parameters
    ----------
    employees, participants:
        Raw roster rows (mappings) or already built :class:`Person` objects.
    institutions:
        Raw registry rows or :class:`Institution` objects.
    as_of:
        Snapshot date used for activity and tenure.
    population_filter:
        Optional predicate restricting the scored population, e.g. to drop
        closed institutions. Ranks are computed over the filtered population.
    """
    registry, duplicate_codes = build_institutions(institutions)
    employee_persons = build_persons(employees, SOURCE_EMPLOYEE)
    participant_persons = build_persons(participants, SOURCE_PARTICIPANT)
    persons = [person for person in employee_persons + participant_persons if person.name]
    nameless = len(employee_persons) + len(participant_persons) - len(persons)

    matches, unmatched = match_all(persons, registry, settings)
    dedup = deduplicate(matches, require_secondary_id=settings.require_secondary_id)
    active_groups = [group for group in dedup.groups if group_is_active(group, as_of)]

    metrics = aggregate_metrics(registry, active_groups, as_of, settings)
    population = [item for item in metrics if population_filter is None or population_filter(item)]
    scored = score_population(population, settings)
    excluded = tuple(item.code or item.name for item in population if not is_eligible(item))

    diagnostics = Diagnostics(
        employee_count=len(employee_persons),
        participant_count=len(participant_persons),
        nameless_skipped=nameless,
        raw_match_count=dedup.raw_count,
        unique_match_count=dedup.unique_count,
        duplicate_count=dedup.duplicate_count,
        rejected_without_id=dedup.rejected_count,
        unmatched_count=len(unmatched),
        ambiguous_matches=sum(1 for match in matches if match.ambiguous),
        active_count=len(active_groups),
        matches_by_method=dict(Counter(match.method for match in matches)),
        population_size=len(scored),
        excluded_institutions=excluded,
        duplicate_institution_codes=tuple(duplicate_codes),
    )
    return ReconciliationReport(
        scored=scored,
        education=[education_status(group) for group in active_groups],
        metrics=metrics,
        unmatched=unmatched,
        institutions=registry,
        diagnostics=diagnostics,
    )
