"""Education completion status from heterogeneous status vocabularies."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping

from workforce_report.fields import FIELD_ALIASES, normalize_text

COMPLETED_TERMS = {"수료", "완료", "이수", "complete", "completed", "o", "y", "yes"}
NOT_COMPLETED_TERMS = {"미수료", "미이수", "미완료", "해당없음", "미등록", "x", "n", "no", "none"}


class CompletionStatus(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    COMPLETE = "complete"
    IN_PROGRESS = "in-progress"


def _term(value: str) -> str:
    return normalize_text(value).replace(" ", "").casefold()


def _values_for(fields: Mapping[str, str], logical: str) -> list:
    return [fields[alias] for alias in FIELD_ALIASES[logical] if alias in fields]


def is_completed(fields: Mapping[str, str], logical: str) -> bool:
    return any(_term(value) in COMPLETED_TERMS for value in _values_for(fields, logical))


def has_unrecognized(fields: Mapping[str, str], logical: str) -> bool:
    known = COMPLETED_TERMS | NOT_COMPLETED_TERMS
    return any(_term(value) and _term(value) not in known for value in _values_for(fields, logical))


def classify_completion(fields: Mapping[str, str]) -> CompletionStatus:
    """Classify from basic and advanced training statuses.

    ``fields`` maps a field alias (``기초직무``, ``advancedEducation`` ...) to its
    raw status string. A status outside both vocabularies is reported as
    in-progress rather than folded into ``none``.
    """
    basic = is_completed(fields, "basic_education")
    advanced = is_completed(fields, "advanced_education")
    if basic and advanced:
        return CompletionStatus.COMPLETE
    if basic or advanced:
        return CompletionStatus.PARTIAL
    if has_unrecognized(fields, "basic_education") or has_unrecognized(fields, "advanced_education"):
        return CompletionStatus.IN_PROGRESS
    return CompletionStatus.NONE


def completion_counts(statuses) -> Dict[str, int]:
    counts = {status.value: 0 for status in CompletionStatus}
    for status in statuses:
        counts[CompletionStatus(status).value] += 1
    return counts
