"""Employment status and tenure as of the snapshot date.

Dates fail open: a termination date that cannot be parsed counts as no
termination date (the person stays active), and a hire date that cannot be
parsed contributes no tenure.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from workforce_report.fields import normalize_text, parse_date
from workforce_report.models import Person

ACTIVE_MARKERS = {"active", "normal", "정상", "재직", "재직중"}


def has_active_marker(person: Person) -> bool:
    return normalize_text(person.status_marker).casefold() in ACTIVE_MARKERS


def is_active(person: Person, as_of: date) -> bool:
    if has_active_marker(person):
        return True
    terminated = parse_date(person.termination_date)
    if terminated is None:
        return True
    return terminated > as_of


def _add_years(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return value.replace(year=value.year + years, day=28)


def tenure_days(person: Person, as_of: date) -> Optional[int]:
    hired = parse_date(person.hire_date)
    if hired is None:
        return None
    return max(0, (as_of - hired).days)


def has_min_tenure(person: Person, as_of: date, years: int) -> bool:
    """``True`` when the person has worked at least ``years`` full years."""
    hired = parse_date(person.hire_date)
    if hired is None:
        return False
    return _add_years(hired, years) <= as_of
