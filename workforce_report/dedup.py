"""Collapse overlapping matches to one accepted match per person."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from workforce_report.matching import Match


@dataclass(frozen=True)
class MatchGroup:
    """The accepted match for one person plus every raw match it absorbed."""

    key: tuple
    match: Match
    members: Tuple[Match, ...]

    @property
    def education_fields(self) -> Dict[str, str]:
        """Education statuses merged over members, accepted match first."""
        merged: Dict[str, str] = {}
        for member in (self.match,) + self.members:
            for alias, value in member.person.education_status_fields.items():
                merged.setdefault(alias, value)
        return merged


@dataclass(frozen=True)
class DedupResult:
    groups: List[MatchGroup] = field(default_factory=list)
    raw_count: int = 0
    rejected_count: int = 0

    @property
    def unique_count(self) -> int:
        return len(self.groups)

    @property
    def duplicate_count(self) -> int:
        return self.raw_count - self.unique_count

    @property
    def matches(self) -> List[Match]:
        return [group.match for group in self.groups]


def deduplicate(matches: Sequence[Match], require_secondary_id: bool = False) -> DedupResult:
    """Keep one match per person key.

    The key is ``(name, resident_id)`` when a resident id is known and the name
    alone otherwise. The kept match is the one with the strongest method; ties
    keep the earliest. With ``require_secondary_id`` matches lacking a resident
    id are rejected and counted instead of being keyed by name; ``raw_count``
    covers only the matches that were keyed.
    """
    order: List[tuple] = []
    best: Dict[tuple, Match] = {}
    members: Dict[tuple, List[Match]] = {}
    rejected = 0
    for match in matches:
        person = match.person
        if require_secondary_id and not person.resident_id:
            rejected += 1
            continue
        key = person.identity_key
        if key not in best:
            order.append(key)
            best[key] = match
            members[key] = [match]
            continue
        members[key].append(match)
        if match.confidence < best[key].confidence:
            best[key] = match
    groups = [MatchGroup(key=key, match=best[key], members=tuple(members[key])) for key in order]
    return DedupResult(groups=groups, raw_count=len(matches) - rejected, rejected_count=rejected)
