"""Person to institution matching through an ordered cascade of tiers."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

from workforce_report.fields import (
    compact,
    normalize_district,
    normalize_institution_name,
    normalize_text,
    strip_text,
)
from workforce_report.models import Institution, Person
from workforce_report.settings import DEFAULT_SETTINGS, Settings

# Boilerplate facility words, longest first so compound forms go before their parts.
# Names are normalised first, so 통합지원센터 has already become 지원센터.
GENERIC_SUFFIXES = (
    "노인지원센터",
    "재가노인복지센터",
    "사회복지법인",
    "사회복지관",
    "노인복지관",
    "장애인복지관",
    "지원센터",
    "복지센터",
    "복지재단",
    "복지관",
    "복지회",
    "센터",
    "재단",
    "협회",
)
CATEGORY_TOKENS = ("노인", "복지", "재가", "장애인", "돌봄")
REVIEW_LIMIT = 3


@dataclass(frozen=True)
class Match:
    person: Person
    institution: Institution
    method: str
    confidence: int
    candidate_count: int = 1

    @property
    def ambiguous(self) -> bool:
        return self.candidate_count > 1


@lru_cache(maxsize=4096)
def core_name(name: str) -> str:
    """Institution name with generic facility words and whitespace removed."""
    text = normalize_institution_name(compact(name))
    for suffix in GENERIC_SUFFIXES:
        text = text.replace(suffix, "")
    return text


def _same_district(person: Person, institution: Institution) -> bool:
    person_district = normalize_district(person.district_raw)
    return bool(person_district) and person_district == normalize_district(institution.district)


def match_by_code(person: Person, institution: Institution, settings: Settings) -> bool:
    if not institution.code:
        return False
    return institution.code in {person.institution_code, person.legacy_institution_code}


def match_by_exact_name(person: Person, institution: Institution, settings: Settings) -> bool:
    name = strip_text(person.institution_name_raw)
    return bool(name) and name == strip_text(institution.name)


def match_by_district_core(person: Person, institution: Institution, settings: Settings) -> bool:
    if not _same_district(person, institution):
        return False
    left = core_name(person.institution_name_raw)
    right = core_name(institution.name)
    if not left or not right:
        return False
    return left == right or left in right or right in left


def match_by_district_category(person: Person, institution: Institution, settings: Settings) -> bool:
    if not _same_district(person, institution):
        return False
    left = normalize_text(person.institution_name_raw)
    right = normalize_text(institution.name)
    return any(token in left and token in right for token in CATEGORY_TOKENS)


def character_containment(left: str, right: str) -> float:
    """Share of the shorter string's characters found anywhere in the longer one."""
    shorter, longer = sorted((left, right), key=len)
    if not shorter:
        return 0.0
    found = sum(1 for char in shorter if char in longer)
    return found / len(shorter)


def match_by_similarity(person: Person, institution: Institution, settings: Settings) -> bool:
    left = compact(person.institution_name_raw)
    right = compact(institution.name)
    if len(left) <= settings.similarity_min_length or len(right) <= settings.similarity_min_length:
        return False
    return character_containment(left, right) > settings.similarity_threshold


@dataclass(frozen=True)
class MatchTier:
    name: str
    rank: int
    predicate: Callable[[Person, Institution, Settings], bool]

    def candidates(
        self,
        person: Person,
        institutions: Sequence[Institution],
        settings: Settings,
    ) -> List[Institution]:
        return [institution for institution in institutions if self.predicate(person, institution, settings)]


TIERS: Tuple[MatchTier, ...] = (
    MatchTier("code", 1, match_by_code),
    MatchTier("exact_name", 2, match_by_exact_name),
    MatchTier("district_core", 3, match_by_district_core),
    MatchTier("district_category", 4, match_by_district_category),
    MatchTier("similarity", 5, match_by_similarity),
)
METHOD_RANKS = {tier.name: tier.rank for tier in TIERS}


def match_person(
    person: Person,
    institutions: Sequence[Institution],
    settings: Settings = DEFAULT_SETTINGS,
) -> Optional[Match]:
    """Return the match from the first tier any institution satisfies.

    Several institutions satisfying the same tier resolve to the first one in
    input order; ``candidate_count`` records how many were tied.
    """
    for tier in TIERS:
        candidates = tier.candidates(person, institutions, settings)
        if candidates:
            return Match(
                person=person,
                institution=candidates[0],
                method=tier.name,
                confidence=tier.rank,
                candidate_count=len(candidates),
            )
    return None


def match_all(
    persons: Sequence[Person],
    institutions: Sequence[Institution],
    settings: Settings = DEFAULT_SETTINGS,
) -> Tuple[List[Match], List[Person]]:
    """Match every person; returns ``(matches, unmatched_persons)``."""
    matches: List[Match] = []
    unmatched: List[Person] = []
    for person in persons:
        result = match_person(person, institutions, settings)
        if result is None:
            unmatched.append(person)
        else:
            matches.append(result)
    return matches, unmatched


def suggest_candidates(
    person: Person,
    institutions: Sequence[Institution],
    limit: int = REVIEW_LIMIT,
) -> List[Tuple[Institution, float]]:
    """Rank institutions by fuzzy name similarity for manual review.

    Suggestions never become matches; they only help a reviewer resolve an
    unmatched person.
    """
    query = normalize_institution_name(person.institution_name_raw)
    if not query or not institutions:
        return []
    choices = [normalize_institution_name(institution.name) for institution in institutions]
    ranked = process.extract(query, choices, scorer=fuzz.WRatio, processor=None, limit=limit)
    return [(institutions[index], float(score)) for _, score, index in ranked]
