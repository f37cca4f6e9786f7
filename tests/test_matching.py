"""Tests for the tiered person to institution matcher."""

from workforce_report.matching import (
    METHOD_RANKS,
    character_containment,
    core_name,
    match_all,
    match_person,
    suggest_candidates,
)
from workforce_report.models import Institution, Person
from workforce_report.settings import DEFAULT_SETTINGS


class TestTiers:
    """Test each tier of the cascade in isolation."""

    def test_code_match(self, registry):
        person = Person(name="가", institution_code="C003")
        match = match_person(person, registry)
        assert match.institution.code == "C003"
        assert match.method == "code"
        assert match.confidence == 1

    def test_legacy_code_match(self, registry):
        """Verify the legacy code is compared against the registry code too."""
        person = Person(name="가", legacy_institution_code="B002")
        assert match_person(person, registry).institution.code == "B002"

    def test_exact_name_ignores_surrounding_space(self, registry):
        person = Person(name="가", institution_name_raw="  진주시노인통합지원센터 ")
        match = match_person(person, registry)
        assert match.institution.code == "C003"
        assert match.method == "exact_name"

    def test_exact_name_keeps_inner_spacing(self, registry):
        """Verify a differently spaced name falls through to a weaker tier."""
        person = Person(name="가", institution_name_raw="진주시 노인통합지원센터")
        match = match_person(person, registry)
        assert match.institution.code == "C003"
        assert match.method != "exact_name"

    def test_district_core(self, registry):
        """Verify the core name after stripping facility words matches within a district."""
        person = Person(name="가", institution_name_raw="창원 노인복지관", district_raw="창원시")
        match = match_person(person, registry)
        assert match.institution.code == "A001"
        assert match.method == "district_core"

    def test_district_category(self, registry):
        """Verify a shared category token in the same district is enough."""
        person = Person(name="가", institution_name_raw="창원 재가 돌봄 기관", district_raw="창원시")
        match = match_person(person, registry)
        assert match.institution.code == "B002"
        assert match.method == "district_category"
        assert match.candidate_count == 1

    def test_similarity(self, registry):
        """Verify character containment matches without any district."""
        person = Person(name="가", institution_name_raw="진주노인통합센터")
        match = match_person(person, registry)
        assert match.institution.code == "C003"
        assert match.method == "similarity"

    def test_short_names_skip_similarity(self, registry):
        person = Person(name="가", institution_name_raw="진주센터")
        assert match_person(person, registry) is None

    def test_no_tier_returns_none(self, registry):
        person = Person(name="가", institution_name_raw="해운대 청소년수련관", district_raw="부산")
        assert match_person(person, registry) is None

    def test_stricter_threshold_rejects_similarity(self, registry):
        person = Person(name="가", institution_name_raw="진주노인통합센터")
        strict = DEFAULT_SETTINGS.with_overrides(similarity_threshold=1.0)
        assert match_person(person, registry, strict) is None


class TestCascade:
    """Test priority and tie handling across tiers."""

    def test_code_beats_weaker_tiers(self, registry):
        """Verify a code match wins even when a name tier points elsewhere."""
        person = Person(
            name="가",
            institution_code="B002",
            institution_name_raw="창원 노인복지관",
            district_raw="창원시",
        )
        match = match_person(person, registry)
        assert match.institution.code == "B002"
        assert match.method == "code"

    def test_district_blocks_core_match(self, registry):
        """Verify tier 3 needs the same district and the cascade moves on."""
        person = Person(name="가", institution_name_raw="창원 노인복지관", district_raw="진주시")
        match = match_person(person, registry)
        assert match.institution.code == "C003"
        assert match.method == "district_category"

    def test_tie_keeps_first_in_input_order(self, registry):
        """Verify several candidates in one tier resolve to the first and are flagged."""
        person = Person(name="가", institution_name_raw="창원 복지", district_raw="창원시")
        match = match_person(person, registry)
        assert match.institution.code == "A001"
        assert match.candidate_count == 2
        assert match.ambiguous

        reordered = [registry[1], registry[0], registry[2]]
        assert match_person(person, reordered).institution.code == "B002"

    def test_method_ranks(self):
        assert METHOD_RANKS == {
            "code": 1,
            "exact_name": 2,
            "district_core": 3,
            "district_category": 4,
            "similarity": 5,
        }

    def test_match_all_splits_unmatched(self, registry):
        persons = [
            Person(name="가", institution_code="A001"),
            Person(name="나", institution_name_raw="해운대 청소년수련관"),
        ]
        matches, unmatched = match_all(persons, registry)
        assert [match.person.name for match in matches] == ["가"]
        assert [person.name for person in unmatched] == ["나"]

    def test_institution_without_code_never_matches_by_code(self):
        registry = [Institution(code="", name="무코드기관")]
        person = Person(name="가")
        assert match_person(person, registry) is None


class TestHelpers:
    """Test name helpers and review suggestions."""

    def test_core_name(self):
        assert core_name("거제노인통합지원센터") == "거제"
        assert core_name("거제 노인 통합지원 센터") == "거제"
        assert core_name("창원시노인종합복지관") == "창원시"
        assert core_name("마산재가노인복지센터") == "마산"

    def test_character_containment(self):
        assert character_containment("abc", "xaybzc") == 1.0
        assert character_containment("abcd", "ab") == 1.0
        assert character_containment("", "abc") == 0.0

    def test_suggestions_rank_closest_first(self, registry):
        person = Person(name="가", institution_name_raw="창원노인복지관")
        suggestions = suggest_candidates(person, registry)
        assert len(suggestions) <= 3
        assert suggestions[0][0].code == "A001"
        scores = [score for _, score in suggestions]
        assert scores == sorted(scores, reverse=True)

    def test_no_suggestions_without_name(self, registry):
        assert suggest_candidates(Person(name="가"), registry) == []
