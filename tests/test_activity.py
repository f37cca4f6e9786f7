"""Tests for employment status and tenure."""

from datetime import date

import pytest

from workforce_report.activity import has_min_tenure, is_active, tenure_days
from workforce_report.models import Person


class TestIsActive:
    """Test activity as of the snapshot date."""

    @pytest.mark.parametrize("termination", ["", "-", "N/A", "퇴사예정", "2024-13-45"])
    def test_unparseable_termination_stays_active(self, as_of, termination):
        """Verify a termination date that cannot be read keeps the person active."""
        assert is_active(Person(name="가", termination_date=termination), as_of)

    def test_termination_on_snapshot_day_is_inactive(self, as_of):
        assert not is_active(Person(name="가", termination_date="2024-06-30"), as_of)

    def test_termination_after_snapshot_is_active(self, as_of):
        assert is_active(Person(name="가", termination_date="2024-07-01"), as_of)

    def test_termination_before_snapshot_is_inactive(self, as_of):
        assert not is_active(Person(name="가", termination_date="2024.03.31"), as_of)

    def test_active_marker_overrides_date(self, as_of):
        person = Person(name="가", termination_date="2023-01-31", status_marker="정상")
        assert is_active(person, as_of)


class TestTenure:
    """Test tenure computation."""

    def test_exact_years(self, as_of):
        assert has_min_tenure(Person(name="가", hire_date="2021-06-30"), as_of, 3)
        assert not has_min_tenure(Person(name="가", hire_date="2021-07-01"), as_of, 3)

    def test_leap_day_hire(self):
        person = Person(name="가", hire_date="2020-02-29")
        assert has_min_tenure(person, date(2023, 2, 28), 3)
        assert not has_min_tenure(person, date(2023, 2, 27), 3)

    def test_unparseable_hire_date_contributes_nothing(self, as_of):
        person = Person(name="가", hire_date="모름")
        assert not has_min_tenure(person, as_of, 0)
        assert tenure_days(person, as_of) is None

    def test_tenure_days(self, as_of):
        assert tenure_days(Person(name="가", hire_date="2024-06-01"), as_of) == 29
        assert tenure_days(Person(name="가", hire_date="2024-07-01"), as_of) == 0
