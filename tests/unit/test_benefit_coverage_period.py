"""
Unit Tests for Benefit Coverage Periods
Tests containment, effective dates, termination dates, titles and validation
"""

from datetime import date, datetime, timedelta

import pytest

from hbx_core.core.config import EnrollmentPolicy
from hbx_core.core.enums import ServiceMarket
from hbx_core.models import BenefitCoveragePeriod
from hbx_core.utils.errors import DomainValidationError

POLICY = EnrollmentPolicy(due_day_of_month=15, termination_minimum_days=14)


def each_day(first: date, last: date):
    day = first
    while day <= last:
        yield day
        day += timedelta(days=1)


@pytest.mark.unit
class TestContainment:
    """Test coverage and open enrollment windows"""

    def test_bounds_are_inclusive(self, period_2022):
        assert period_2022.contains(date(2022, 1, 1))
        assert period_2022.contains(date(2022, 12, 31))
        assert period_2022.contains(date(2022, 7, 4))

    def test_outside_window(self, period_2022):
        assert not period_2022.contains(date(2021, 12, 31))
        assert not period_2022.contains(date(2023, 1, 1))

    def test_open_enrollment_window(self, period_2022):
        assert period_2022.open_enrollment_contains(date(2021, 11, 1))
        assert period_2022.open_enrollment_contains(date(2022, 1, 31))
        assert not period_2022.open_enrollment_contains(date(2021, 10, 31))
        assert not period_2022.open_enrollment_contains(date(2022, 2, 1))

    def test_inverted_range_contains_nothing(self, period_factory):
        period = period_factory(start_on=date(2022, 12, 31), end_on=date(2022, 1, 1))

        assert not period.contains(date(2022, 6, 1))
        assert not period.contains(date(2022, 1, 1))
        assert not period.contains(date(2022, 12, 31))

    def test_missing_dates_contain_nothing(self):
        period = BenefitCoveragePeriod(service_market="individual")

        assert not period.contains(date(2022, 6, 1))
        assert not period.open_enrollment_contains(date(2022, 6, 1))

    def test_every_day_of_the_year_is_contained(self, period_2022):
        for day in each_day(date(2022, 1, 1), date(2022, 12, 31)):
            assert period_2022.contains(day)


@pytest.mark.unit
class TestEarliestEffectiveDate:
    """Test enrollment effective dates"""

    def test_on_or_before_due_day_starts_next_month(self, period_2022):
        assert period_2022.earliest_effective_date(date(2022, 3, 15), POLICY) == date(2022, 4, 1)

    def test_after_due_day_starts_month_after_next(self, period_2022):
        assert period_2022.earliest_effective_date(date(2022, 3, 16), POLICY) == date(2022, 5, 1)

    def test_after_due_day_at_end_of_january(self, period_2022):
        assert period_2022.earliest_effective_date(date(2022, 1, 31), POLICY) == date(2022, 3, 1)

    def test_clamped_to_start_on(self, period_2022):
        assert period_2022.earliest_effective_date(date(2021, 11, 10), POLICY) == date(2022, 1, 1)

    def test_clamped_to_end_on(self, period_2022):
        assert period_2022.earliest_effective_date(date(2022, 12, 20), POLICY) == date(2022, 12, 31)

    def test_due_day_comes_from_policy(self, period_2022):
        policy = EnrollmentPolicy(due_day_of_month=20, termination_minimum_days=14)
        assert period_2022.earliest_effective_date(date(2022, 3, 18), policy) == date(2022, 4, 1)

    def test_defaults_to_date_of_record(self, period_2022, time_keeper):
        # time_keeper is pinned to 2022-01-10
        assert period_2022.earliest_effective_date() == date(2022, 2, 1)

    def test_always_within_coverage_window(self, period_2022):
        for today in each_day(date(2021, 10, 1), date(2023, 2, 1)):
            effective = period_2022.earliest_effective_date(today, POLICY)
            assert period_2022.start_on <= effective <= period_2022.end_on


@pytest.mark.unit
class TestTerminationEffectiveOn:
    """Test termination effective dates"""

    @pytest.mark.parametrize(
        "requested,expected",
        [
            (date(2021, 11, 3), date(2022, 1, 1)),
            (date(2021, 11, 22), date(2022, 1, 1)),
            (date(2021, 12, 9), date(2022, 1, 1)),
            (date(2021, 12, 15), date(2022, 1, 1)),
            (date(2021, 12, 23), date(2022, 1, 31)),
            (date(2022, 1, 5), date(2022, 1, 31)),
            (date(2022, 1, 17), date(2022, 2, 28)),
        ],
    )
    def test_during_open_enrollment(self, period_2022, requested, expected):
        assert period_2022.termination_effective_on_for(requested, policy=POLICY) == expected

    def test_outside_open_enrollment_requires_minimum_notice(self, period_2022):
        result = period_2022.termination_effective_on_for(
            date(2022, 3, 1), date_of_record=date(2022, 2, 25), policy=POLICY
        )
        assert result == date(2022, 3, 11)

    def test_outside_open_enrollment_later_request_is_kept(self, period_2022):
        result = period_2022.termination_effective_on_for(
            date(2022, 4, 1), date_of_record=date(2022, 2, 25), policy=POLICY
        )
        assert result == date(2022, 4, 1)

    def test_minimum_notice_counts_from_date_of_record(self, period_2022):
        # 14 days after the date of record, not after the requested date
        result = period_2022.termination_effective_on_for(
            date(2022, 5, 1), date_of_record=date(2022, 5, 10), policy=POLICY
        )
        assert result == date(2022, 5, 24)

    def test_clamped_to_end_on(self, period_2022):
        result = period_2022.termination_effective_on_for(
            date(2022, 12, 30), date_of_record=date(2022, 12, 25), policy=POLICY
        )
        assert result == date(2022, 12, 31)

    def test_defaults_to_date_of_record(self, period_2022, time_keeper):
        time_keeper.set_date_of_record_unprotected(date(2022, 2, 25))
        assert period_2022.termination_effective_on_for(date(2022, 3, 1), policy=POLICY) == date(2022, 3, 11)

    def test_open_enrollment_result_clamped_to_short_period(self, period_factory):
        period = period_factory(end_on=date(2022, 1, 31))
        assert period.termination_effective_on_for(date(2022, 1, 17), policy=POLICY) == date(2022, 1, 31)

    def test_never_after_end_on(self, period_2022):
        date_of_record = date(2022, 6, 1)
        for requested in each_day(date(2021, 10, 1), date(2023, 2, 1)):
            result = period_2022.termination_effective_on_for(requested, date_of_record, POLICY)
            assert result <= period_2022.end_on

    def test_queries_are_idempotent(self, period_2022):
        first = (
            period_2022.termination_effective_on_for(date(2022, 1, 17), date(2022, 1, 10), POLICY),
            period_2022.earliest_effective_date(date(2022, 1, 10), POLICY),
            period_2022.contains(date(2022, 1, 10)),
        )
        second = (
            period_2022.termination_effective_on_for(date(2022, 1, 17), date(2022, 1, 10), POLICY),
            period_2022.earliest_effective_date(date(2022, 1, 10), POLICY),
            period_2022.contains(date(2022, 1, 10)),
        )
        assert first == second
        assert period_2022.start_on == date(2022, 1, 1)
        assert period_2022.end_on == date(2022, 12, 31)

    def test_inverted_range_does_not_raise(self, period_factory):
        period = period_factory(start_on=date(2022, 12, 31), end_on=date(2022, 1, 1))

        assert period.termination_effective_on_for(date(2022, 6, 1), date(2022, 6, 1), POLICY) == date(2022, 1, 1)
        assert period.earliest_effective_date(date(2022, 6, 1), POLICY) == date(2022, 1, 1)

    def test_missing_bounds_do_not_raise(self):
        period = BenefitCoveragePeriod(
            service_market="individual",
            open_enrollment_start_on=date(2021, 11, 1),
            open_enrollment_end_on=date(2022, 1, 31),
        )

        assert period.earliest_effective_date(date(2022, 1, 10), POLICY) == date(2022, 2, 1)
        assert period.termination_effective_on_for(date(2021, 11, 22), date(2021, 11, 22), POLICY) == date(
            2021, 12, 6
        )


@pytest.mark.unit
class TestAttributes:
    """Test attribute coercion and titles"""

    def test_datetimes_collapse_to_dates(self, period_factory):
        period = period_factory(
            start_on=datetime(2022, 1, 1, 0, 0, 0),
            end_on=datetime(2022, 12, 31, 23, 59, 59),
        )
        assert period.start_on == date(2022, 1, 1)
        assert period.end_on == date(2022, 12, 31)

    def test_iso_strings_are_parsed(self, period_factory):
        period = period_factory(start_on="2022-01-01", end_on="2022-12-31")
        assert period.start_on == date(2022, 1, 1)
        assert period.end_on == date(2022, 12, 31)

    def test_service_market_coerced(self, period_2022):
        assert period_2022.service_market is ServiceMarket.INDIVIDUAL

    def test_unknown_service_market_rejected(self, period_factory):
        with pytest.raises(ValueError, match="medicare is not a valid service market"):
            period_factory(service_market="medicare")

    @pytest.mark.parametrize(
        "market,title",
        [
            ("individual", "Individual Market Benefits 2022"),
            ("shop", "SHOP Market Benefits 2022"),
            ("coverall", "Individual Market Benefits 2022"),
        ],
    )
    def test_derived_title(self, period_factory, market, title):
        period = period_factory(service_market=market)
        period.ensure_title()
        assert period.title == title

    def test_existing_title_is_kept(self, period_factory):
        period = period_factory(title="Plan Year 2022")
        period.before_save()
        assert period.title == "Plan Year 2022"

    def test_title_assigned_once(self, period_2022):
        period_2022.ensure_title()
        period_2022.start_on = date(2023, 1, 1)
        period_2022.ensure_title()
        assert period_2022.title == "Individual Market Benefits 2022"


@pytest.mark.unit
class TestValidation:
    """Test whole-period validation"""

    def test_valid_period(self, period_2022):
        assert period_2022.errors() == {}
        assert period_2022.is_valid()
        period_2022.validate()

    def test_single_day_period_is_valid(self, period_factory):
        period = period_factory(start_on=date(2022, 1, 1), end_on=date(2022, 1, 1))
        assert period.is_valid()

    def test_end_before_start(self, period_factory):
        period = period_factory(start_on=date(2022, 12, 31), end_on=date(2022, 1, 1))

        assert period.errors() == {"end_on": ["end_on cannot precede start_on date"]}
        with pytest.raises(DomainValidationError) as exc_info:
            period.validate()
        assert exc_info.value.entity == "BenefitCoveragePeriod"

    def test_open_enrollment_end_before_start(self, period_factory):
        period = period_factory(
            open_enrollment_start_on=date(2022, 1, 31),
            open_enrollment_end_on=date(2021, 11, 1),
        )
        assert "open_enrollment_end_on" in period.errors()

    def test_missing_attributes(self):
        errors = BenefitCoveragePeriod().errors()

        assert errors["start_on"] == ["is invalid"]
        assert errors["end_on"] == ["is invalid"]
        assert errors["open_enrollment_start_on"] == ["is invalid"]
        assert errors["open_enrollment_end_on"] == ["is invalid"]
        assert errors["service_market"] == ["can't be blank"]
