"""
Unit Tests for the Date of Record
Tests the TimeKeeper clock, its timezone handling and day advance
"""

import threading
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from hbx_core.core.enums import RolloverPeriod
from hbx_core.services import time_keeper as time_keeper_module
from hbx_core.services.time_keeper import FixedClock, TimeKeeper, resolve_today


@pytest.mark.unit
class TestTimeKeeper:
    """Test reading and setting the date of record"""

    def test_initial_date(self):
        keeper = TimeKeeper(timezone_name="America/New_York", initial_date=date(2022, 1, 10))
        assert keeper.date_of_record() == date(2022, 1, 10)

    def test_set_date_of_record_unprotected(self):
        keeper = TimeKeeper(initial_date=date(2022, 1, 10))

        assert keeper.set_date_of_record_unprotected(date(2022, 3, 1)) == date(2022, 3, 1)
        assert keeper.date_of_record() == date(2022, 3, 1)

    def test_set_accepts_iso_string(self):
        keeper = TimeKeeper(initial_date=date(2022, 1, 10))
        keeper.set_date_of_record_unprotected("2022-02-01")
        assert keeper.date_of_record() == date(2022, 2, 1)

    def test_date_according_to_exchange(self):
        keeper = TimeKeeper(timezone_name="America/New_York", initial_date=date(2022, 1, 10))

        # 03:00 UTC on Jan 10 is still Jan 9 in New York
        assert keeper.date_according_to_exchange_at(
            datetime(2022, 1, 10, 3, 0, tzinfo=timezone.utc)
        ) == date(2022, 1, 9)
        assert keeper.date_according_to_exchange_at(
            datetime(2022, 1, 10, 6, 0, tzinfo=timezone.utc)
        ) == date(2022, 1, 10)

    def test_naive_times_are_utc(self):
        keeper = TimeKeeper(timezone_name="America/New_York", initial_date=date(2022, 1, 10))
        local = keeper.local_time(datetime(2022, 7, 1, 12, 0))

        assert local.hour == 8
        assert local.utcoffset().total_seconds() == -4 * 3600

    def test_datetime_of_record_uses_date_of_record(self):
        keeper = TimeKeeper(initial_date=date(2020, 2, 29))
        assert keeper.datetime_of_record().date() == date(2020, 2, 29)

    def test_with_cache_pins_snapshot(self):
        keeper = TimeKeeper(initial_date=date(2022, 1, 10))

        with keeper.with_cache() as snapshot:
            keeper.set_date_of_record_unprotected(date(2022, 1, 11))
            assert snapshot == date(2022, 1, 10)
            assert keeper.date_of_record() == date(2022, 1, 10)

        assert keeper.date_of_record() == date(2022, 1, 11)

    def test_nested_cache_keeps_outer_snapshot(self):
        keeper = TimeKeeper(initial_date=date(2022, 1, 10))

        with keeper.with_cache() as outer:
            with keeper.with_cache() as inner:
                assert inner == outer
            keeper.set_date_of_record_unprotected(date(2022, 2, 1))
            assert keeper.date_of_record() == outer == date(2022, 1, 10)

        assert keeper.date_of_record() == date(2022, 2, 1)

    def test_cache_is_per_thread(self):
        keeper = TimeKeeper(initial_date=date(2022, 1, 10))
        seen = []

        with keeper.with_cache():
            keeper.set_date_of_record_unprotected(date(2022, 1, 11))
            worker = threading.Thread(target=lambda: seen.append(keeper.date_of_record()))
            worker.start()
            worker.join()

        assert seen == [date(2022, 1, 11)]


@pytest.mark.unit
class TestAdvance:
    """Test advancing the date of record"""

    def test_advance_sets_date_then_dispatches(self):
        keeper = TimeKeeper(initial_date=date(2022, 3, 31))
        seen_dates = []
        sponsor = MagicMock()
        sponsor.on_day_advance.side_effect = lambda: seen_dates.append(keeper.date_of_record())

        result = keeper.advance_date_of_record(date(2022, 4, 1), [sponsor])

        assert seen_dates == [date(2022, 4, 1)]
        assert result.rollovers == [RolloverPeriod.DAY, RolloverPeriod.MONTH, RolloverPeriod.QUARTER]
        sponsor.on_month_advance.assert_called_once_with()
        sponsor.on_quarter_advance.assert_called_once_with()
        sponsor.on_year_advance.assert_not_called()

    def test_push_uses_current_date(self):
        keeper = TimeKeeper(initial_date=date(2023, 1, 1))
        sponsor = MagicMock()

        result = keeper.push_date_of_record([sponsor])

        assert result.new_date == date(2023, 1, 1)
        sponsor.on_year_advance.assert_called_once_with()


@pytest.mark.unit
class TestClocks:
    """Test clock resolution"""

    def test_fixed_clock(self):
        assert FixedClock(date(2022, 5, 5)).date_of_record() == date(2022, 5, 5)

    def test_explicit_date_wins(self):
        assert resolve_today(date(2022, 1, 1), FixedClock(date(2022, 5, 5))) == date(2022, 1, 1)

    def test_clock_used_without_date(self):
        assert resolve_today(clock=FixedClock(date(2022, 5, 5))) == date(2022, 5, 5)

    def test_process_time_keeper_by_default(self, time_keeper):
        assert resolve_today() == date(2022, 1, 10)
        assert time_keeper_module.date_of_record() == date(2022, 1, 10)
        assert time_keeper_module.get_time_keeper() is time_keeper
