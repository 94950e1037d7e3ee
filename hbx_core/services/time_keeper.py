"""
Date of Record Service.

The exchange reckons enrollment deadlines against its *date of record*,
an authoritative business date that is advanced explicitly (normally once
a day by the `time_keeper.push_date_of_record` task) rather than read from
the wall clock. Tests pin it with `set_date_of_record_unprotected`.

Queries that need "today" accept a `Clock`; the process-wide TimeKeeper is
one, and `FixedClock` is a stand-in for tests and batch replays.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from hbx_core.core.config import get_exchange_settings
from hbx_core.services.day_advancer import AdvanceResult, DayAdvancer, SponsorHooks
from hbx_core.utils.dates import DateLike, to_date
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)


class Clock(Protocol):
    """Source of the exchange's current business date."""

    def date_of_record(self) -> date: ...


@dataclass(frozen=True)
class FixedClock:
    """Clock that always reports the same date."""

    today: date

    def date_of_record(self) -> date:
        return self.today


class TimeKeeper:
    """
    Process-wide holder of the date of record.

    The date is guarded by a single lock. Writers replace it atomically,
    so a reader always observes either the previous or the new date.
    """

    def __init__(
        self,
        timezone_name: Optional[str] = None,
        initial_date: Optional[date] = None,
    ):
        self._lock = threading.Lock()
        self._local = threading.local()
        self._zone = ZoneInfo(timezone_name or get_exchange_settings().EXCHANGE_TIMEZONE)
        self._date_of_record = initial_date or self.date_according_to_exchange_at(
            datetime.now(timezone.utc)
        )

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    def local_time(self, a_time: datetime) -> datetime:
        """Express `a_time` in the exchange's timezone. Naive values are taken as UTC."""
        if a_time.tzinfo is None:
            a_time = a_time.replace(tzinfo=timezone.utc)
        return a_time.astimezone(self._zone)

    def date_according_to_exchange_at(self, a_time: datetime) -> date:
        """Calendar date at the exchange at instant `a_time`."""
        return self.local_time(a_time).date()

    def date_of_record(self) -> date:
        cached = getattr(self._local, "cached_date", None)
        if cached is not None:
            return cached
        with self._lock:
            return self._date_of_record

    def datetime_of_record(self) -> datetime:
        """Date of record combined with the current exchange wall-clock time."""
        now = self.local_time(datetime.now(timezone.utc))
        return datetime.combine(
            self.date_of_record(),
            time(now.hour, now.minute, now.second),
            tzinfo=self._zone,
        )

    def set_date_of_record_unprotected(self, new_date: DateLike) -> date:
        """
        Replace the date of record without running rollover hooks.

        Only for tests and the day-tick driver.
        """
        new_date = to_date(new_date)
        with self._lock:
            if new_date != self._date_of_record:
                logger.info(
                    f"Date of record changed: {self._date_of_record.isoformat()} -> "
                    f"{new_date.isoformat()} ({(new_date - self._date_of_record).days:+d} days)"
                )
                self._date_of_record = new_date
            return self._date_of_record

    @contextmanager
    def with_cache(self) -> Iterator[date]:
        """Pin the current thread to a snapshot of the date of record."""
        previous = getattr(self._local, "cached_date", None)
        snapshot = self.date_of_record()
        self._local.cached_date = snapshot
        try:
            yield snapshot
        finally:
            self._local.cached_date = previous

    def push_date_of_record(
        self,
        sponsors: Iterable[SponsorHooks],
        advancer: Optional[DayAdvancer] = None,
    ) -> AdvanceResult:
        """Run the rollover hooks for the current date of record."""
        return (advancer or DayAdvancer()).advance(self.date_of_record(), sponsors)

    def advance_date_of_record(
        self,
        new_date: DateLike,
        sponsors: Iterable[SponsorHooks],
        advancer: Optional[DayAdvancer] = None,
    ) -> AdvanceResult:
        """Set a new date of record, then run its rollover hooks."""
        self.set_date_of_record_unprotected(new_date)
        return self.push_date_of_record(sponsors, advancer)


_time_keeper: Optional[TimeKeeper] = None
_time_keeper_lock = threading.Lock()


def get_time_keeper() -> TimeKeeper:
    """
    Get or create the process-wide TimeKeeper.

    Returns:
        TimeKeeper instance
    """
    global _time_keeper
    with _time_keeper_lock:
        if _time_keeper is None:
            _time_keeper = TimeKeeper()
        return _time_keeper


def reset_time_keeper(initial_date: Optional[date] = None) -> TimeKeeper:
    """Replace the process-wide TimeKeeper (tests only)."""
    global _time_keeper
    with _time_keeper_lock:
        _time_keeper = TimeKeeper(initial_date=initial_date)
        return _time_keeper


def date_of_record() -> date:
    """Shortcut for get_time_keeper().date_of_record()."""
    return get_time_keeper().date_of_record()


def resolve_today(today: Optional[date] = None, clock: Optional[Clock] = None) -> date:
    """`today` if given, else a snapshot from `clock` (the process TimeKeeper by default)."""
    if today is not None:
        return today
    return (clock or get_time_keeper()).date_of_record()
