"""
Date of Record Rollover Dispatch.

Walks every exchange sponsor when the date of record advances and fires
the rollover hooks for each calendar boundary the new date crosses:

    every day                 -> on_day_advance
    1st of any month          -> on_month_advance
    1st of Jan, Apr, Jul, Oct -> on_quarter_advance
    Jan 1                     -> on_year_advance

Hooks fire in that order for each sponsor. Exceptions raised by a hook
propagate to the caller; sponsors after the failing one are not visited.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, runtime_checkable

from hbx_core.core.enums import RolloverPeriod
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)

QUARTER_START_MONTHS = (1, 4, 7, 10)

HOOK_NAMES: dict[RolloverPeriod, str] = {
    RolloverPeriod.DAY: "on_day_advance",
    RolloverPeriod.MONTH: "on_month_advance",
    RolloverPeriod.QUARTER: "on_quarter_advance",
    RolloverPeriod.YEAR: "on_year_advance",
}


@runtime_checkable
class SponsorHooks(Protocol):
    """Rollover hooks implemented by exchange sponsors."""

    def on_day_advance(self) -> None: ...

    def on_month_advance(self) -> None: ...

    def on_quarter_advance(self) -> None: ...

    def on_year_advance(self) -> None: ...


def rollovers_for(new_date: date) -> list[RolloverPeriod]:
    """Calendar boundaries crossed on arriving at `new_date`, in dispatch order."""
    rollovers = [RolloverPeriod.DAY]
    if new_date.day == 1:
        rollovers.append(RolloverPeriod.MONTH)
        if new_date.month in QUARTER_START_MONTHS:
            rollovers.append(RolloverPeriod.QUARTER)
        if new_date.month == 1:
            rollovers.append(RolloverPeriod.YEAR)
    return rollovers


@dataclass
class AdvanceResult:
    """Outcome of one day-advance tick."""

    new_date: date
    rollovers: list[RolloverPeriod]
    sponsor_count: int = 0
    hook_calls: dict[RolloverPeriod, int] = field(default_factory=dict)


class DayAdvancer:
    """Dispatches rollover hooks to sponsors for a new date of record."""

    def advance(self, new_date: date, sponsors: Iterable[SponsorHooks]) -> AdvanceResult:
        """
        Fire the rollover hooks for `new_date` on every sponsor.

        Args:
            new_date: The date of record just arrived at
            sponsors: Sponsors to notify, visited in iteration order

        Returns:
            AdvanceResult with the rollovers fired and per-hook call counts
        """
        rollovers = rollovers_for(new_date)
        result = AdvanceResult(
            new_date=new_date,
            rollovers=rollovers,
            hook_calls={rollover: 0 for rollover in rollovers},
        )

        logger.info(
            f"Advancing date of record to {new_date.isoformat()}: "
            f"{', '.join(r.value for r in rollovers)}"
        )

        for sponsor in sponsors:
            for rollover in rollovers:
                getattr(sponsor, HOOK_NAMES[rollover])()
                result.hook_calls[rollover] += 1
            result.sponsor_count += 1

        logger.debug(f"Rollover dispatched to {result.sponsor_count} sponsor(s)")
        return result
