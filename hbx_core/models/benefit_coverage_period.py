"""
Benefit Coverage Period Model.

One plan year of an exchange sponsor's benefits: the coverage window
(start_on..end_on) and its open enrollment window, plus the rules that
turn an enrollment or termination request into an effective date.

Source: 45 CFR 155.410 (Initial and annual open enrollment periods)
Source: 45 CFR 155.430 (Termination of exchange enrollment or coverage)
Verified: 2025-12-18
"""

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hbx_core.core.config import EnrollmentPolicy
from hbx_core.core.enums import ServiceMarket
from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.services.time_keeper import date_of_record as current_date_of_record
from hbx_core.utils.dates import end_of_month, first_of_next_month, next_month, to_date
from hbx_core.utils.logging import get_logger

if TYPE_CHECKING:
    from hbx_core.models.benefit_sponsorship import BenefitSponsorship

logger = get_logger(__name__)

DATE_ATTRIBUTES = ("start_on", "end_on", "open_enrollment_start_on", "open_enrollment_end_on")


class BenefitCoveragePeriod(Base, UUIDModel, TimeStampedModel, ValidatedModel):
    """
    A plan year's enrollment and coverage window.

    Query methods never raise and never mutate the period; a period whose
    end precedes its start simply contains no dates, and a missing bound
    is not used for clamping.
    """

    __tablename__ = "benefit_coverage_periods"

    benefit_sponsorship_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("benefit_sponsorships.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="Owning benefit sponsorship",
    )
    position: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Order within the owning sponsorship",
    )

    title: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name, derived from market and year when absent",
    )
    service_market: Mapped[ServiceMarket] = mapped_column(
        Enum(ServiceMarket),
        nullable=False,
        comment="Market where benefits are available",
    )

    start_on: Mapped[date] = mapped_column(Date, nullable=False, index=True, comment="Coverage start")
    end_on: Mapped[date] = mapped_column(Date, nullable=False, index=True, comment="Coverage end")
    open_enrollment_start_on: Mapped[date] = mapped_column(
        Date, nullable=False, comment="First day of open enrollment"
    )
    open_enrollment_end_on: Mapped[date] = mapped_column(
        Date, nullable=False, comment="Last day of open enrollment"
    )

    # Second lowest cost silver plan for the sponsor's rating area
    slcsp_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    benefit_sponsorship: Mapped[Optional["BenefitSponsorship"]] = relationship(
        back_populates="benefit_coverage_periods",
    )

    @validates(*DATE_ATTRIBUTES)
    def _coerce_date(self, key: str, value: Any) -> Optional[date]:
        # datetimes collapse to their calendar date: start_on is its first
        # instant and end_on its last
        if value is None:
            return None
        return to_date(value)

    @validates("service_market")
    def _coerce_service_market(self, key: str, value: Any) -> Optional[ServiceMarket]:
        if value is None:
            return None
        try:
            return ServiceMarket(value)
        except ValueError:
            raise ValueError(f"{value} is not a valid service market")

    # =========================================================================
    # Containment
    # =========================================================================

    def contains(self, on: date) -> bool:
        """Whether `on` falls within the coverage window, bounds included."""
        if self.start_on is None or self.end_on is None:
            return False
        return self.start_on <= on <= self.end_on

    def open_enrollment_contains(self, on: date) -> bool:
        """Whether `on` falls within the open enrollment window, bounds included."""
        if self.open_enrollment_start_on is None or self.open_enrollment_end_on is None:
            return False
        return self.open_enrollment_start_on <= on <= self.open_enrollment_end_on

    # =========================================================================
    # Effective Dates
    # =========================================================================

    def earliest_effective_date(
        self,
        today: Optional[date] = None,
        policy: Optional[EnrollmentPolicy] = None,
    ) -> date:
        """
        Earliest start of coverage for an enrollment made on `today`.

        Enrollments through the due day of the month take effect on the
        first of the next month; later ones on the first of the month
        after. The result is clamped to [start_on, end_on].

        Args:
            today: Enrollment date; defaults to the date of record
            policy: Enrollment constants; defaults to settings
        """
        today = today or current_date_of_record()
        policy = policy or EnrollmentPolicy.from_settings()

        if today.day <= policy.due_day_of_month:
            effective_date = first_of_next_month(today)
        else:
            effective_date = first_of_next_month(next_month(today))

        if self.start_on is not None:
            effective_date = max(effective_date, self.start_on)
        return self._clamp_to_end(effective_date)

    def termination_effective_on_for(
        self,
        on: date,
        date_of_record: Optional[date] = None,
        policy: Optional[EnrollmentPolicy] = None,
    ) -> date:
        """
        Effective date of a termination requested for `on`.

        During open enrollment terminations land on month boundaries,
        e.g. for open enrollment 11/1-1/31 of a plan year starting 1/1
        with due day 15:

            11/22 -> 1/1    compare date 12/1 precedes start
            12/9  -> 1/1    compare date is the start, on or before due day
            12/23 -> 1/31   compare date is the start, after due day
            1/5   -> 1/31   compare date follows start, on or before due day
            1/17  -> 2/28   compare date follows start, after due day

        Outside open enrollment the termination needs a minimum notice
        counted from the date of record (not from `on`). The result never
        extends past end_on.

        Args:
            on: Requested termination date
            date_of_record: Current business date; defaults to the TimeKeeper
            policy: Enrollment constants; defaults to settings
        """
        policy = policy or EnrollmentPolicy.from_settings()

        if self.start_on is not None and self.open_enrollment_contains(on):
            compare_date = first_of_next_month(on)
            on_or_before_due_day = on.day <= policy.due_day_of_month

            if compare_date < self.start_on:
                effective_date = self.start_on
            elif compare_date == self.start_on:
                effective_date = self.start_on if on_or_before_due_day else end_of_month(self.start_on)
            else:
                effective_date = end_of_month(on) if on_or_before_due_day else end_of_month(next_month(on))
            return self._clamp_to_end(effective_date)

        date_of_record = date_of_record or current_date_of_record()
        minimum_termination_date = date_of_record + timedelta(days=policy.termination_minimum_days)
        effective_date = max(on, minimum_termination_date)
        return self._clamp_to_end(effective_date)

    def _clamp_to_end(self, on: date) -> date:
        return on if self.end_on is None else min(on, self.end_on)

    # =========================================================================
    # Title / Validation
    # =========================================================================

    @property
    def derived_title(self) -> Optional[str]:
        if self.service_market is None or self.start_on is None:
            return None
        return f"{self.service_market.display_name} Market Benefits {self.start_on.year}"

    def ensure_title(self) -> None:
        """Assign the derived title unless one is already set."""
        if self.title:
            return
        self.title = self.derived_title
        logger.debug(f"Benefit coverage period titled '{self.title}'")

    def before_save(self) -> None:
        self.ensure_title()

    def errors(self) -> dict[str, list[str]]:
        """Validation messages keyed by attribute; empty when valid."""
        errors: dict[str, list[str]] = {}
        for attribute in DATE_ATTRIBUTES:
            if getattr(self, attribute) is None:
                errors.setdefault(attribute, []).append("is invalid")
        if self.service_market is None:
            errors.setdefault("service_market", []).append("can't be blank")

        # end_on == start_on passes
        if self.start_on and self.end_on and self.end_on < self.start_on:
            errors.setdefault("end_on", []).append("end_on cannot precede start_on date")
        if (
            self.open_enrollment_start_on
            and self.open_enrollment_end_on
            and self.open_enrollment_end_on < self.open_enrollment_start_on
        ):
            errors.setdefault("open_enrollment_end_on", []).append(
                "open_enrollment_end_on cannot precede open_enrollment_start_on date"
            )
        return errors

    def __repr__(self) -> str:
        return (
            f"<BenefitCoveragePeriod {self.service_market and self.service_market.value} "
            f"{self.start_on}..{self.end_on}>"
        )
