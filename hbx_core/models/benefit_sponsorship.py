"""
Benefit Sponsorship Model.

The exchange's sponsorship of benefits across its service markets, and
the collection of plan-year coverage periods it offers. Periods are kept
in insertion order; every lookup returns the first period matching its
date predicate.
"""

from datetime import date
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hbx_core.core.config import EnrollmentPolicy
from hbx_core.core.enums import ServiceMarket
from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.models.benefit_coverage_period import BenefitCoveragePeriod
from hbx_core.models.location import GeographicRatingArea
from hbx_core.services.time_keeper import Clock, resolve_today
from hbx_core.utils.dates import add_years

if TYPE_CHECKING:
    from hbx_core.models.hbx_profile import HbxProfile


class BenefitSponsorship(Base, UUIDModel, TimeStampedModel, ValidatedModel):
    """
    Benefit sponsorship of an exchange (HBX) profile.

    Date arguments default to a single snapshot of `clock`, or of the
    process TimeKeeper, taken when the query starts.
    """

    __tablename__ = "benefit_sponsorships"

    hbx_profile_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("hbx_profiles.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
        comment="Sponsoring exchange profile",
    )
    service_markets: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Markets served (shop, individual, coverall)",
    )

    benefit_coverage_periods: Mapped[list[BenefitCoveragePeriod]] = relationship(
        back_populates="benefit_sponsorship",
        cascade="all, delete-orphan",
        order_by="BenefitCoveragePeriod.position",
        collection_class=ordering_list("position"),
    )
    geographic_rating_areas: Mapped[list[GeographicRatingArea]] = relationship(
        cascade="all, delete-orphan",
    )
    hbx_profile: Mapped[Optional["HbxProfile"]] = relationship(
        back_populates="benefit_sponsorship",
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("service_markets", [])
        super().__init__(**kwargs)

    @validates("service_markets")
    def _coerce_service_markets(self, key: str, value: Any) -> list[str]:
        markets: list[str] = []
        for market in value or []:
            try:
                market = ServiceMarket(market).value
            except ValueError:
                raise ValueError(f"{market} is not a valid service market")
            if market not in markets:
                markets.append(market)
        return markets

    @property
    def markets(self) -> set[ServiceMarket]:
        return {ServiceMarket(m) for m in self.service_markets}

    # =========================================================================
    # Coverage Period Selection
    # =========================================================================

    def benefit_coverage_period_by_effective_date(
        self, effective_date: date
    ) -> Optional[BenefitCoveragePeriod]:
        """First period whose coverage window contains `effective_date`."""
        return next(
            (bcp for bcp in self.benefit_coverage_periods if bcp.contains(effective_date)),
            None,
        )

    def current_benefit_coverage_period(
        self, today: Optional[date] = None, clock: Optional[Clock] = None
    ) -> Optional[BenefitCoveragePeriod]:
        """Period covering today."""
        return self.benefit_coverage_period_by_effective_date(resolve_today(today, clock))

    def renewal_benefit_coverage_period(
        self, today: Optional[date] = None, clock: Optional[Clock] = None
    ) -> Optional[BenefitCoveragePeriod]:
        """Period covering the same day one year from today."""
        today = resolve_today(today, clock)
        return self.benefit_coverage_period_by_effective_date(add_years(today, 1))

    def current_benefit_period(
        self, today: Optional[date] = None, clock: Optional[Clock] = None
    ) -> Optional[BenefitCoveragePeriod]:
        """
        Period that new enrollments made today should target.

        Once next plan year's open enrollment has begun, that is the
        renewal period, even though the current period has not ended.
        """
        today = resolve_today(today, clock)
        renewal = self.renewal_benefit_coverage_period(today)
        if renewal is not None and renewal.open_enrollment_contains(today):
            return renewal
        return self.current_benefit_coverage_period(today)

    def is_under_open_enrollment(self, today: Optional[date] = None, clock: Optional[Clock] = None) -> bool:
        """Whether any period's open enrollment window contains today."""
        today = resolve_today(today, clock)
        return any(bcp.open_enrollment_contains(today) for bcp in self.benefit_coverage_periods)

    def earliest_effective_date(
        self,
        today: Optional[date] = None,
        policy: Optional[EnrollmentPolicy] = None,
        clock: Optional[Clock] = None,
    ) -> Optional[date]:
        """Earliest coverage start in the current benefit period, if there is one."""
        today = resolve_today(today, clock)
        period = self.current_benefit_period(today)
        if period is None:
            return None
        return period.earliest_effective_date(today, policy)

    # =========================================================================
    # Rating Areas
    # =========================================================================

    def rating_area_for(self, county: Optional[str]) -> Optional[GeographicRatingArea]:
        """First rating area covering `county`."""
        return next((area for area in self.geographic_rating_areas if area.covers_county(county)), None)

    # =========================================================================
    # Validation
    # =========================================================================

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if not self.service_markets:
            errors["service_markets"] = ["can't be blank"]
        for index, bcp in enumerate(self.benefit_coverage_periods):
            for attribute, messages in bcp.errors().items():
                errors.setdefault(f"benefit_coverage_periods[{index}].{attribute}", []).extend(messages)
        for index, area in enumerate(self.geographic_rating_areas):
            for attribute, messages in area.errors().items():
                errors.setdefault(f"geographic_rating_areas[{index}].{attribute}", []).extend(messages)
        return errors
