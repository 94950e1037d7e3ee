"""
HBX Profile Model.

The exchange's own profile: its CMS identifier, the state it serves, its
benefit sponsorship and its inbox. HbxProfiles are the sponsors visited
by the daily rollover.
"""

from datetime import date
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String, Uuid, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.models.benefit_sponsorship import BenefitSponsorship
from hbx_core.models.inbox import Inbox
from hbx_core.utils.logging import get_logger

if TYPE_CHECKING:
    from hbx_core.core.enums import EntityKind
    from hbx_core.models.organization import Organization
    from hbx_core.services.time_keeper import Clock

logger = get_logger(__name__)


class HbxProfile(Base, UUIDModel, TimeStampedModel, ValidatedModel):
    """Exchange (HBX) profile of an organization."""

    __tablename__ = "hbx_profiles"

    organization_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    cms_id: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="CMS-assigned exchange identifier",
    )
    us_state_abbreviation: Mapped[Optional[str]] = mapped_column(
        String(2),
        nullable=True,
        index=True,
        comment="State served by the exchange",
    )

    organization: Mapped[Optional["Organization"]] = relationship(back_populates="hbx_profile")
    benefit_sponsorship: Mapped[Optional[BenefitSponsorship]] = relationship(
        back_populates="hbx_profile",
        cascade="all, delete-orphan",
        uselist=False,
    )
    inbox: Mapped[Optional[Inbox]] = relationship(
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("inbox", Inbox())
        super().__init__(**kwargs)

    @validates("us_state_abbreviation")
    def _upcase_state(self, key: str, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    # =========================================================================
    # Organization Delegation
    # =========================================================================

    @property
    def legal_name(self) -> Optional[str]:
        return self.organization.legal_name if self.organization else None

    @property
    def dba(self) -> Optional[str]:
        return self.organization.dba if self.organization else None

    @property
    def fein(self) -> Optional[str]:
        return self.organization.fein if self.organization else None

    @property
    def entity_kind(self) -> Optional["EntityKind"]:
        return self.organization.entity_kind if self.organization else None

    # =========================================================================
    # Rollover Hooks
    # =========================================================================

    def on_day_advance(self) -> None:
        logger.debug(f"HbxProfile {self.cms_id}: day advance")

    def on_month_advance(self) -> None:
        logger.debug(f"HbxProfile {self.cms_id}: month advance")

    def on_quarter_advance(self) -> None:
        logger.debug(f"HbxProfile {self.cms_id}: quarter advance")

    def on_year_advance(self) -> None:
        logger.debug(f"HbxProfile {self.cms_id}: year advance")

    def under_open_enrollment(
        self, today: Optional[date] = None, clock: Optional["Clock"] = None
    ) -> bool:
        if self.benefit_sponsorship is None:
            return False
        return self.benefit_sponsorship.is_under_open_enrollment(today, clock)

    # =========================================================================
    # Validation / Lookup
    # =========================================================================

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        for attribute in ("us_state_abbreviation", "cms_id"):
            if not getattr(self, attribute):
                errors[attribute] = ["can't be blank"]
        if self.benefit_sponsorship is not None:
            for attribute, messages in self.benefit_sponsorship.errors().items():
                errors[f"benefit_sponsorship.{attribute}"] = messages
        return errors

    @classmethod
    def all(cls, session: Session) -> list["HbxProfile"]:
        return list(session.scalars(select(cls).order_by(cls.created_at, cls.id)))

    @classmethod
    def find_by_cms_id(cls, session: Session, cms_id: str) -> Optional["HbxProfile"]:
        return session.scalars(select(cls).where(cls.cms_id == cms_id)).first()

    @classmethod
    def find_by_state_abbreviation(cls, session: Session, state: str) -> Optional["HbxProfile"]:
        return session.scalars(
            select(cls).where(cls.us_state_abbreviation == str(state).upper())
        ).first()
