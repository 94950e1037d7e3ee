"""
Organization Model.

A legal entity registered with the exchange, identified by its Federal
Employer Identification Number (FEIN). The exchange itself is an
organization owning an HbxProfile.
"""

import re
import secrets
from typing import Any, Optional

from sqlalchemy import Boolean, ColumnElement, Enum, String, func, or_, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from hbx_core.core.enums import AddressKind, EntityKind
from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.models.hbx_profile import HbxProfile
from hbx_core.models.location import OfficeLocation
from hbx_core.services.id_generator import get_id_generator

FEIN_LENGTH = 9

_NON_DIGITS = re.compile(r"\D")

_UNCHECKED_OFFICE_KINDS = {AddressKind.HOME, AddressKind.WORK}


class Organization(Base, UUIDModel, TimeStampedModel, ValidatedModel):
    """Registered legal entity."""

    __tablename__ = "organizations"

    hbx_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        comment="Exchange-assigned organization id",
    )
    legal_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    dba: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Doing business as")
    fein: Mapped[Optional[str]] = mapped_column(
        String(9),
        nullable=True,
        unique=True,
        comment="Federal Employer Identification Number",
    )
    entity_kind: Mapped[Optional[EntityKind]] = mapped_column(Enum(EntityKind), nullable=True)
    home_page: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    hbx_profile: Mapped[Optional[HbxProfile]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
        uselist=False,
    )
    office_locations: Mapped[list[OfficeLocation]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    @validates("fein")
    def _strip_fein(self, key: str, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _NON_DIGITS.sub("", str(value))

    @validates("entity_kind")
    def _coerce_entity_kind(self, key: str, value: Any) -> Optional[EntityKind]:
        if value is None:
            return None
        try:
            return EntityKind(value)
        except ValueError:
            raise ValueError(f"{value} is not a valid entity kind")

    @property
    def primary_office_location(self) -> Optional[OfficeLocation]:
        return next((loc for loc in self.office_locations if loc.is_primary), None)

    def before_create(self) -> None:
        if not self.hbx_id:
            self.hbx_id = get_id_generator().generate_organization_id()

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if not self.legal_name:
            errors["legal_name"] = ["can't be blank"]
        if not self.fein:
            errors["fein"] = ["can't be blank"]
        elif len(self.fein) != FEIN_LENGTH:
            errors["fein"] = [f"{self.fein} is not a valid FEIN"]
        if not self.office_locations:
            errors["office_locations"] = ["can't be blank"]
        kind_messages = self.office_location_kind_errors()
        if kind_messages:
            errors.setdefault("office_locations", []).extend(kind_messages)
        for index, location in enumerate(self.office_locations):
            for attribute, messages in location.errors().items():
                errors.setdefault(f"office_locations[{index}].{attribute}", []).extend(messages)
        if self.hbx_profile is not None:
            for attribute, messages in self.hbx_profile.errors().items():
                errors[f"hbx_profile.{attribute}"] = messages
        return errors

    def office_location_kind_errors(self) -> list[str]:
        """
        Office addresses need exactly one primary and at most one mailing.

        Locations addressed as a home or work address are exempt from
        the check.
        """
        kinds = [loc.address.kind for loc in self.office_locations if loc.address is not None]
        if not kinds or any(kind in _UNCHECKED_OFFICE_KINDS for kind in kinds):
            return []
        primary_count = kinds.count(AddressKind.PRIMARY)
        if primary_count == 0:
            return ["must select one primary address"]
        if primary_count > 1:
            return ["can't have multiple primary addresses"]
        if kinds.count(AddressKind.MAILING) > 1:
            return ["can't have more than one mailing address"]
        return []

    # =========================================================================
    # Lookup
    # =========================================================================

    @classmethod
    def find_by_fein(cls, session: Session, fein: str) -> Optional["Organization"]:
        return session.scalars(select(cls).where(cls.fein == _NON_DIGITS.sub("", fein))).first()

    @classmethod
    def generate_fein(cls, session: Session) -> str:
        """Unused placeholder FEIN: "00" followed by seven random digits."""
        while True:
            fein = "00" + "".join(str(secrets.randbelow(10)) for _ in range(FEIN_LENGTH - 2))
            if session.scalar(select(func.count()).select_from(cls).where(cls.fein == fein)) == 0:
                return fein

    @classmethod
    def default_search_order(cls) -> list[ColumnElement]:
        return [cls.legal_name.asc()]

    @classmethod
    def search_criteria(cls, text: str) -> ColumnElement[bool]:
        """Case-insensitive partial match on legal name or FEIN."""
        clean = text.strip()
        return or_(
            cls.legal_name.icontains(clean, autoescape=True),
            cls.fein.icontains(clean, autoescape=True),
        )

    @classmethod
    def search(cls, session: Session, text: str) -> list["Organization"]:
        return list(
            session.scalars(
                select(cls).where(cls.search_criteria(text)).order_by(*cls.default_search_order())
            )
        )
