"""
Person Model.

A person known to the exchange: identity, demographics, encrypted SSN,
relationships to other people and an inbox. Every person receives an
exchange member id (hbx_id) and a welcome message when first saved.
"""

import re
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    ColumnElement,
    Date,
    Enum,
    ForeignKey,
    Select,
    String,
    UniqueConstraint,
    Uuid,
    and_,
    or_,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from hbx_core.core.config import get_exchange_settings
from hbx_core.core.enums import AddressKind, PhoneKind, RelationshipKind
from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.models.inbox import Inbox, build_welcome_inbox
from hbx_core.models.location import Address, Phone
from hbx_core.models.mixins import DemographicsMixin, SSNMixin
from hbx_core.services.id_generator import get_id_generator
from hbx_core.services.ssn import SSN_LENGTH, get_ssn_cipher, normalize_ssn
from hbx_core.services.time_keeper import date_of_record as current_date_of_record
from hbx_core.utils.dates import to_date
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)

US_DATE_FMT = "%m/%d/%Y"

# Suffixes written in capitals when building display names
ROMAN_NUMERAL_SUFFIXES = {"ii", "iii", "iv", "v"}

_SSN_LIKE = re.compile(r"^[\d\s-]+$")


class PersonRelationship(Base, UUIDModel):
    """Relationship from a person to one of their relatives."""

    __tablename__ = "person_relationships"
    __table_args__ = (UniqueConstraint("person_id", "relative_id"),)

    person_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    relative_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[RelationshipKind] = mapped_column(Enum(RelationshipKind), nullable=False)

    person: Mapped[Optional["Person"]] = relationship(
        back_populates="person_relationships",
        foreign_keys=[person_id],
    )
    relative: Mapped[Optional["Person"]] = relationship(foreign_keys=[relative_id])

    @validates("kind")
    def _coerce_kind(self, key: str, value: Any) -> RelationshipKind:
        try:
            return RelationshipKind(value)
        except ValueError:
            raise ValueError(f"{value} is not a valid relationship kind")


class Person(Base, UUIDModel, TimeStampedModel, ValidatedModel, DemographicsMixin, SSNMixin):
    """A consumer, employee, broker or dependent known to the exchange."""

    __tablename__ = "persons"
    __table_args__ = (UniqueConstraint("ssn_digest"),)

    hbx_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        comment="Exchange-assigned member id",
    )
    name_pfx: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    alternate_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    date_of_death: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_incarcerated: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    is_disabled: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    is_tobacco_user: Mapped[str] = mapped_column(String(20), nullable=False, default="unknown")
    language_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Applicants without an in-state address may still be residents
    no_state_address: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    no_state_address_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    person_relationships: Mapped[list[PersonRelationship]] = relationship(
        back_populates="person",
        cascade="all, delete-orphan",
        foreign_keys="PersonRelationship.person_id",
    )
    addresses: Mapped[list[Address]] = relationship(cascade="all, delete-orphan")
    phones: Mapped[list[Phone]] = relationship(cascade="all, delete-orphan")
    inbox: Mapped[Optional[Inbox]] = relationship(
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("id", uuid4())
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("is_tobacco_user", "unknown")
        kwargs.setdefault("no_state_address", False)
        ssn = kwargs.pop("ssn", None)
        date_of_birth = kwargs.pop("date_of_birth", None)
        super().__init__(**kwargs)
        if ssn is not None:
            self.ssn = ssn
        if date_of_birth is not None:
            self.date_of_birth = date_of_birth

    @validates("date_of_death")
    def _coerce_date_of_death(self, key: str, value: Any) -> Optional[date]:
        return None if value is None else to_date(value)

    # =========================================================================
    # Names / Dates
    # =========================================================================

    @property
    def full_name(self) -> str:
        parts = [self.name_pfx, self.first_name, self.middle_name, self.last_name, self.name_sfx]
        return " ".join(p for p in parts if p)

    def first_name_last_name_and_suffix(self) -> str:
        suffix = self.name_sfx
        if suffix and suffix.lower() in ROMAN_NUMERAL_SUFFIXES:
            suffix = suffix.upper()
        parts = [(self.first_name or "").capitalize(), (self.last_name or "").capitalize(), suffix]
        return " ".join(p for p in parts if p)

    @property
    def date_of_birth(self) -> Optional[str]:
        """dob as MM/DD/YYYY."""
        return self.dob.strftime(US_DATE_FMT) if self.dob else None

    @date_of_birth.setter
    def date_of_birth(self, value: Optional[str]) -> None:
        # unparseable input clears dob
        try:
            self.dob = datetime.strptime(value or "", US_DATE_FMT).date()
        except ValueError:
            self.dob = None

    def dob_to_string(self) -> str:
        return self.dob.strftime("%Y%m%d") if self.dob else ""

    # =========================================================================
    # Relationships
    # =========================================================================

    def person_relationship_for(self, other: "Person") -> Optional[PersonRelationship]:
        return next(
            (rel for rel in self.person_relationships if rel.relative_id == other.id),
            None,
        )

    def find_relationship_with(self, other: "Person") -> Optional[RelationshipKind]:
        """Kind of relationship to `other`; SELF when `other` is this person."""
        if self.id == other.id:
            return RelationshipKind.SELF
        rel = self.person_relationship_for(other)
        return rel.kind if rel else None

    def ensure_relationship_with(self, other: Optional["Person"], kind: Any) -> None:
        """Record `other` as a relative of `kind`, replacing any existing kind."""
        if other is None:
            return
        existing = self.person_relationship_for(other)
        if existing is not None:
            existing.kind = kind
        else:
            self.person_relationships.append(
                PersonRelationship(kind=kind, relative_id=other.id, relative=other)
            )

    def relatives(self) -> list["Person"]:
        return [
            rel.relative
            for rel in self.person_relationships
            if rel.relative_id != self.id and rel.relative is not None
        ]

    # =========================================================================
    # Addresses / Phones
    # =========================================================================

    def _address_of_kind(self, kind: AddressKind) -> Optional[Address]:
        return next((a for a in self.addresses if a.kind == kind), None)

    def _phone_of_kind(self, kind: PhoneKind) -> Optional[Phone]:
        return next((p for p in self.phones if p.kind == kind), None)

    @property
    def home_address(self) -> Optional[Address]:
        return self._address_of_kind(AddressKind.HOME)

    @property
    def mailing_address(self) -> Optional[Address]:
        """Mailing address, falling back to the home address."""
        return self._address_of_kind(AddressKind.MAILING) or self.home_address

    def has_mailing_address(self) -> bool:
        return any(a.kind == AddressKind.MAILING for a in self.addresses)

    def contact_phones(self) -> list[Phone]:
        return [p for p in self.phones if p.full_phone_number]

    @property
    def main_phone(self) -> Optional[Phone]:
        return self._phone_of_kind(PhoneKind.MAIN)

    @property
    def work_phone(self) -> Optional[Phone]:
        """Work phone, falling back to the main phone."""
        return self._phone_of_kind(PhoneKind.WORK) or self.main_phone

    @property
    def home_phone(self) -> Optional[Phone]:
        return self._phone_of_kind(PhoneKind.HOME)

    @property
    def mobile_phone(self) -> Optional[Phone]:
        return self._phone_of_kind(PhoneKind.MOBILE)

    def work_phone_or_best(self) -> Optional[str]:
        """Full number of the work, mobile or home phone, in that order."""
        best_phone = self.work_phone or self.mobile_phone or self.home_phone
        return best_phone.full_phone_number if best_phone else None

    def residency_eligible(self) -> bool:
        return bool(self.no_state_address and self.no_state_address_reason)

    def is_state_resident(self, state: Optional[str] = None) -> bool:
        """
        Whether the person lives in the exchange's state.

        Without an in-state address the person is a resident only when a
        reason is recorded. Otherwise the home address decides, or the
        mailing address when there is no home address.
        """
        if self.no_state_address:
            return self.residency_eligible()
        state = (state or get_exchange_settings().ACA_STATE_ABBREVIATION).upper()
        kind = AddressKind.HOME if self.home_address is not None else AddressKind.MAILING
        return any(a.kind == kind and a.state == state for a in self.addresses)

    # =========================================================================
    # Lifecycle / Validation
    # =========================================================================

    def before_create(self) -> None:
        if not self.hbx_id:
            self.hbx_id = get_id_generator().generate_member_id()
        if self.inbox is None:
            self.inbox = build_welcome_inbox()
            logger.debug(f"Welcome inbox created for person {self.hbx_id}")

    def errors(self, today: Optional[date] = None) -> dict[str, list[str]]:
        """Validation messages keyed by attribute; dates are checked against `today`."""
        today = today or current_date_of_record()
        errors: dict[str, list[str]] = {}

        for attribute in ("first_name", "last_name"):
            if not getattr(self, attribute):
                errors[attribute] = ["can't be blank"]

        ssn_messages = self.ssn_errors()
        if ssn_messages:
            errors["ssn"] = ssn_messages

        dob_messages = self.dob_errors(today)
        if dob_messages:
            errors.setdefault("dob", []).extend(dob_messages)
        if self.date_of_death is not None:
            if today < self.date_of_death:
                errors.setdefault("date_of_death", []).append(
                    f"future date: {self.date_of_death.isoformat()} is invalid date of death"
                )
            if self.dob is not None and self.date_of_death < self.dob:
                errors.setdefault("date_of_death", []).append(
                    "date of death cannot precede date of birth"
                )
                errors.setdefault("dob", []).append("date of birth cannot follow date of death")

        for index, address in enumerate(self.addresses):
            for attribute, messages in address.errors().items():
                errors.setdefault(f"addresses[{index}].{attribute}", []).extend(messages)
        for index, phone in enumerate(self.phones):
            for attribute, messages in phone.errors().items():
                errors.setdefault(f"phones[{index}].{attribute}", []).extend(messages)
        return errors

    # =========================================================================
    # Lookup
    # =========================================================================

    @classmethod
    def find_by_hbx_id(cls, session: Session, hbx_id: str) -> Optional["Person"]:
        return session.scalars(select(cls).where(cls.hbx_id == hbx_id)).first()

    @classmethod
    def active(cls) -> Select:
        return select(cls).where(cls.is_active.is_(True))

    @classmethod
    def inactive(cls) -> Select:
        return select(cls).where(cls.is_active.is_(False))

    @classmethod
    def default_search_order(cls) -> list[ColumnElement]:
        return [cls.last_name.asc(), cls.first_name.asc()]

    @classmethod
    def search_criteria(cls, text: str) -> ColumnElement[bool]:
        """
        Case-insensitive partial match on first name, last name or hbx_id.

        Text shaped like an SSN also matches the person holding it, and
        "first last" matches both name parts together.
        """
        clean = text.strip()
        clauses = [
            cls.first_name.icontains(clean, autoescape=True),
            cls.last_name.icontains(clean, autoescape=True),
            cls.hbx_id.icontains(clean, autoescape=True),
        ]
        digits = normalize_ssn(clean)
        if _SSN_LIKE.match(clean) and digits and len(digits) == SSN_LENGTH:
            clauses.append(cls.ssn_digest == get_ssn_cipher().digest(digits))
        parts = clean.split()
        if len(parts) > 1:
            clauses.append(
                and_(
                    cls.first_name.icontains(parts[0], autoescape=True),
                    cls.last_name.icontains(parts[-1], autoescape=True),
                )
            )
        return or_(*clauses)

    @classmethod
    def search(cls, session: Session, text: str) -> list["Person"]:
        return list(
            session.scalars(
                select(cls).where(cls.search_criteria(text)).order_by(*cls.default_search_order())
            )
        )

    def __repr__(self) -> str:
        return f"<Person {self.hbx_id} {self.full_name}>"
