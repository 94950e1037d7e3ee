"""
Location Models.

Postal addresses, phone numbers and email addresses owned by people,
census members and office locations; office locations owned by
organizations; and the geographic rating areas of a benefit sponsorship.
"""

import re
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hbx_core.core.enums import AddressKind, EmailKind, PhoneKind
from hbx_core.models.base import Base, UUIDModel, ValidatedModel

if TYPE_CHECKING:
    from hbx_core.models.organization import Organization

ADDRESS_LINE_ATTRIBUTES = ("address_1", "address_2", "address_3", "city", "county", "state", "zip")
REQUIRED_ADDRESS_ATTRIBUTES = ("address_1", "city", "state", "zip")

ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_NON_DIGITS = re.compile(r"\D")


def _owner_key(table: str) -> Mapped[Optional[UUID]]:
    return mapped_column(
        Uuid,
        ForeignKey(f"{table}.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


def _coerce_kind(enum_class: type, label: str, value: Any) -> Any:
    try:
        return enum_class(value)
    except ValueError:
        raise ValueError(f"{value} is not a valid {label} kind")


def _nested_errors(errors: dict[str, list[str]], prefix: str, child: Optional[ValidatedModel]) -> None:
    if child is None:
        return
    for attribute, messages in child.errors().items():
        errors.setdefault(f"{prefix}.{attribute}", []).extend(messages)


class Address(Base, UUIDModel, ValidatedModel):
    """Postal address of a person, census member or office location."""

    __tablename__ = "addresses"

    person_id: Mapped[Optional[UUID]] = _owner_key("persons")
    census_member_id: Mapped[Optional[UUID]] = _owner_key("census_members")
    office_location_id: Mapped[Optional[UUID]] = _owner_key("office_locations")

    kind: Mapped[AddressKind] = mapped_column(Enum(AddressKind), nullable=False)
    address_1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_3: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True, comment="USPS state abbreviation")
    zip: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    country_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    @validates("kind")
    def _validate_kind(self, key: str, value: Any) -> AddressKind:
        return _coerce_kind(AddressKind, "address", value)

    @validates(*ADDRESS_LINE_ATTRIBUTES, "country_name")
    def _strip(self, key: str, value: Any) -> Optional[str]:
        value = _blank_to_none(value)
        if key == "state" and value is not None:
            return value.upper()
        return value

    def is_blank(self) -> bool:
        return not any(getattr(self, attribute) for attribute in ADDRESS_LINE_ATTRIBUTES)

    @property
    def full_text(self) -> str:
        """One-line form, e.g. "1225 I St NW, Suite 400, Washington, DC 20005"."""
        street = [line for line in (self.address_1, self.address_2, self.address_3) if line]
        region = " ".join(p for p in (self.state, self.zip) if p)
        return ", ".join(p for p in [*street, self.city, region] if p)

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        for attribute in REQUIRED_ADDRESS_ATTRIBUTES:
            if not getattr(self, attribute):
                errors[attribute] = ["can't be blank"]
        if self.zip and not ZIP_PATTERN.match(self.zip):
            errors["zip"] = ["should be in the form: 12345 or 12345-1234"]
        return errors

    def __repr__(self) -> str:
        return f"<Address {self.kind and self.kind.value} {self.full_text}>"


class Phone(Base, UUIDModel, ValidatedModel):
    """Phone number of a person or office location."""

    __tablename__ = "phones"

    person_id: Mapped[Optional[UUID]] = _owner_key("persons")
    office_location_id: Mapped[Optional[UUID]] = _owner_key("office_locations")

    kind: Mapped[PhoneKind] = mapped_column(Enum(PhoneKind), nullable=False)
    country_code: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    area_code: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    number: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    extension: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_primary: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    def __init__(self, **kwargs: Any):
        full_phone_number = kwargs.pop("full_phone_number", None)
        super().__init__(**kwargs)
        if full_phone_number is not None:
            self.full_phone_number = full_phone_number

    @validates("kind")
    def _validate_kind(self, key: str, value: Any) -> PhoneKind:
        return _coerce_kind(PhoneKind, "phone", value)

    @validates("country_code", "area_code", "number", "extension")
    def _digits_only(self, key: str, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _NON_DIGITS.sub("", str(value)) or None

    @property
    def full_phone_number(self) -> str:
        """Area code and number as ten digits; empty when neither is set."""
        return f"{self.area_code or ''}{self.number or ''}"

    @full_phone_number.setter
    def full_phone_number(self, value: Optional[str]) -> None:
        digits = _NON_DIGITS.sub("", value or "")
        if len(digits) == 11 and digits.startswith("1"):
            self.country_code, digits = "1", digits[1:]
        self.area_code = digits[:3]
        self.number = digits[3:]

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if self.area_code and len(self.area_code) != 3:
            errors["area_code"] = ["should be in the form: (123)"]
        if self.number and len(self.number) != 7:
            errors["number"] = ["should be in the form: 123-4567"]
        return errors

    def __str__(self) -> str:
        if not self.full_phone_number:
            return ""
        text = f"({self.area_code}) {(self.number or '')[:3]}-{(self.number or '')[3:]}"
        return f"{text} x {self.extension}" if self.extension else text


class Email(Base, UUIDModel, ValidatedModel):
    """Email address of a census member."""

    __tablename__ = "emails"

    census_member_id: Mapped[Optional[UUID]] = _owner_key("census_members")

    kind: Mapped[EmailKind] = mapped_column(Enum(EmailKind), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    @validates("kind")
    def _validate_kind(self, key: str, value: Any) -> EmailKind:
        return _coerce_kind(EmailKind, "email", value)

    @validates("address")
    def _strip_address(self, key: str, value: Any) -> Optional[str]:
        return _blank_to_none(value)

    def errors(self) -> dict[str, list[str]]:
        if not self.address:
            return {"address": ["can't be blank"]}
        if not EMAIL_PATTERN.match(self.address):
            return {"address": [f"{self.address} is not a valid email"]}
        return {}


class OfficeLocation(Base, UUIDModel, ValidatedModel):
    """Office of an organization: one address and an optional phone."""

    __tablename__ = "office_locations"

    organization_id: Mapped[Optional[UUID]] = _owner_key("organizations")
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    address: Mapped[Optional[Address]] = relationship(cascade="all, delete-orphan", uselist=False)
    phone: Mapped[Optional[Phone]] = relationship(cascade="all, delete-orphan", uselist=False)
    organization: Mapped[Optional["Organization"]] = relationship(back_populates="office_locations")

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("is_primary", True)
        super().__init__(**kwargs)

    @property
    def parent(self) -> Optional["Organization"]:
        return self.organization

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if self.address is None:
            errors["address"] = ["can't be blank"]
        _nested_errors(errors, "address", self.address)
        _nested_errors(errors, "phone", self.phone)
        return errors


class GeographicRatingArea(Base, UUIDModel, ValidatedModel):
    """Premium rating area of a benefit sponsorship and the counties in it."""

    __tablename__ = "geographic_rating_areas"

    benefit_sponsorship_id: Mapped[Optional[UUID]] = _owner_key("benefit_sponsorships")
    rating_area_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    us_counties: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("us_counties", [])
        super().__init__(**kwargs)

    @validates("rating_area_code")
    def _strip_code(self, key: str, value: Any) -> Optional[str]:
        return _blank_to_none(value)

    @validates("us_counties")
    def _strip_counties(self, key: str, value: Any) -> list[str]:
        return [county.strip() for county in value or [] if county and county.strip()]

    def covers_county(self, county: Optional[str]) -> bool:
        """Case-insensitive county membership."""
        if not county:
            return False
        wanted = county.strip().lower()
        return any(c.lower() == wanted for c in self.us_counties)

    def errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if not self.rating_area_code:
            errors["rating_area_code"] = ["can't be blank"]
        if not self.us_counties:
            errors["us_counties"] = ["can't be blank"]
        return errors
