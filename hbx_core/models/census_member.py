"""
Census Member Model.

An employee or dependent listed on an employer's roster, before (or
without) being matched to a Person.
"""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hbx_core.core.enums import EmployeeRelationship
from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.models.location import Address, Email
from hbx_core.models.mixins import DemographicsMixin, SSNMixin
from hbx_core.services.time_keeper import date_of_record as current_date_of_record
from hbx_core.utils.dates import DATE_FMT


class CensusMember(Base, UUIDModel, TimeStampedModel, ValidatedModel, DemographicsMixin, SSNMixin):
    """Roster entry for an employee or one of their dependents."""

    __tablename__ = "census_members"

    employee_relationship: Mapped[Optional[EmployeeRelationship]] = mapped_column(
        Enum(EmployeeRelationship),
        nullable=True,
    )
    employer_assigned_family_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )

    address: Mapped[Optional[Address]] = relationship(cascade="all, delete-orphan", uselist=False)
    email: Mapped[Optional[Email]] = relationship(cascade="all, delete-orphan", uselist=False)

    def __init__(self, **kwargs: Any):
        ssn = kwargs.pop("ssn", None)
        date_of_birth = kwargs.pop("date_of_birth", None)
        super().__init__(**kwargs)
        if ssn is not None:
            self.ssn = ssn
        if date_of_birth is not None:
            self.date_of_birth = date_of_birth

    @validates("employee_relationship")
    def _coerce_employee_relationship(self, key: str, value: Any) -> Optional[EmployeeRelationship]:
        if value is None:
            return None
        return EmployeeRelationship(value)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name, self.name_sfx]
        return " ".join(p for p in parts if p)

    def dob_string(self) -> str:
        return self.dob.strftime("%Y%m%d") if self.dob else ""

    @property
    def date_of_birth(self) -> Optional[str]:
        return self.dob.strftime("%m/%d/%Y") if self.dob else None

    @date_of_birth.setter
    def date_of_birth(self, value: Optional[str]) -> None:
        # rosters are uploaded with ISO dates; unparseable input clears dob
        try:
            self.dob = datetime.strptime(value or "", DATE_FMT).date()
        except ValueError:
            self.dob = None

    def errors(self, today: Optional[date] = None) -> dict[str, list[str]]:
        today = today or current_date_of_record()
        errors: dict[str, list[str]] = {}
        for attribute in ("first_name", "last_name", "dob"):
            if not getattr(self, attribute):
                errors[attribute] = ["can't be blank"]
        if self.gender is None:
            errors["gender"] = ["must be selected"]
        ssn_messages = self.ssn_errors()
        if ssn_messages:
            errors["ssn"] = ssn_messages
        dob_messages = self.dob_errors(today)
        if dob_messages:
            errors.setdefault("dob", []).extend(dob_messages)
        # a blank roster address is treated as absent
        address = None if self.address is None or self.address.is_blank() else self.address
        for prefix, child in (("address", address), ("email", self.email)):
            if child is not None:
                for attribute, messages in child.errors().items():
                    errors.setdefault(f"{prefix}.{attribute}", []).extend(messages)
        return errors
