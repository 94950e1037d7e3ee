"""
Shared Model Mixins.

Name, birth date, gender and SSN attributes common to people and census members.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import Date, String, inspect
from sqlalchemy.orm import Mapped, mapped_column, validates

from hbx_core.core.enums import Gender
from hbx_core.services.ssn import get_ssn_cipher, normalize_ssn, ssn_errors
from hbx_core.utils.dates import age_on, to_date


class SSNMixin:
    """
    Encrypted Social Security Number.

    `encrypted_ssn` holds the Fernet token; `ssn_digest` the keyed digest
    used for equality lookups.
    """

    encrypted_ssn: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ssn_digest: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    @property
    def ssn(self) -> Optional[str]:
        if not self.encrypted_ssn:
            return None
        return get_ssn_cipher().decrypt(self.encrypted_ssn)

    @ssn.setter
    def ssn(self, new_ssn: Optional[str]) -> None:
        digits = normalize_ssn(new_ssn)
        if digits is None:
            self.encrypted_ssn = None
            self.ssn_digest = None
            return
        cipher = get_ssn_cipher()
        self.encrypted_ssn = cipher.encrypt(digits)
        self.ssn_digest = cipher.digest(digits)

    def ssn_changed(self) -> bool:
        return inspect(self).attrs.encrypted_ssn.history.has_changes()

    def ssn_errors(self) -> list[str]:
        return ssn_errors(self.ssn)


class DemographicsMixin:
    """Name parts, date of birth and gender."""

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    middle_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    name_sfx: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    dob: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    gender: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    @validates("gender")
    def _downcase_gender(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is None or not str(value).strip():
            return None
        gender = value.value if isinstance(value, Gender) else str(value).strip().lower()
        if gender not in {g.value for g in Gender}:
            raise ValueError(f"{value} is not a valid gender")
        return gender

    @validates("first_name", "middle_name", "last_name", "name_sfx")
    def _strip_name(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @validates("dob")
    def _coerce_dob(self, key: str, value: Any) -> Optional[date]:
        return None if value is None else to_date(value)

    def age_on(self, on: date) -> int:
        """Age in whole years on `on`."""
        return age_on(self.dob, on)

    def dob_errors(self, today: date) -> list[str]:
        if self.dob is not None and today < self.dob:
            return [f"future date: {self.dob.isoformat()} is invalid date of birth"]
        return []
