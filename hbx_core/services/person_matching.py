"""
Person Matching.

Finds existing people from identifying information (SSN, date of birth
and name) so that applications and roster uploads attach to the right
Person instead of creating duplicates.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hbx_core.models.person import Person
from hbx_core.services.ssn import get_ssn_cipher, normalize_ssn
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)


def find_by_ssn(session: Session, ssn: str) -> Optional[Person]:
    """Person holding `ssn`, if any."""
    digits = normalize_ssn(ssn)
    if digits is None:
        return None
    digest = get_ssn_cipher().digest(digits)
    return session.scalars(select(Person).where(Person.ssn_digest == digest)).first()


def match_by_id_info(
    session: Session,
    ssn: Optional[str] = None,
    dob: Optional[date] = None,
    last_name: Optional[str] = None,
    first_name: Optional[str] = None,
) -> list[Person]:
    """
    People matching the given identifying information.

    Active people with the same SSN and dob match first. Then people with
    the same dob and first/last name (case-insensitive) match where the
    query or the candidate has no SSN, so a known SSN is never matched
    by name alone.

    Raises:
        ValueError: neither an SSN nor a full first name/last name/dob
    """
    digits = normalize_ssn(ssn)
    if digits is None and (dob is None or not last_name or not first_name):
        raise ValueError("must provide an ssn or first_name/last_name/dob or both")

    matches: list[Person] = []

    if digits is not None:
        digest = get_ssn_cipher().digest(digits)
        matches.extend(
            session.scalars(
                select(Person).where(
                    Person.is_active.is_(True),
                    Person.ssn_digest == digest,
                    Person.dob == dob,
                )
            )
        )

    if first_name and last_name and dob is not None:
        by_name = session.scalars(
            select(Person).where(
                Person.dob == dob,
                func.lower(Person.first_name) == first_name.strip().lower(),
                func.lower(Person.last_name) == last_name.strip().lower(),
            )
        )
        matches.extend(p for p in by_name if digits is None or p.ssn_digest is None)

    unique: list[Person] = []
    for person in matches:
        if person not in unique:
            unique.append(person)

    logger.debug(f"match_by_id_info found {len(unique)} candidate(s)")
    return unique


def match_existing_person(session: Session, personish: Any) -> Optional[Person]:
    """
    Person with the same SSN and dob as `personish` (a Person, CensusMember
    or any object with `ssn` and `dob`); None when it carries no SSN.
    """
    digits = normalize_ssn(getattr(personish, "ssn", None))
    if digits is None:
        return None
    digest = get_ssn_cipher().digest(digits)
    return session.scalars(
        select(Person).where(Person.ssn_digest == digest, Person.dob == personish.dob)
    ).first()
