"""
Core Enumerations for the Exchange Domain Models.
Source: 45 CFR 155.410 (Initial and annual open enrollment periods)
Verified: 2025-12-18
"""

from enum import Enum


# =============================================================================
# Market Enums
# =============================================================================


class ServiceMarket(str, Enum):
    """Markets in which an exchange sponsor offers benefits."""

    SHOP = "shop"  # Small Business Health Options Program
    INDIVIDUAL = "individual"  # Individual and family market
    COVERALL = "coverall"  # State-funded coverage for non-eligible residents

    @property
    def display_name(self) -> str:
        """Name used in benefit coverage period titles."""
        return "SHOP" if self is ServiceMarket.SHOP else "Individual"


class RolloverPeriod(str, Enum):
    """Calendar boundaries crossed when the date of record advances.

    Dispatch order within one tick is DAY, MONTH, QUARTER, YEAR.
    """

    DAY = "day"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


# =============================================================================
# Person Enums
# =============================================================================


class Gender(str, Enum):
    """Gender options recorded on enrollment applications."""

    MALE = "male"
    FEMALE = "female"


class RelationshipKind(str, Enum):
    """Relationship of a relative to a person."""

    SELF = "self"
    SPOUSE = "spouse"
    LIFE_PARTNER = "life_partner"
    CHILD = "child"
    WARD = "ward"
    FOSTER_CHILD = "foster_child"
    ADOPTED_CHILD = "adopted_child"
    STEPSON_OR_STEPDAUGHTER = "stepson_or_stepdaughter"
    STEPCHILD = "stepchild"
    DOMESTIC_PARTNER = "domestic_partner"
    PARENT = "parent"
    GRANDCHILD = "grandchild"
    GRANDPARENT = "grandparent"
    SIBLING = "sibling"
    UNRELATED = "unrelated"


class EmployeeRelationship(str, Enum):
    """Census member relationship to the employee on a roster."""

    SELF = "self"
    SPOUSE = "spouse"
    DOMESTIC_PARTNER = "domestic_partner"
    CHILD_UNDER_26 = "child_under_26"
    CHILD_26_AND_OVER = "child_26_and_over"
    DISABLED_CHILD_26_AND_OVER = "disabled_child_26_and_over"


# =============================================================================
# Location Enums
# =============================================================================


class AddressKind(str, Enum):
    """Use of a postal address.

    People carry home, work and mailing addresses; office locations carry
    primary, mailing and branch addresses.
    """

    HOME = "home"
    WORK = "work"
    MAILING = "mailing"
    PRIMARY = "primary"
    BRANCH = "branch"


class PhoneKind(str, Enum):
    """Use of a phone number."""

    HOME = "home"
    WORK = "work"
    MOBILE = "mobile"
    MAIN = "main"
    FAX = "fax"


class EmailKind(str, Enum):
    """Use of an email address."""

    HOME = "home"
    WORK = "work"


# =============================================================================
# Organization Enums
# =============================================================================


class EntityKind(str, Enum):
    """Legal entity kinds for sponsoring organizations."""

    TAX_EXEMPT_ORGANIZATION = "tax_exempt_organization"
    C_CORPORATION = "c_corporation"
    S_CORPORATION = "s_corporation"
    PARTNERSHIP = "partnership"
    LIMITED_LIABILITY_CORPORATION = "limited_liability_corporation"
    LIMITED_LIABILITY_PARTNERSHIP = "limited_liability_partnership"
    HOUSEHOLD_EMPLOYER = "household_employer"
    GOVERNMENTAL_EMPLOYER = "governmental_employer"
    FOREIGN_EMBASSY_OR_CONSULATE = "foreign_embassy_or_consulate"


# =============================================================================
# Messaging Enums
# =============================================================================


class MessageFolder(str, Enum):
    """Mailbox folders."""

    INBOX = "inbox"
    SENT = "sent"
    DELETED = "deleted"


# =============================================================================
# Infrastructure Enums
# =============================================================================


class IdGeneratorProvider(str, Enum):
    """Sources of exchange (HBX) identifiers."""

    SEQUENCE = "sequence"  # Remote sequence service
    RANDOM_UUID = "random_uuid"  # Local random UUIDs, for non-production use


class IdSequence(str, Enum):
    """Named sequences served by the remote sequence service."""

    MEMBER_ID = "member_id"
    POLICY_ID = "policy_id"
    ORGANIZATION_ID = "organization_id"
