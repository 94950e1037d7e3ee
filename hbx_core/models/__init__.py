"""
SQLAlchemy Models for the Exchange Core.

This module exports all database models and registers the lifecycle
callbacks run on flush.
"""

from hbx_core.models.base import Base, TimeStampedModel, UUIDModel, ValidatedModel
from hbx_core.models.benefit_coverage_period import BenefitCoveragePeriod
from hbx_core.models.benefit_sponsorship import BenefitSponsorship
from hbx_core.models.inbox import Inbox, Message, build_welcome_inbox
from hbx_core.models.location import Address, Email, GeographicRatingArea, OfficeLocation, Phone
from hbx_core.models.hbx_profile import HbxProfile
from hbx_core.models.organization import Organization
from hbx_core.models.person import Person, PersonRelationship
from hbx_core.models.census_member import CensusMember
from hbx_core.models.family import IMMEDIATE_FAMILY, is_immediate_family
from hbx_core.models import lifecycle  # noqa: F401

__all__ = [
    # Base
    "Base",
    "TimeStampedModel",
    "UUIDModel",
    "ValidatedModel",
    # Benefits
    "BenefitCoveragePeriod",
    "BenefitSponsorship",
    # Exchange
    "HbxProfile",
    "Organization",
    # People
    "Person",
    "PersonRelationship",
    "CensusMember",
    "IMMEDIATE_FAMILY",
    "is_immediate_family",
    # Locations
    "Address",
    "Phone",
    "Email",
    "OfficeLocation",
    "GeographicRatingArea",
    # Messaging
    "Inbox",
    "Message",
    "build_welcome_inbox",
]
