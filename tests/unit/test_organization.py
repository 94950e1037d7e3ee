"""
Unit Tests for Organizations and Exchange Profiles
Tests FEIN handling, profile delegation, rollover hooks and validation
"""

from datetime import date

import pytest

from hbx_core.core.enums import EntityKind, RelationshipKind
from hbx_core.models import HbxProfile, OfficeLocation, Organization, is_immediate_family
from hbx_core.services.time_keeper import FixedClock


@pytest.mark.unit
class TestOrganization:
    """Test organization attributes"""

    def test_fein_digits_only(self):
        assert Organization(fein="53-123 4567").fein == "531234567"

    def test_fein_length(self, office_location_factory):
        organization = Organization(legal_name="Acme", fein="12-345", office_locations=[office_location_factory()])
        assert organization.errors() == {"fein": ["12345 is not a valid FEIN"]}

    def test_required_attributes(self):
        assert Organization().errors() == {
            "legal_name": ["can't be blank"],
            "fein": ["can't be blank"],
            "office_locations": ["can't be blank"],
        }

    def test_entity_kind(self):
        organization = Organization(entity_kind="s_corporation")
        assert organization.entity_kind is EntityKind.S_CORPORATION

        with pytest.raises(ValueError, match="sole_proprietor is not a valid entity kind"):
            Organization(entity_kind="sole_proprietor")

    def test_before_create_assigns_hbx_id(self):
        organization = Organization(legal_name="Acme", fein="123456789")
        organization.before_create()
        assert len(organization.hbx_id) == 32


@pytest.mark.unit
class TestOfficeLocations:
    """Test office locations and their address kinds"""

    def make_organization(self, *locations):
        return Organization(legal_name="Acme", fein="123456789", office_locations=list(locations))

    def test_valid_with_one_primary(self, office_location_factory):
        organization = self.make_organization(
            office_location_factory(),
            office_location_factory(kind="mailing", is_primary=False),
            office_location_factory(kind="branch", is_primary=False),
        )

        assert organization.errors() == {}

    def test_primary_office_location(self, office_location_factory):
        branch = office_location_factory(kind="branch", is_primary=False)
        primary = office_location_factory()
        organization = self.make_organization(branch, primary)

        assert organization.primary_office_location is primary
        assert primary.parent is organization
        assert self.make_organization(branch).primary_office_location is None

    def test_requires_a_primary_address(self, office_location_factory):
        organization = self.make_organization(office_location_factory(kind="branch"))

        assert organization.errors() == {"office_locations": ["must select one primary address"]}

    def test_single_primary_address(self, office_location_factory):
        organization = self.make_organization(office_location_factory(), office_location_factory())

        assert organization.errors() == {"office_locations": ["can't have multiple primary addresses"]}

    def test_single_mailing_address(self, office_location_factory):
        organization = self.make_organization(
            office_location_factory(),
            office_location_factory(kind="mailing", is_primary=False),
            office_location_factory(kind="mailing", is_primary=False),
        )

        assert organization.errors() == {"office_locations": ["can't have more than one mailing address"]}

    def test_home_or_work_addresses_skip_kind_check(self, office_location_factory):
        organization = self.make_organization(office_location_factory(kind="work"))

        assert organization.errors() == {}

    def test_location_errors_are_nested(self, office_location_factory):
        location = office_location_factory(zip="2000")
        location.phone.full_phone_number = "555-0100"

        assert self.make_organization(location).errors() == {
            "office_locations[0].address.zip": ["should be in the form: 12345 or 12345-1234"],
            "office_locations[0].phone.number": ["should be in the form: 123-4567"],
        }

    def test_location_requires_address(self):
        assert OfficeLocation().errors() == {"address": ["can't be blank"]}
        assert OfficeLocation().is_primary


@pytest.mark.unit
class TestHbxProfile:
    """Test the exchange profile"""

    def test_delegates_to_organization(self, hbx_profile):
        hbx_profile.organization.entity_kind = "governmental_employer"

        assert hbx_profile.legal_name == "Health Benefit Exchange Authority"
        assert hbx_profile.fein == "531234567"
        assert hbx_profile.entity_kind is EntityKind.GOVERNMENTAL_EMPLOYER
        assert hbx_profile.organization.hbx_profile is hbx_profile

    def test_state_is_upper_cased(self, hbx_profile):
        assert hbx_profile.us_state_abbreviation == "DC"

    def test_has_inbox(self, hbx_profile):
        assert hbx_profile.inbox is not None
        assert hbx_profile.inbox.messages == []

    def test_under_open_enrollment(self, hbx_profile):
        assert hbx_profile.under_open_enrollment(date(2021, 12, 1))
        assert not hbx_profile.under_open_enrollment(date(2022, 6, 1))
        assert hbx_profile.under_open_enrollment(clock=FixedClock(date(2022, 11, 15)))

    def test_without_sponsorship(self):
        assert not HbxProfile(cms_id="DC0", us_state_abbreviation="DC").under_open_enrollment(date(2022, 1, 1))

    def test_rollover_hooks_are_callable(self, hbx_profile):
        hbx_profile.on_day_advance()
        hbx_profile.on_month_advance()
        hbx_profile.on_quarter_advance()
        hbx_profile.on_year_advance()

    def test_validation(self, hbx_profile):
        assert hbx_profile.errors() == {}
        assert HbxProfile().errors() == {
            "us_state_abbreviation": ["can't be blank"],
            "cms_id": ["can't be blank"],
        }


@pytest.mark.unit
class TestFamily:
    """Test immediate family membership"""

    @pytest.mark.parametrize("kind", ["self", "spouse", "child", "stepchild", "domestic_partner", "ward"])
    def test_immediate_family(self, kind):
        assert is_immediate_family(kind)

    @pytest.mark.parametrize("kind", ["parent", "sibling", "grandchild", "unrelated", "cousin", None])
    def test_not_immediate_family(self, kind):
        assert not is_immediate_family(kind)

    def test_accepts_enum(self):
        assert is_immediate_family(RelationshipKind.FOSTER_CHILD)
