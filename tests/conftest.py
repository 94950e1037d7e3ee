"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

import os
from datetime import date

import pytest

os.environ.setdefault("HBX_ENVIRONMENT", "testing")

from sqlalchemy.orm import Session  # noqa: E402

from hbx_core.db.connection import create_db_engine  # noqa: E402
from hbx_core.models import (  # noqa: E402
    Base,
    BenefitCoveragePeriod,
    BenefitSponsorship,
    Address,
    HbxProfile,
    OfficeLocation,
    Organization,
    Phone,
)
from hbx_core.services.id_generator import RandomUuidIdentifierGenerator, set_id_generator  # noqa: E402
from hbx_core.services.ssn import SSNCipher, set_ssn_cipher  # noqa: E402
from hbx_core.services.time_keeper import reset_time_keeper  # noqa: E402


@pytest.fixture
def time_keeper():
    """Process TimeKeeper pinned to 2022-01-10."""
    keeper = reset_time_keeper(initial_date=date(2022, 1, 10))
    yield keeper
    reset_time_keeper()


@pytest.fixture(autouse=True)
def ssn_cipher():
    """Fresh SSN cipher with throwaway keys for each test."""
    cipher = SSNCipher.generate()
    set_ssn_cipher(cipher)
    yield cipher
    set_ssn_cipher(None)


@pytest.fixture(autouse=True)
def id_generator():
    """Random UUID identifiers for each test."""
    generator = RandomUuidIdentifierGenerator()
    set_id_generator(generator)
    yield generator
    set_id_generator(None)


def make_period(
    start_on=date(2022, 1, 1),
    end_on=date(2022, 12, 31),
    open_enrollment_start_on=date(2021, 11, 1),
    open_enrollment_end_on=date(2022, 1, 31),
    service_market="individual",
    **kwargs,
) -> BenefitCoveragePeriod:
    return BenefitCoveragePeriod(
        start_on=start_on,
        end_on=end_on,
        open_enrollment_start_on=open_enrollment_start_on,
        open_enrollment_end_on=open_enrollment_end_on,
        service_market=service_market,
        **kwargs,
    )


def make_office_location(kind="primary", is_primary=True, **address) -> OfficeLocation:
    address.setdefault("address_1", "1225 I St NW")
    address.setdefault("city", "Washington")
    address.setdefault("state", "DC")
    address.setdefault("zip", "20005")
    return OfficeLocation(
        is_primary=is_primary,
        address=Address(kind=kind, **address),
        phone=Phone(kind="main", full_phone_number="202-555-0100"),
    )


@pytest.fixture
def office_location_factory():
    """Builder for office locations defaulting to a primary DC office."""
    return make_office_location


@pytest.fixture
def period_factory():
    """Builder for coverage periods defaulting to plan year 2022."""
    return make_period


@pytest.fixture
def period_2022() -> BenefitCoveragePeriod:
    """Plan year 2022 with open enrollment 2021-11-01..2022-01-31."""
    return make_period()


@pytest.fixture
def period_2023() -> BenefitCoveragePeriod:
    """Plan year 2023 with open enrollment 2022-11-01..2023-01-31."""
    return make_period(
        start_on=date(2023, 1, 1),
        end_on=date(2023, 12, 31),
        open_enrollment_start_on=date(2022, 11, 1),
        open_enrollment_end_on=date(2023, 1, 31),
    )


@pytest.fixture
def sponsorship(period_2022, period_2023) -> BenefitSponsorship:
    """Individual market sponsorship offering plan years 2022 and 2023."""
    return BenefitSponsorship(
        service_markets=["individual"],
        benefit_coverage_periods=[period_2022, period_2023],
    )


@pytest.fixture
def hbx_profile(sponsorship) -> HbxProfile:
    organization = Organization(
        legal_name="Health Benefit Exchange Authority",
        fein="53-1234567",
        office_locations=[make_office_location()],
    )
    return HbxProfile(
        organization=organization,
        cms_id="DC0",
        us_state_abbreviation="dc",
        benefit_sponsorship=sponsorship,
    )


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Session on the in-memory database."""
    with Session(engine, expire_on_commit=False) as session:
        yield session


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
