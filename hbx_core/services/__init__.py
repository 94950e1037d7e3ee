"""
Services Layer for the Exchange Core.

Exports the date of record, rollover dispatch, identifier generation and
SSN services.
"""

from hbx_core.services.day_advancer import (
    AdvanceResult,
    DayAdvancer,
    SponsorHooks,
    rollovers_for,
)
from hbx_core.services.time_keeper import (
    Clock,
    FixedClock,
    TimeKeeper,
    date_of_record,
    get_time_keeper,
    reset_time_keeper,
    resolve_today,
)
from hbx_core.services.id_generator import (
    IdentifierGenerator,
    RandomUuidIdentifierGenerator,
    SequenceIdentifierGenerator,
    create_id_generator,
    get_id_generator,
    set_id_generator,
)
from hbx_core.services.ssn import (
    SSNCipher,
    create_ssn_cipher,
    get_ssn_cipher,
    normalize_ssn,
    set_ssn_cipher,
    ssn_errors,
)

__all__ = [
    # Date of record
    "AdvanceResult",
    "Clock",
    "DayAdvancer",
    "FixedClock",
    "SponsorHooks",
    "TimeKeeper",
    "date_of_record",
    "get_time_keeper",
    "reset_time_keeper",
    "resolve_today",
    "rollovers_for",
    # Identifiers
    "IdentifierGenerator",
    "RandomUuidIdentifierGenerator",
    "SequenceIdentifierGenerator",
    "create_id_generator",
    "get_id_generator",
    "set_id_generator",
    # SSN
    "SSNCipher",
    "create_ssn_cipher",
    "get_ssn_cipher",
    "normalize_ssn",
    "set_ssn_cipher",
    "ssn_errors",
]
