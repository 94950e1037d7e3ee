"""
Social Security Number Handling.

Normalization and composition checks for SSNs, plus the cipher used to
store them at rest. Encryption is Fernet (AES-128-CBC + HMAC-SHA256) from
the `cryptography` package; lookups use a keyed HMAC digest because
Fernet tokens are randomized.

Source: https://www.ssa.gov/employer/randomization.html
Source: https://cryptography.io/en/latest/fernet/
Verified: 2025-12-18
"""

import hashlib
import hmac
import re
import secrets
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from hbx_core.core.config import ExchangeSettings, get_exchange_settings
from hbx_core.utils.errors import SSNEncryptionError
from hbx_core.utils.logging import get_logger

logger = get_logger(__name__)

SSN_LENGTH = 9

INVALID_AREA_NUMBERS = {"000", "666"}
INVALID_AREA_RANGE = range(900, 1000)
INVALID_GROUP_NUMBER = "00"
INVALID_SERIAL_NUMBER = "0000"

_NON_DIGITS = re.compile(r"\D")


def normalize_ssn(value: Optional[str]) -> Optional[str]:
    """Strip non-digits; blank input normalizes to None."""
    if value is None:
        return None
    digits = _NON_DIGITS.sub("", str(value))
    return digits or None


def is_ssn_composition_correct(ssn: str) -> bool:
    """
    Check an SSN against the SSA's never-issued compositions.

    Invalid: area (first three digits) 000, 666 or 900-999; group
    (digits 4-5) 00; serial (last four digits) 0000.
    """
    area, group, serial = ssn[0:3], ssn[3:5], ssn[5:9]
    if area in INVALID_AREA_NUMBERS:
        return False
    if area.isdigit() and int(area) in INVALID_AREA_RANGE:
        return False
    if group == INVALID_GROUP_NUMBER:
        return False
    if serial == INVALID_SERIAL_NUMBER:
        return False
    return True


def ssn_errors(ssn: Optional[str]) -> list[str]:
    """Validation messages for an SSN; blank SSNs are allowed."""
    ssn = normalize_ssn(ssn)
    if ssn is None:
        return []
    if len(ssn) != SSN_LENGTH:
        return ["SSN must be 9 digits"]
    if not is_ssn_composition_correct(ssn):
        return ["SSN is not a valid composition"]
    return []


class SSNCipher:
    """Encrypts SSNs for storage and derives their lookup digests."""

    def __init__(self, encryption_key: str | bytes, digest_key: str | bytes):
        if isinstance(digest_key, str):
            digest_key = digest_key.encode()
        try:
            self._fernet = Fernet(encryption_key)
        except (ValueError, TypeError) as e:
            raise SSNEncryptionError("SSN encryption key is not a valid Fernet key", e)
        self._digest_key = digest_key

    @classmethod
    def generate(cls) -> "SSNCipher":
        """Cipher with throwaway keys."""
        return cls(Fernet.generate_key(), secrets.token_bytes(32))

    def encrypt(self, ssn: str) -> str:
        return self._fernet.encrypt(ssn.encode()).decode()

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode()).decode()
        except InvalidToken as e:
            raise SSNEncryptionError("Encrypted SSN could not be decrypted", e)

    def digest(self, ssn: str) -> str:
        return hmac.new(self._digest_key, ssn.encode(), hashlib.sha256).hexdigest()


def create_ssn_cipher(settings: Optional[ExchangeSettings] = None) -> SSNCipher:
    """
    Build the cipher from HBX_SSN_ENCRYPTION_KEY / HBX_SSN_DIGEST_KEY.

    Outside production, missing keys are replaced by throwaway keys;
    SSNs encrypted with them are unreadable by any other process.
    """
    settings = settings or get_exchange_settings()

    if settings.SSN_ENCRYPTION_KEY and settings.SSN_DIGEST_KEY:
        return SSNCipher(settings.SSN_ENCRYPTION_KEY, settings.SSN_DIGEST_KEY)

    if settings.is_production:
        raise SSNEncryptionError("HBX_SSN_ENCRYPTION_KEY and HBX_SSN_DIGEST_KEY are required in production")

    logger.warning("SSN keys not configured; using throwaway keys")
    return SSNCipher.generate()


_ssn_cipher: Optional[SSNCipher] = None


def get_ssn_cipher() -> SSNCipher:
    global _ssn_cipher
    if _ssn_cipher is None:
        _ssn_cipher = create_ssn_cipher()
    return _ssn_cipher


def set_ssn_cipher(cipher: Optional[SSNCipher]) -> None:
    """Install `cipher` as the process-wide cipher (None resets to settings)."""
    global _ssn_cipher
    _ssn_cipher = cipher
