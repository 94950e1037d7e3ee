"""
Custom Exceptions
Application-specific error handling for the exchange domain models.
"""

from typing import Optional


class HbxCoreError(Exception):
    """Base exception for exchange domain errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class DomainValidationError(HbxCoreError):
    """Raised when an entity fails validation.

    `errors` maps attribute names to the messages reported against them.
    """

    def __init__(self, entity: str, errors: dict[str, list[str]]):
        summary = "; ".join(
            f"{field}: {', '.join(messages)}" for field, messages in errors.items()
        )
        super().__init__(f"{entity} is invalid ({summary})")
        self.entity = entity
        self.errors = errors


class IdentifierGenerationError(HbxCoreError):
    """Raised when an exchange identifier cannot be generated."""

    def __init__(
        self,
        message: str,
        sequence: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.sequence = sequence


class SSNEncryptionError(HbxCoreError):
    """Raised when an SSN cannot be encrypted or decrypted."""

    pass
