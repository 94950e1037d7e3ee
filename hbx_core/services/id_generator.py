"""
Exchange (HBX) Identifier Generation.

Members, policies and organizations carry an exchange-assigned HBX id.
Two sources are supported, selected by HBX_ID_GENERATOR_PROVIDER:

- sequence: the next value of a named sequence from the remote sequence
  service (POST {SEQUENCE_SERVICE_URL}/sequence.next). The response body
  is a JSON array whose first element is the id.
- random_uuid: a random UUID rendered as 32 hex characters.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

import httpx

from hbx_core.core.config import ExchangeSettings, get_exchange_settings
from hbx_core.core.enums import IdGeneratorProvider, IdSequence
from hbx_core.utils.errors import IdentifierGenerationError

logger = logging.getLogger(__name__)


class IdentifierGenerator(ABC):
    """Source of exchange identifiers."""

    @property
    @abstractmethod
    def provider(self) -> IdGeneratorProvider:
        """Provider kind implemented by this generator."""
        pass

    @abstractmethod
    def generate_id(self, sequence: IdSequence) -> str:
        """Generate the next identifier for `sequence`."""
        pass

    def generate_member_id(self) -> str:
        return self.generate_id(IdSequence.MEMBER_ID)

    def generate_policy_id(self) -> str:
        return self.generate_id(IdSequence.POLICY_ID)

    def generate_organization_id(self) -> str:
        return self.generate_id(IdSequence.ORGANIZATION_ID)


class RandomUuidIdentifierGenerator(IdentifierGenerator):
    """Identifiers from random UUIDs; every sequence draws from the same space."""

    @property
    def provider(self) -> IdGeneratorProvider:
        return IdGeneratorProvider.RANDOM_UUID

    def generate_id(self, sequence: IdSequence) -> str:
        return uuid4().hex


class SequenceIdentifierGenerator(IdentifierGenerator):
    """Identifiers from the remote sequence service."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 2.0,
        attempts: int = 3,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the generator.

        Args:
            base_url: Sequence service base URL
            timeout_seconds: Timeout for each request
            attempts: Requests made before giving up
            client: Optional preconfigured HTTP client
        """
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._attempts = attempts
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout_seconds)

    @property
    def provider(self) -> IdGeneratorProvider:
        return IdGeneratorProvider.SEQUENCE

    def generate_id(self, sequence: IdSequence) -> str:
        last_error: Optional[Exception] = None

        for attempt in range(1, self._attempts + 1):
            try:
                response = self._client.post(
                    "/sequence.next",
                    json={"sequence_name": sequence.value},
                )
                response.raise_for_status()
                return self._parse_body(response, sequence)
            except (httpx.HTTPError, ValueError) as e:
                last_error = e
                logger.warning(
                    "Sequence request for %s failed (attempt %d/%d): %s",
                    sequence.value,
                    attempt,
                    self._attempts,
                    e,
                )

        raise IdentifierGenerationError(
            f"Sequence service gave no {sequence.value} after {self._attempts} attempts",
            sequence=sequence.value,
            original_error=last_error,
        )

    @staticmethod
    def _parse_body(response: httpx.Response, sequence: IdSequence) -> str:
        body = response.json()
        if not isinstance(body, list) or not body:
            raise ValueError(f"Unexpected {sequence.value} response body: {body!r}")
        return str(body[0])

    def close(self) -> None:
        self._client.close()


def create_id_generator(settings: Optional[ExchangeSettings] = None) -> IdentifierGenerator:
    """Build the generator named by HBX_ID_GENERATOR_PROVIDER."""
    settings = settings or get_exchange_settings()

    if settings.ID_GENERATOR_PROVIDER == IdGeneratorProvider.SEQUENCE:
        return SequenceIdentifierGenerator(
            base_url=settings.SEQUENCE_SERVICE_URL,
            timeout_seconds=settings.SEQUENCE_REQUEST_TIMEOUT_SECONDS,
            attempts=settings.SEQUENCE_REQUEST_ATTEMPTS,
        )
    return RandomUuidIdentifierGenerator()


_id_generator: Optional[IdentifierGenerator] = None


def get_id_generator() -> IdentifierGenerator:
    """
    Get or create the configured identifier generator.

    Returns:
        IdentifierGenerator instance
    """
    global _id_generator
    if _id_generator is None:
        _id_generator = create_id_generator()
        logger.info("Identifier generator initialized: %s", _id_generator.provider.value)
    return _id_generator


def set_id_generator(generator: Optional[IdentifierGenerator]) -> None:
    """Install `generator` as the process-wide generator (None resets to settings)."""
    global _id_generator
    _id_generator = generator
