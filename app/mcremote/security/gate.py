"""Shared-secret authentication for inbound requests."""

import logging
import secrets

from mcremote.core.config import AgentConfig
from mcremote.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

# Header carrying the client credential
API_KEY_HEADER = "X-API-Key"


class AccessGate:
    """Validates the X-API-Key credential against the configured key.

    The gate holds no per-request state. Every protected entry point must
    call ``authenticate`` before doing anything else.

    Args:
        api_key: Configured shared secret.
    """

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key.encode("utf-8")

    @classmethod
    def from_config(cls, config: AgentConfig) -> "AccessGate":
        """Build a gate from the agent configuration."""
        return cls(config.api_key)

    def authenticate(self, credential: str | None) -> None:
        """Check a credential header value.

        Args:
            credential: Value of the X-API-Key header, None if absent.

        Raises:
            UnauthorizedError: If the credential is missing, empty or wrong.
        """
        if not credential:
            logger.warning("Request rejected: missing %s header", API_KEY_HEADER)
            raise UnauthorizedError(f"Missing {API_KEY_HEADER} header")

        if not secrets.compare_digest(credential.encode("utf-8"), self._api_key):
            logger.warning("Request rejected: invalid API key")
            raise UnauthorizedError("Invalid API key")
