"""
Error taxonomy for principal-signer.

Every failure an inbound operation can report maps to exactly one
``SignerErrorCode``. Components raise ``SignerError`` (or one of the
provider subclasses); the service converts them into ``SignerResult``
values at its boundary so callers match on the code, never on message
text.

Codes:
    - UNAUTHENTICATED: caller is the anonymous identity.
    - NOT_OWNER: owner-only operation called by someone else.
    - ALREADY_INITIALIZED: salt slot already present.
    - SALT_NOT_INITIALIZED: key/sign operation before the salt exists.
    - EMPTY_MESSAGE / MESSAGE_TOO_LARGE: message outside 1..1 MiB.
    - INVALID_NETWORK_PREFIX: prefix outside 0..255.
    - PROVIDER_ERROR: transport or status failure talking to the provider.
    - MALFORMED_RESPONSE: provider replied with the wrong shape or length.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class SignerErrorCode(StrEnum):
    """Failure kinds surfaced by the signer service."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_OWNER = "NOT_OWNER"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    SALT_NOT_INITIALIZED = "SALT_NOT_INITIALIZED"
    EMPTY_MESSAGE = "EMPTY_MESSAGE"
    MESSAGE_TOO_LARGE = "MESSAGE_TOO_LARGE"
    INVALID_NETWORK_PREFIX = "INVALID_NETWORK_PREFIX"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"


class SignerError(Exception):
    """Base exception carrying a machine-readable error code.

    Args:
        message: Human-readable description.
        code: The taxonomy entry for this failure.
        details: Optional structured context (never secrets).
    """

    def __init__(
        self,
        message: str,
        *,
        code: SignerErrorCode,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message!r})"


class ProviderError(SignerError):
    """The signer provider could not be reached or reported a failure."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code=SignerErrorCode.PROVIDER_ERROR, details=details)


class MalformedResponseError(SignerError):
    """The signer provider replied, but not with the expected shape."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message, code=SignerErrorCode.MALFORMED_RESPONSE, details=details
        )
