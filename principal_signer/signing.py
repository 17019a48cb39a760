"""
Signing pipeline: validate, derive, forward, check.

Order of checks for ``sign``:
    1. authenticate the caller
    2. message length within 1..1 MiB
    3. salt initialized
    4. build the derivation path
    5. provider sign_with_schnorr with the fixed cycle budget
    6. signature exactly 64 bytes

Signatures are deterministic because the scheme is (Ed25519); the
pipeline itself adds no nonce or state.
"""

from __future__ import annotations

import logging

from principal_signer.access import AccessControl
from principal_signer.derivation import build_path
from principal_signer.errors import MalformedResponseError, SignerError, SignerErrorCode
from principal_signer.identity import Identity
from principal_signer.provider.client import KeyId, SignerProvider
from principal_signer.provider.schema import SIGNATURE_BYTES
from principal_signer.salt import SaltLifecycle

logger = logging.getLogger(__name__)

MIN_MESSAGE_BYTES = 1
MAX_MESSAGE_BYTES = 1024 * 1024

# Cycles attached to every sign request.
DEFAULT_SIGN_BUDGET = 30_000_000_000


def validate_message(message: bytes | bytearray | memoryview) -> bytes:
    """Return ``message`` as bytes if its length is acceptable.

    Raises:
        TypeError: If ``message`` is not bytes-like.
        SignerError: EMPTY_MESSAGE or MESSAGE_TOO_LARGE.
    """
    if not isinstance(message, (bytes, bytearray, memoryview)):
        raise TypeError(f"message must be bytes, got {type(message).__name__}")
    data = bytes(message)
    if len(data) < MIN_MESSAGE_BYTES:
        raise SignerError(
            f"Message must be at least {MIN_MESSAGE_BYTES} byte(s)",
            code=SignerErrorCode.EMPTY_MESSAGE,
        )
    if len(data) > MAX_MESSAGE_BYTES:
        raise SignerError(
            f"Message exceeds maximum size of {MAX_MESSAGE_BYTES} bytes",
            code=SignerErrorCode.MESSAGE_TOO_LARGE,
            details={"length": len(data)},
        )
    return data


def to_hex(data: bytes) -> str:
    """Lowercase, 0x-prefixed hex."""
    return "0x" + data.hex()


class SigningPipeline:
    def __init__(
        self,
        provider: SignerProvider,
        access: AccessControl,
        salt: SaltLifecycle,
        key_id: KeyId,
        budget: int = DEFAULT_SIGN_BUDGET,
    ) -> None:
        self._provider = provider
        self._access = access
        self._salt = salt
        self._key_id = key_id
        self._budget = budget

    @property
    def budget(self) -> int:
        return self._budget

    async def sign(self, caller: Identity, message: bytes) -> bytes:
        caller = self._access.authenticate(caller)
        data = validate_message(message)
        path = build_path(self._salt.require_salt(), caller)

        logger.debug("Signing %d bytes for %s", len(data), caller)
        reply = await self._provider.sign_with_schnorr(
            data, path, self._key_id, self._budget
        )

        signature = reply.signature
        if not isinstance(signature, bytes):
            raise MalformedResponseError(
                f"Invalid signature type: expected bytes, got {type(signature).__name__}",
            )
        if len(signature) != SIGNATURE_BYTES:
            raise MalformedResponseError(
                f"Invalid signature length: expected {SIGNATURE_BYTES} bytes, "
                f"got {len(signature)}",
            )
        return signature
