"""
Signer provider protocol: the threshold-signature boundary.

The service never sees private keys. It hands the provider a derivation
path and gets back public keys or signatures. The provider is remote,
asynchronous and untrusted: every reply is deserialized into one of the
frozen reply types below, and anything that doesn't fit is rejected with
MalformedResponseError before the service looks at it.

Concrete implementations:
    - JsonRpcSignerProvider (real, over an injectable transport)
    - LocalSignerProvider (dev/test, in-process Ed25519)
    - FakeProvider (tests)

The protocol has exactly three methods:
    - raw_rand() -> bytes
    - schnorr_public_key(path, key_id) -> PublicKeyReply
    - sign_with_schnorr(message, path, key_id, budget) -> SignatureReply
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import jsonschema  # type: ignore[import-untyped]

from principal_signer.errors import MalformedResponseError
from principal_signer.provider import schema

if TYPE_CHECKING:
    from principal_signer.derivation import DerivationPath

# The one signature scheme a deployment supports.
ED25519 = "ed25519"


# =========================================================================
# Key identifier
# =========================================================================


@dataclass(frozen=True)
class KeyId:
    """Names the provider's master key and its algorithm."""

    name: str
    algorithm: str = ED25519

    def to_dict(self) -> dict[str, str]:
        return {"algorithm": self.algorithm, "name": self.name}


# =========================================================================
# Reply types
# =========================================================================


def _to_bytes(values: list[int]) -> bytes:
    # Schema validation allows integral floats such as 7.0.
    return bytes(int(v) for v in values)


def _check(instance: Any, reply_schema: dict[str, Any], what: str) -> None:
    try:
        schema.validate(instance, reply_schema)
    except jsonschema.ValidationError as e:
        raise MalformedResponseError(
            f"Invalid {what} response from signer provider: {e.message}",
            details={"path": [str(p) for p in e.absolute_path]},
        ) from e


@dataclass(frozen=True)
class RandomnessReply:
    """Result of raw_rand: at least 32 bytes of randomness."""

    random_bytes: bytes

    @classmethod
    def from_result(cls, result: Any) -> RandomnessReply:
        _check(result, schema.RANDOMNESS_SCHEMA, "randomness")
        return cls(random_bytes=_to_bytes(result))


@dataclass(frozen=True)
class PublicKeyReply:
    """Result of schnorr_public_key.

    Attributes:
        public_key: Exactly 32 bytes.
        chain_code: Optional chain code; unused by this service.
    """

    public_key: bytes
    chain_code: bytes = b""

    @classmethod
    def from_result(cls, result: Any) -> PublicKeyReply:
        _check(result, schema.PUBLIC_KEY_SCHEMA, "public key")
        return cls(
            public_key=_to_bytes(result["public_key"]),
            chain_code=_to_bytes(result.get("chain_code") or []),
        )


@dataclass(frozen=True)
class SignatureReply:
    """Result of sign_with_schnorr: exactly 64 bytes."""

    signature: bytes

    @classmethod
    def from_result(cls, result: Any) -> SignatureReply:
        _check(result, schema.SIGNATURE_SCHEMA, "signature")
        return cls(signature=_to_bytes(result["signature"]))


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class SignerProvider(Protocol):
    """Interface for the threshold-signature provider.

    Implementations raise ProviderError on transport or status failures
    and MalformedResponseError on replies of the wrong shape. They do
    not retry; timeouts belong to the transport.
    """

    async def raw_rand(self) -> bytes:
        """Fetch at least 32 bytes of cryptographic randomness."""
        ...

    async def schnorr_public_key(
        self, path: DerivationPath, key_id: KeyId
    ) -> PublicKeyReply:
        """Derive the public key for a derivation path."""
        ...

    async def sign_with_schnorr(
        self,
        message: bytes,
        path: DerivationPath,
        key_id: KeyId,
        budget: int,
    ) -> SignatureReply:
        """Sign a message with the key for a derivation path.

        Args:
            message: Bytes to sign (already validated by the caller).
            path: Derivation path selecting the key.
            key_id: Master key identifier.
            budget: Cycles attached to the call.
        """
        ...
