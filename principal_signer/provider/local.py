"""
In-process Ed25519 signer provider for development and tests.

Derives one Ed25519 key per (key name, derivation path) from a master
seed with HKDF-SHA256, so the same path always yields the same key pair
and, because Ed25519 is deterministic, the same signature for the same
message. Randomness comes from ``secrets``.

This provider holds private key material in memory. It exists so the
service can run without a threshold network; never deploy it.
"""

from __future__ import annotations

import logging
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from principal_signer.derivation import DerivationPath
from principal_signer.errors import ProviderError
from principal_signer.provider.client import (
    ED25519,
    KeyId,
    PublicKeyReply,
    SignatureReply,
)
from principal_signer.provider.schema import MIN_RANDOMNESS_BYTES

logger = logging.getLogger(__name__)

_INFO_PREFIX = b"principal-signer/local/v1"


class LocalSignerProvider:
    """SignerProvider backed by locally derived Ed25519 keys.

    Args:
        master_seed: Secret root for all derived keys (at least 32 bytes).
            Defaults to fresh randomness, so keys only live as long as
            the instance.
        randomness_bytes: How many bytes raw_rand returns.
    """

    def __init__(
        self,
        master_seed: bytes | None = None,
        randomness_bytes: int = MIN_RANDOMNESS_BYTES,
    ) -> None:
        if master_seed is None:
            master_seed = secrets.token_bytes(32)
        if len(master_seed) < 32:
            raise ValueError("master_seed must be at least 32 bytes")
        if randomness_bytes < MIN_RANDOMNESS_BYTES:
            raise ValueError(
                f"randomness_bytes must be at least {MIN_RANDOMNESS_BYTES}"
            )
        self._master_seed = master_seed
        self._randomness_bytes = randomness_bytes

    async def raw_rand(self) -> bytes:
        return secrets.token_bytes(self._randomness_bytes)

    async def schnorr_public_key(
        self, path: DerivationPath, key_id: KeyId
    ) -> PublicKeyReply:
        private_key = self._derive(path, key_id)
        return PublicKeyReply(public_key=_raw_public_bytes(private_key.public_key()))

    async def sign_with_schnorr(
        self,
        message: bytes,
        path: DerivationPath,
        key_id: KeyId,
        budget: int,
    ) -> SignatureReply:
        if budget <= 0:
            raise ProviderError(
                "sign_with_schnorr requires a positive cycle budget",
                details={"budget": budget},
            )
        private_key = self._derive(path, key_id)
        return SignatureReply(signature=private_key.sign(message))

    def _derive(self, path: DerivationPath, key_id: KeyId) -> Ed25519PrivateKey:
        if key_id.algorithm != ED25519:
            raise ProviderError(
                f"Unsupported key algorithm: {key_id.algorithm}",
                details={"algorithm": key_id.algorithm},
            )
        info = _INFO_PREFIX + _length_prefixed(key_id.name.encode("utf-8"))
        for component in path.components:
            info += _length_prefixed(component)
        seed = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=info,
        ).derive(self._master_seed)
        return Ed25519PrivateKey.from_private_bytes(seed)


def _length_prefixed(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data


def _raw_public_bytes(public_key: Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)
