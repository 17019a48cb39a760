"""
Signer provider boundary for principal-signer.

Public API:

    Protocols (for dependency injection):
        - ``SignerProvider``: randomness, public keys, signatures.
        - ``JsonRpcTransport``: injectable HTTP transport.

    Reply types:
        - ``RandomnessReply``, ``PublicKeyReply``, ``SignatureReply``.
        - ``KeyId``: master key name + algorithm.

    Concrete providers:
        - ``JsonRpcSignerProvider``: JSON-RPC implementation.
        - ``LocalSignerProvider``: in-process Ed25519 (dev/test only).

    Transport:
        - ``HttpxTransport``: default httpx-based transport.
"""

from principal_signer.provider.client import (
    ED25519,
    KeyId,
    PublicKeyReply,
    RandomnessReply,
    SignatureReply,
    SignerProvider,
)
from principal_signer.provider.jsonrpc_client import JsonRpcSignerProvider
from principal_signer.provider.local import LocalSignerProvider
from principal_signer.provider.schema import (
    MIN_RANDOMNESS_BYTES,
    PUBLIC_KEY_BYTES,
    SIGNATURE_BYTES,
)
from principal_signer.provider.transport import HttpxTransport, JsonRpcTransport

__all__ = [
    "ED25519",
    "MIN_RANDOMNESS_BYTES",
    "PUBLIC_KEY_BYTES",
    "SIGNATURE_BYTES",
    "HttpxTransport",
    "JsonRpcSignerProvider",
    "JsonRpcTransport",
    "KeyId",
    "LocalSignerProvider",
    "PublicKeyReply",
    "RandomnessReply",
    "SignatureReply",
    "SignerProvider",
]
