"""
principal-signer: principal-scoped key derivation and signing.

For each authenticated caller identity the service derives a stable
public key through an external threshold-signature provider, caches it,
and forwards validated signing requests to the same provider. Private
keys never enter this process.
"""

__version__ = "0.1.0"

from principal_signer.config import (
    SignerSettings,
    build_service,
    configure_logging,
    load_settings,
)
from principal_signer.derivation import DerivationPath, build_path
from principal_signer.errors import (
    MalformedResponseError,
    ProviderError,
    SignerError,
    SignerErrorCode,
)
from principal_signer.identity import ANONYMOUS, MANAGEMENT, Identity
from principal_signer.result import (
    AddressData,
    HexSignedMessage,
    SignedMessage,
    SignerResult,
)
from principal_signer.salt import SALT_INITIALIZED_MESSAGE, SaltState
from principal_signer.service import SignerService
from principal_signer.signing import MAX_MESSAGE_BYTES, MIN_MESSAGE_BYTES
from principal_signer.store import SqliteStateStore, StateStore

__all__ = [
    "ANONYMOUS",
    "MANAGEMENT",
    "MAX_MESSAGE_BYTES",
    "MIN_MESSAGE_BYTES",
    "SALT_INITIALIZED_MESSAGE",
    "AddressData",
    "DerivationPath",
    "HexSignedMessage",
    "Identity",
    "MalformedResponseError",
    "ProviderError",
    "SaltState",
    "SignedMessage",
    "SignerError",
    "SignerErrorCode",
    "SignerResult",
    "SignerService",
    "SignerSettings",
    "SqliteStateStore",
    "StateStore",
    "build_path",
    "build_service",
    "configure_logging",
    "load_settings",
]
