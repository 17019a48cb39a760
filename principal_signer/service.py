"""
SignerService: the inbound operation surface.

Eight operations:
- initialize_salt: owner fetches the one-time salt
- is_initialized: whether the salt exists (no authentication)
- get_public_key: caller's 32-byte public key
- get_address_data: public key plus a validated network prefix
- sign: 64-byte signature over a message
- sign_with_public_key: signature and public key together
- sign_with_hex: the same, with 0x-hex renderings
- clear_public_key_cache: owner drops every cached key

All state (owner, salt, cache) lives in the injected StateStore; the
service holds no module-level state. Each operation returns a
SignerResult: components raise SignerError, and the service turns it into
a failed result here. Anything else (a bug, a TypeError from a caller
passing the wrong type) propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TypeVar

from principal_signer.access import AccessControl
from principal_signer.cache import PublicKeyCache
from principal_signer.errors import SignerError, SignerErrorCode
from principal_signer.identity import Identity
from principal_signer.provider.client import ED25519, KeyId, SignerProvider
from principal_signer.result import (
    AddressData,
    HexSignedMessage,
    SignedMessage,
    SignerResult,
)
from principal_signer.salt import SaltLifecycle, SaltState
from principal_signer.signing import DEFAULT_SIGN_BUDGET, SigningPipeline, to_hex
from principal_signer.store import StateStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_KEY_NAME = "dfx_test_key"

MIN_NETWORK_PREFIX = 0
MAX_NETWORK_PREFIX = 255


class SignerService:
    """
    Principal-scoped key derivation and signing.

    Usage:
        store = SqliteStateStore("signer.db")
        provider = JsonRpcSignerProvider("https://signer.example/rpc")
        service = SignerService(store, provider)
        service.bootstrap(deployer)

        await service.initialize_salt(deployer)
        result = await service.sign(alice, b"hello")
        if result.ok:
            signature = result.value
    """

    def __init__(
        self,
        store: StateStore,
        provider: SignerProvider,
        key_id: KeyId | None = None,
        sign_budget: int = DEFAULT_SIGN_BUDGET,
    ) -> None:
        """
        Initialize the service.

        Args:
            store: Durable state (owner, salt, public key cache).
            provider: Threshold signer provider.
            key_id: Provider master key. Defaults to the Ed25519 test key.
            sign_budget: Cycles attached to every sign request.
        """
        self.store = store
        self.provider = provider
        self.key_id = key_id or KeyId(name=DEFAULT_KEY_NAME, algorithm=ED25519)

        self.access = AccessControl(store)
        self.salt = SaltLifecycle(store, provider, self.access)
        self.cache = PublicKeyCache(store, provider, self.access, self.salt, self.key_id)
        self.signing = SigningPipeline(
            provider, self.access, self.salt, self.key_id, sign_budget
        )

    def bootstrap(self, deployer: Identity) -> Identity:
        """Record the deploying identity as owner (first start only)."""
        return self.access.record_owner(deployer)

    @property
    def owner(self) -> Identity | None:
        return self.access.owner

    @property
    def salt_state(self) -> SaltState:
        return self.salt.state

    # -----------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------

    async def initialize_salt(self, caller: Identity) -> SignerResult[str]:
        return await self._run("initialize_salt", caller, self.salt.initialize(caller))

    def is_initialized(self) -> bool:
        return self.salt.is_initialized()

    async def get_public_key(self, caller: Identity) -> SignerResult[bytes]:
        return await self._run("get_public_key", caller, self.cache.get(caller))

    async def get_address_data(
        self, caller: Identity, network_prefix: int
    ) -> SignerResult[AddressData]:
        return await self._run(
            "get_address_data", caller, self._address_data(caller, network_prefix)
        )

    async def sign(self, caller: Identity, message: bytes) -> SignerResult[bytes]:
        return await self._run("sign", caller, self.signing.sign(caller, message))

    async def sign_with_public_key(
        self, caller: Identity, message: bytes
    ) -> SignerResult[SignedMessage]:
        return await self._run(
            "sign_with_public_key", caller, self._signed_message(caller, message)
        )

    async def sign_with_hex(
        self, caller: Identity, message: bytes
    ) -> SignerResult[HexSignedMessage]:
        return await self._run("sign_with_hex", caller, self._hex_signed(caller, message))

    async def clear_public_key_cache(self, caller: Identity) -> SignerResult[bool]:
        return await self._run(
            "clear_public_key_cache", caller, self._clear_cache(caller)
        )

    # -----------------------------------------------------------------
    # Composition
    # -----------------------------------------------------------------

    async def _clear_cache(self, caller: Identity) -> bool:
        return self.cache.clear(caller)

    async def _address_data(self, caller: Identity, network_prefix: int) -> AddressData:
        self.access.authenticate(caller)
        if (
            isinstance(network_prefix, bool)
            or not isinstance(network_prefix, int)
            or not MIN_NETWORK_PREFIX <= network_prefix <= MAX_NETWORK_PREFIX
        ):
            raise SignerError(
                f"Network prefix must be between {MIN_NETWORK_PREFIX} and {MAX_NETWORK_PREFIX}",
                code=SignerErrorCode.INVALID_NETWORK_PREFIX,
                details={"network_prefix": network_prefix},
            )
        public_key = await self.cache.get(caller)
        return AddressData(public_key=public_key, network_prefix=network_prefix)

    async def _signed_message(self, caller: Identity, message: bytes) -> SignedMessage:
        signature = await self.signing.sign(caller, message)
        public_key = await self.cache.get(caller)
        return SignedMessage(signature=signature, public_key=public_key)

    async def _hex_signed(self, caller: Identity, message: bytes) -> HexSignedMessage:
        signed = await self._signed_message(caller, message)
        return HexSignedMessage(
            signature=signed.signature,
            signature_hex=to_hex(signed.signature),
            public_key=signed.public_key,
            public_key_hex=to_hex(signed.public_key),
        )

    async def _run(
        self, operation: str, caller: Identity, work: Awaitable[T]
    ) -> SignerResult[T]:
        try:
            return SignerResult.success(await work)
        except SignerError as e:
            logger.info("%s failed for %s: %s", operation, caller, e.code.value)
            return SignerResult.failure(e)
