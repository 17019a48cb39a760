"""
Salt lifecycle: the one-time secret mixed into every derivation path.

States:
    UNINITIALIZED -> INITIALIZED (terminal)

The transition is owner-triggered and one-way. Changing the salt would
silently re-key every identity and strand every cached public key, so
there is no operation that rewrites or removes it.

Race handling:
    ``initialize`` suspends while fetching randomness. The final write is
    a compare-and-set (``insert_if_absent``); if another initializer
    stored a salt in the meantime, the late one fails ALREADY_INITIALIZED
    and the first salt stays.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from principal_signer.access import AccessControl
from principal_signer.errors import MalformedResponseError, SignerError, SignerErrorCode
from principal_signer.identity import Identity
from principal_signer.provider.client import SignerProvider
from principal_signer.provider.schema import MIN_RANDOMNESS_BYTES
from principal_signer.store import SALT_KEY, SALT_NS, StateStore

logger = logging.getLogger(__name__)

SALT_INITIALIZED_MESSAGE = "Salt initialized successfully with secure randomness"


class SaltState(StrEnum):
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZED = "INITIALIZED"


def _already_initialized() -> SignerError:
    return SignerError(
        "Salt has already been initialized",
        code=SignerErrorCode.ALREADY_INITIALIZED,
    )


class SaltLifecycle:
    """Owns the salt slot of a StateStore."""

    def __init__(
        self,
        store: StateStore,
        provider: SignerProvider,
        access: AccessControl,
    ) -> None:
        self._store = store
        self._provider = provider
        self._access = access

    @property
    def state(self) -> SaltState:
        if self.is_initialized():
            return SaltState.INITIALIZED
        return SaltState.UNINITIALIZED

    def is_initialized(self) -> bool:
        return self._store.get(SALT_NS, SALT_KEY) is not None

    def require_salt(self) -> bytes:
        """Return the salt or fail SALT_NOT_INITIALIZED."""
        salt = self._store.get(SALT_NS, SALT_KEY)
        if salt is None:
            raise SignerError(
                "Salt not initialized. Owner must call initialize_salt() first.",
                code=SignerErrorCode.SALT_NOT_INITIALIZED,
            )
        return salt

    async def initialize(self, caller: Identity) -> str:
        """Fetch randomness and store it as the salt, exactly once."""
        caller = self._access.authenticate(caller)
        self._access.require_owner(caller)

        if self.is_initialized():
            raise _already_initialized()

        random_bytes = await self._provider.raw_rand()
        if not isinstance(random_bytes, bytes) or len(random_bytes) < MIN_RANDOMNESS_BYTES:
            raise MalformedResponseError(
                "Invalid randomness received from signer provider",
                details={"min_bytes": MIN_RANDOMNESS_BYTES},
            )

        if not self._store.insert_if_absent(SALT_NS, SALT_KEY, random_bytes):
            logger.warning("Salt was initialized concurrently; keeping the first value")
            raise _already_initialized()

        logger.info("Salt initialized by %s", caller)
        return SALT_INITIALIZED_MESSAGE
