"""
Per-identity public key cache.

Entries map identity text -> 32-byte public key. An entry, once written,
equals what the provider returns for that identity's derivation path;
this holds because the salt never changes. Entries are never evicted one
by one: the owner can clear the whole cache, and the next request for
each identity re-derives the same key.

Two concurrent misses for one identity may both fetch and write. Both
write the same bytes, so the race is harmless and left unguarded.
"""

from __future__ import annotations

import logging

from principal_signer.access import AccessControl
from principal_signer.derivation import build_path
from principal_signer.errors import MalformedResponseError
from principal_signer.identity import Identity
from principal_signer.provider.client import KeyId, SignerProvider
from principal_signer.provider.schema import PUBLIC_KEY_BYTES
from principal_signer.salt import SaltLifecycle
from principal_signer.store import PUBLIC_KEY_CACHE_NS, StateStore

logger = logging.getLogger(__name__)


class PublicKeyCache:
    """Lazily derives and caches public keys per caller."""

    def __init__(
        self,
        store: StateStore,
        provider: SignerProvider,
        access: AccessControl,
        salt: SaltLifecycle,
        key_id: KeyId,
    ) -> None:
        self._store = store
        self._provider = provider
        self._access = access
        self._salt = salt
        self._key_id = key_id

    def cached(self, identity: Identity) -> bytes | None:
        return self._store.get(PUBLIC_KEY_CACHE_NS, identity.to_text())

    def __len__(self) -> int:
        return len(self._store.keys(PUBLIC_KEY_CACHE_NS))

    async def get(self, caller: Identity) -> bytes:
        """Return the caller's public key, deriving it on first use."""
        caller = self._access.authenticate(caller)

        cached = self.cached(caller)
        if cached is not None:
            logger.debug("Public key cache hit for %s", caller)
            return cached

        logger.debug("Public key cache miss for %s", caller)
        path = build_path(self._salt.require_salt(), caller)
        reply = await self._provider.schnorr_public_key(path, self._key_id)

        public_key = reply.public_key
        if not isinstance(public_key, bytes):
            raise MalformedResponseError(
                f"Invalid public key type: expected bytes, got {type(public_key).__name__}",
            )
        if len(public_key) != PUBLIC_KEY_BYTES:
            raise MalformedResponseError(
                f"Invalid public key length: expected {PUBLIC_KEY_BYTES} bytes, "
                f"got {len(public_key)}",
            )

        self._store.insert(PUBLIC_KEY_CACHE_NS, caller.to_text(), public_key)
        return public_key

    def clear(self, caller: Identity) -> bool:
        """Drop every entry. Returns False, without clearing, for non-owners."""
        caller = self._access.authenticate(caller)
        if not self._access.is_owner(caller):
            logger.warning("Cache clear refused for non-owner %s", caller)
            return False

        removed = self._store.clear(PUBLIC_KEY_CACHE_NS)
        logger.info("Public key cache cleared by %s (%d entries)", caller, removed)
        return True
