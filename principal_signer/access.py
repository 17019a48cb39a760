"""
Access control: caller authentication and owner authorization.

The owner is recorded once, at bootstrap, and never transferred. Checks
are pure reads of the state store; nothing here mutates state except
``record_owner``.
"""

from __future__ import annotations

import logging

from principal_signer.errors import SignerError, SignerErrorCode
from principal_signer.identity import Identity
from principal_signer.store import OWNER_KEY, OWNER_NS, StateStore

logger = logging.getLogger(__name__)


def authenticate(caller: Identity) -> Identity:
    """Return ``caller`` unless it is the anonymous identity."""
    if caller.is_anonymous:
        raise SignerError(
            "Anonymous callers are not allowed",
            code=SignerErrorCode.UNAUTHENTICATED,
        )
    return caller


class AccessControl:
    """Owner bookkeeping on top of a StateStore."""

    def __init__(self, store: StateStore) -> None:
        self._store = store

    def authenticate(self, caller: Identity) -> Identity:
        return authenticate(caller)

    @property
    def owner(self) -> Identity | None:
        raw = self._store.get(OWNER_NS, OWNER_KEY)
        if raw is None:
            return None
        return Identity(raw)

    def record_owner(self, deployer: Identity) -> Identity:
        """Record ``deployer`` as owner unless an owner already exists.

        Returns the owner in effect afterwards.

        Raises:
            ValueError: If ``deployer`` is anonymous.
        """
        if deployer.is_anonymous:
            raise ValueError("the anonymous identity cannot own a signer")

        if self._store.insert_if_absent(OWNER_NS, OWNER_KEY, deployer.raw):
            logger.info("Recorded owner %s", deployer)
            return deployer

        existing = self.owner
        if existing is None:
            raise RuntimeError("owner slot reported present but could not be read")
        if existing != deployer:
            logger.warning(
                "Keeping existing owner %s; ignoring deployer %s", existing, deployer
            )
        return existing

    def is_owner(self, caller: Identity) -> bool:
        owner = self.owner
        return owner is not None and owner == caller

    def require_owner(self, caller: Identity) -> None:
        if not self.is_owner(caller):
            logger.warning("Owner-only operation refused for %s", caller)
            raise SignerError(
                "Only the owner can perform this operation",
                code=SignerErrorCode.NOT_OWNER,
            )
