"""Shared fixtures: identities, a call-counting local provider, a service."""

from __future__ import annotations

from collections import Counter

import pytest

from principal_signer.derivation import DerivationPath
from principal_signer.identity import Identity
from principal_signer.provider.client import KeyId, PublicKeyReply, SignatureReply
from principal_signer.provider.local import LocalSignerProvider
from principal_signer.service import SignerService
from principal_signer.store import SqliteStateStore

MASTER_SEED = bytes(range(32))

OWNER = Identity(b"owner-principal")
ALICE = Identity(b"alice-principal")
BOB = Identity(b"bob-principal")


class CountingProvider:
    """LocalSignerProvider that records every call."""

    def __init__(self, master_seed: bytes = MASTER_SEED) -> None:
        self.inner = LocalSignerProvider(master_seed=master_seed)
        self.calls: Counter[str] = Counter()
        self.budgets: list[int] = []

    async def raw_rand(self) -> bytes:
        self.calls["raw_rand"] += 1
        return await self.inner.raw_rand()

    async def schnorr_public_key(
        self, path: DerivationPath, key_id: KeyId
    ) -> PublicKeyReply:
        self.calls["schnorr_public_key"] += 1
        return await self.inner.schnorr_public_key(path, key_id)

    async def sign_with_schnorr(
        self,
        message: bytes,
        path: DerivationPath,
        key_id: KeyId,
        budget: int,
    ) -> SignatureReply:
        self.calls["sign_with_schnorr"] += 1
        self.budgets.append(budget)
        return await self.inner.sign_with_schnorr(message, path, key_id, budget)


@pytest.fixture
def owner() -> Identity:
    return OWNER


@pytest.fixture
def alice() -> Identity:
    return ALICE


@pytest.fixture
def bob() -> Identity:
    return BOB


@pytest.fixture
def provider() -> CountingProvider:
    return CountingProvider()


@pytest.fixture
def store() -> SqliteStateStore:
    return SqliteStateStore(":memory:")


@pytest.fixture
def service(
    store: SqliteStateStore, provider: CountingProvider, owner: Identity
) -> SignerService:
    svc = SignerService(store, provider)
    svc.bootstrap(owner)
    return svc
