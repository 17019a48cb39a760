"""Derivation paths: (salt, identity) pairs fed to the signer provider."""

from __future__ import annotations

from dataclasses import dataclass

from principal_signer.identity import Identity


@dataclass(frozen=True)
class DerivationPath:
    """Ordered pair of raw salt bytes and raw identity bytes.

    Never persisted; rebuilt from the stored salt on every use.
    """

    salt: bytes
    identity: bytes

    @property
    def components(self) -> tuple[bytes, bytes]:
        return (self.salt, self.identity)

    def to_wire(self) -> list[list[int]]:
        """Render as a JSON list of byte arrays."""
        return [list(self.salt), list(self.identity)]


def build_path(salt: bytes, identity: Identity) -> DerivationPath:
    return DerivationPath(salt=bytes(salt), identity=identity.raw)
