"""
Caller identities.

An Identity is the opaque, authenticated reference to whoever invoked an
operation. This package never mints identities for callers; the
authentication layer upstream hands them in. The textual form is the
self-checking principal encoding:

    text = group5(lower(base32(crc32_be(raw) || raw)))

with base32 padding stripped and the result split into 5-character
groups joined by ``-``. Two identities are equal iff their raw bytes are
equal.
"""

from __future__ import annotations

import base64
import zlib
from dataclasses import dataclass

# Raw principals are at most 29 bytes.
MAX_IDENTITY_BYTES = 29

_GROUP = 5


@dataclass(frozen=True)
class Identity:
    """Immutable caller identifier (raw principal bytes)."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes):
            object.__setattr__(self, "raw", bytes(self.raw))
        if len(self.raw) > MAX_IDENTITY_BYTES:
            raise ValueError(
                f"identity must be at most {MAX_IDENTITY_BYTES} bytes, got {len(self.raw)}"
            )

    @classmethod
    def from_text(cls, text: str) -> Identity:
        """Parse the dashed textual form, verifying the checksum."""
        compact = text.replace("-", "").upper()
        padding = "=" * (-len(compact) % 8)
        try:
            decoded = base64.b32decode(compact + padding)
        except ValueError as e:
            raise ValueError(f"invalid identity text: {text!r}") from e
        if len(decoded) < 4:
            raise ValueError(f"invalid identity text: {text!r}")

        checksum, raw = decoded[:4], decoded[4:]
        identity = cls(raw)
        if checksum != _crc32(raw) or identity.to_text() != text:
            raise ValueError(f"identity checksum mismatch: {text!r}")
        return identity

    def to_text(self) -> str:
        encoded = base64.b32encode(_crc32(self.raw) + self.raw)
        compact = encoded.decode("ascii").rstrip("=").lower()
        return "-".join(
            compact[i : i + _GROUP] for i in range(0, len(compact), _GROUP)
        )

    @property
    def is_anonymous(self) -> bool:
        return self.raw == ANONYMOUS.raw

    def __str__(self) -> str:
        return self.to_text()


def _crc32(data: bytes) -> bytes:
    return zlib.crc32(data).to_bytes(4, "big")


# Well-known identities
ANONYMOUS = Identity(b"\x04")  # 2vxsx-fae
MANAGEMENT = Identity(b"")  # aaaaa-aa
