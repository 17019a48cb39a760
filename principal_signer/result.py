"""
Tagged results returned by every SignerService operation.

A result is either ok (``value`` set) or failed (``error`` set to a
SignerErrorCode). Callers match on ``error``; ``detail`` is for humans.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from principal_signer.errors import SignerError, SignerErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class AddressData:
    """Raw material for a client to format a chain address."""

    public_key: bytes
    network_prefix: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "public_key": "0x" + self.public_key.hex(),
            "network_prefix": self.network_prefix,
        }


@dataclass(frozen=True)
class SignedMessage:
    signature: bytes
    public_key: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": "0x" + self.signature.hex(),
            "public_key": "0x" + self.public_key.hex(),
        }


@dataclass(frozen=True)
class HexSignedMessage:
    signature: bytes
    signature_hex: str
    public_key: bytes
    public_key_hex: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature_hex,
            "signature_hex": self.signature_hex,
            "public_key": self.public_key_hex,
            "public_key_hex": self.public_key_hex,
        }


@dataclass(frozen=True)
class SignerResult(Generic[T]):
    """Outcome of one service operation."""

    value: T | None = None
    error: SignerErrorCode | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> SignerResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, exc: SignerError) -> SignerResult[T]:
        return cls(error=exc.code, detail=exc.message)

    def unwrap(self) -> T:
        """Return the value, or raise the failure as a SignerError."""
        if self.error is not None:
            raise SignerError(self.detail or self.error.value, code=self.error)
        return self.value  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            result: dict[str, Any] = {"success": False, "error": self.error.value}
            if self.detail is not None:
                result["detail"] = self.detail
            return result

        result = {"success": True}
        value: Any = self.value
        if hasattr(value, "to_dict"):
            result.update(value.to_dict())
        elif isinstance(value, bytes):
            result["value"] = "0x" + value.hex()
        else:
            result["value"] = value
        return result
