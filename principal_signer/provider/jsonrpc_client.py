"""
JSON-RPC signer provider: real network implementation of SignerProvider.

Builds raw_rand / schnorr_public_key / sign_with_schnorr requests and
turns the replies into typed reply objects. Uses an injectable transport
(JsonRpcTransport) so the HTTP layer can be swapped for test fakes
without changing request or parsing logic.

No retry loops. No secrets. No signing logic beyond request building.

Response conventions:
    - Success: {"jsonrpc": "2.0", "id": n, "result": ...}
    - Failure: {"jsonrpc": "2.0", "id": n, "error": {"code": ..., "message": ...}}
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from principal_signer.derivation import DerivationPath
from principal_signer.errors import MalformedResponseError, ProviderError
from principal_signer.provider.client import (
    KeyId,
    PublicKeyReply,
    RandomnessReply,
    SignatureReply,
)
from principal_signer.provider.transport import HttpxTransport, JsonRpcTransport

logger = logging.getLogger(__name__)


class JsonRpcSignerProvider:
    """Signer provider over JSON-RPC, implementing the SignerProvider protocol.

    Args:
        url: The provider's JSON-RPC endpoint URL.
        transport: Injectable transport for HTTP POST. Defaults to
            HttpxTransport. Pass a FakeTransport for testing.
    """

    def __init__(
        self,
        url: str,
        transport: JsonRpcTransport | None = None,
    ) -> None:
        self._url = url
        self._transport = transport or HttpxTransport()
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    # -----------------------------------------------------------------
    # SignerProvider protocol methods
    # -----------------------------------------------------------------

    async def raw_rand(self) -> bytes:
        """Fetch randomness via the ``raw_rand`` method."""
        result = await self._call("raw_rand", {})
        return RandomnessReply.from_result(result).random_bytes

    async def schnorr_public_key(
        self, path: DerivationPath, key_id: KeyId
    ) -> PublicKeyReply:
        """Derive a public key via the ``schnorr_public_key`` method."""
        params = {
            "canister_id": None,
            "derivation_path": path.to_wire(),
            "key_id": key_id.to_dict(),
        }
        result = await self._call("schnorr_public_key", params)
        return PublicKeyReply.from_result(result)

    async def sign_with_schnorr(
        self,
        message: bytes,
        path: DerivationPath,
        key_id: KeyId,
        budget: int,
    ) -> SignatureReply:
        """Sign via the ``sign_with_schnorr`` method, attaching ``budget`` cycles."""
        params = {
            "message": list(message),
            "derivation_path": path.to_wire(),
            "key_id": key_id.to_dict(),
            "aux": None,
        }
        result = await self._call("sign_with_schnorr", params, cycles=budget)
        return SignatureReply.from_result(result)

    # -----------------------------------------------------------------
    # Request plumbing
    # -----------------------------------------------------------------

    async def _call(
        self,
        method: str,
        params: dict[str, Any],
        cycles: int | None = None,
    ) -> Any:
        payload: dict[str, Any] = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        if cycles is not None:
            payload["cycles"] = cycles

        response = await self._transport.post_json(self._url, payload)
        return _extract_result(method, response)


# =====================================================================
# Response parsing (pure functions, no I/O)
# =====================================================================


def _extract_result(method: str, response: dict[str, Any]) -> Any:
    """Pull ``result`` out of a JSON-RPC response.

    Handles:
        - Error member present (provider rejected the call) -> ProviderError
        - Neither result nor error -> MalformedResponseError
    """
    error = response.get("error")
    if error is not None:
        if isinstance(error, dict):
            message = error.get("message") or "unknown provider error"
            code = error.get("code")
        else:
            message, code = str(error), None
        logger.warning("Signer provider rejected %s: %s", method, message)
        raise ProviderError(
            f"Signer provider rejected {method}: {message}",
            details={"method": method, "code": code},
        )

    if "result" not in response:
        raise MalformedResponseError(
            f"No result in {method} response from signer provider",
            details={"method": method},
        )

    return response["result"]
