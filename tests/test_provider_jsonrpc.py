"""
Tests for JsonRpcSignerProvider: canned JSON-RPC responses, no network.

Uses a FakeTransport that returns pre-built response dicts, exercising
request building and reply parsing in jsonrpc_client.py and client.py.

Test plan:
- raw_rand: success, too short, wrong shape, out-of-range byte
- schnorr_public_key: request shape, success, wrong length, missing
  field, non-array, boolean elements
- sign_with_schnorr: request shape with cycles, success, wrong length
- JSON-RPC error member -> ProviderError; no result -> MalformedResponse
- Transport errors propagate unchanged
"""

from typing import Any

import pytest

from principal_signer.derivation import DerivationPath
from principal_signer.errors import (
    MalformedResponseError,
    ProviderError,
    SignerErrorCode,
)
from principal_signer.provider.client import KeyId
from principal_signer.provider.jsonrpc_client import JsonRpcSignerProvider

URL = "http://signer.test/rpc"
KEY_ID = KeyId(name="dfx_test_key")
PATH = DerivationPath(salt=bytes(range(32)), identity=b"alice")

# ---------------------------------------------------------------------------
# Fake transports
# ---------------------------------------------------------------------------


class FakeTransport:
    """Returns canned JSON-RPC responses for testing."""

    def __init__(self, response: dict[str, Any]) -> None:
        self._response = response
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((url, payload))
        return self._response


class ErrorTransport:
    """Raises an exception on post_json to simulate transport failures."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        raise self._exc


def ok(result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def provider_for(response: dict[str, Any]) -> tuple[JsonRpcSignerProvider, FakeTransport]:
    transport = FakeTransport(response)
    return JsonRpcSignerProvider(URL, transport=transport), transport


# ---------------------------------------------------------------------------
# raw_rand
# ---------------------------------------------------------------------------


class TestRawRand:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        provider, transport = provider_for(ok(list(range(32))))
        assert await provider.raw_rand() == bytes(range(32))

        url, payload = transport.calls[0]
        assert url == URL
        assert payload["method"] == "raw_rand"
        assert payload["jsonrpc"] == "2.0"
        assert "cycles" not in payload

    @pytest.mark.asyncio
    async def test_longer_randomness_kept_verbatim(self) -> None:
        provider, _ = provider_for(ok([9] * 48))
        assert await provider.raw_rand() == bytes([9] * 48)

    @pytest.mark.asyncio
    async def test_too_short(self) -> None:
        provider, _ = provider_for(ok([1] * 31))
        with pytest.raises(MalformedResponseError):
            await provider.raw_rand()

    @pytest.mark.asyncio
    async def test_not_an_array(self) -> None:
        provider, _ = provider_for(ok({"bytes": [1] * 32}))
        with pytest.raises(MalformedResponseError):
            await provider.raw_rand()

    @pytest.mark.asyncio
    async def test_byte_out_of_range(self) -> None:
        provider, _ = provider_for(ok([256] + [0] * 31))
        with pytest.raises(MalformedResponseError):
            await provider.raw_rand()


# ---------------------------------------------------------------------------
# schnorr_public_key
# ---------------------------------------------------------------------------


class TestPublicKey:
    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        provider, transport = provider_for(ok({"public_key": [7] * 32, "chain_code": [0] * 32}))
        await provider.schnorr_public_key(PATH, KEY_ID)

        _, payload = transport.calls[0]
        assert payload["method"] == "schnorr_public_key"
        assert payload["params"] == {
            "canister_id": None,
            "derivation_path": [list(range(32)), list(b"alice")],
            "key_id": {"algorithm": "ed25519", "name": "dfx_test_key"},
        }

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        provider, _ = provider_for(ok({"public_key": [7] * 32, "chain_code": [1] * 32}))
        reply = await provider.schnorr_public_key(PATH, KEY_ID)
        assert reply.public_key == bytes([7] * 32)
        assert reply.chain_code == bytes([1] * 32)

    @pytest.mark.asyncio
    async def test_chain_code_optional(self) -> None:
        provider, _ = provider_for(ok({"public_key": [7] * 32}))
        reply = await provider.schnorr_public_key(PATH, KEY_ID)
        assert reply.chain_code == b""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("length", [0, 31, 33, 64])
    async def test_wrong_length(self, length: int) -> None:
        provider, _ = provider_for(ok({"public_key": [7] * length}))
        with pytest.raises(MalformedResponseError) as exc_info:
            await provider.schnorr_public_key(PATH, KEY_ID)
        assert exc_info.value.code == SignerErrorCode.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_missing_public_key(self) -> None:
        provider, _ = provider_for(ok({"chain_code": [0] * 32}))
        with pytest.raises(MalformedResponseError):
            await provider.schnorr_public_key(PATH, KEY_ID)

    @pytest.mark.asyncio
    async def test_public_key_as_string(self) -> None:
        provider, _ = provider_for(ok({"public_key": "07" * 32}))
        with pytest.raises(MalformedResponseError):
            await provider.schnorr_public_key(PATH, KEY_ID)

    @pytest.mark.asyncio
    async def test_boolean_elements_rejected(self) -> None:
        provider, _ = provider_for(ok({"public_key": [True] * 32}))
        with pytest.raises(MalformedResponseError):
            await provider.schnorr_public_key(PATH, KEY_ID)

    @pytest.mark.asyncio
    async def test_null_result(self) -> None:
        provider, _ = provider_for(ok(None))
        with pytest.raises(MalformedResponseError):
            await provider.schnorr_public_key(PATH, KEY_ID)


# ---------------------------------------------------------------------------
# sign_with_schnorr
# ---------------------------------------------------------------------------


class TestSign:
    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        provider, transport = provider_for(ok({"signature": [5] * 64}))
        await provider.sign_with_schnorr(b"hi", PATH, KEY_ID, 30_000_000_000)

        _, payload = transport.calls[0]
        assert payload["method"] == "sign_with_schnorr"
        assert payload["cycles"] == 30_000_000_000
        assert payload["params"]["message"] == [104, 105]
        assert payload["params"]["aux"] is None
        assert payload["params"]["derivation_path"] == PATH.to_wire()

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        provider, _ = provider_for(ok({"signature": [5] * 64}))
        reply = await provider.sign_with_schnorr(b"hi", PATH, KEY_ID, 1)
        assert reply.signature == bytes([5] * 64)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("length", [0, 32, 63, 65])
    async def test_wrong_length(self, length: int) -> None:
        provider, _ = provider_for(ok({"signature": [5] * length}))
        with pytest.raises(MalformedResponseError):
            await provider.sign_with_schnorr(b"hi", PATH, KEY_ID, 1)

    @pytest.mark.asyncio
    async def test_missing_signature(self) -> None:
        provider, _ = provider_for(ok({}))
        with pytest.raises(MalformedResponseError):
            await provider.sign_with_schnorr(b"hi", PATH, KEY_ID, 1)


# ---------------------------------------------------------------------------
# Envelope errors
# ---------------------------------------------------------------------------


class TestEnvelope:
    @pytest.mark.asyncio
    async def test_error_member_is_provider_error(self) -> None:
        provider, _ = provider_for(
            {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "out of cycles"}}
        )
        with pytest.raises(ProviderError) as exc_info:
            await provider.sign_with_schnorr(b"hi", PATH, KEY_ID, 1)
        assert "out of cycles" in exc_info.value.message
        assert exc_info.value.details["code"] == -32000

    @pytest.mark.asyncio
    async def test_missing_result_is_malformed(self) -> None:
        provider, _ = provider_for({"jsonrpc": "2.0", "id": 1})
        with pytest.raises(MalformedResponseError):
            await provider.raw_rand()

    @pytest.mark.asyncio
    async def test_request_ids_increment(self) -> None:
        provider, transport = provider_for(ok(list(range(32))))
        await provider.raw_rand()
        await provider.raw_rand()
        assert [p["id"] for _, p in transport.calls] == [1, 2]

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self) -> None:
        provider = JsonRpcSignerProvider(
            URL, transport=ErrorTransport(ProviderError("connection refused"))
        )
        with pytest.raises(ProviderError, match="connection refused"):
            await provider.raw_rand()

    def test_url_property(self) -> None:
        assert JsonRpcSignerProvider(URL, transport=FakeTransport({})).url == URL
