"""
Transport protocol for signer provider JSON-RPC calls.

Defines the seam where concrete HTTP implementations plug in. The
JSON-RPC provider depends on this protocol, not on httpx directly, so
the transport can be swapped without editing request or reply logic.

Concrete implementations:
    - HttpxTransport (default, uses httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

Transport-level failures (timeout, refused connection, HTTP status >= 400,
a body that does not decode as JSON) are raised as ProviderError. A JSON
body that is not an object is a MalformedResponseError.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from principal_signer.errors import MalformedResponseError, ProviderError

logger = logging.getLogger(__name__)


@runtime_checkable
class JsonRpcTransport(Protocol):
    """Async transport for JSON-RPC POST requests."""

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON-RPC request and return the parsed response.

        Args:
            url: The JSON-RPC endpoint URL.
            payload: The JSON-RPC request body (jsonrpc, method, params, id).

        Returns:
            Parsed JSON response as a dict.

        Raises:
            ProviderError: On transport-level failures.
            MalformedResponseError: If the JSON body is not an object.
        """
        ...


class HttpxTransport:
    """Default transport using httpx.AsyncClient.

    Args:
        timeout: Request timeout in seconds.
        headers: Additional headers sent with every request.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout = timeout
        self._headers = headers or {}

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send JSON-RPC request via httpx."""
        method = payload.get("method")
        logger.debug("POST %s method=%s", url, method)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                        **self._headers,
                    },
                )
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Signer provider timed out after {self._timeout}s",
                details={"url": url, "method": method, "timeout_s": self._timeout},
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Failed to reach signer provider: {e}",
                details={"url": url, "method": method},
            ) from e

        if response.status_code >= 400:
            raise ProviderError(
                f"Signer provider returned HTTP {response.status_code}: {response.reason_phrase}",
                details={
                    "url": url,
                    "method": method,
                    "status_code": response.status_code,
                },
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ProviderError(
                "Signer provider response was not valid JSON",
                details={"url": url, "method": method},
            ) from e

        if not isinstance(result, dict):
            raise MalformedResponseError(
                "Signer provider response JSON was not an object",
                details={"url": url, "method": method, "type": type(result).__name__},
            )

        return result
