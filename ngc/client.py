"""Async HTTP client for probing a running IDE bridge.

Speaks the same wire protocol the CLIs use: one JSON-RPC message per POST to
/mcp, with any replies arriving as SSE data frames in the response body
before the server closes the connection.
"""

import json
import logging
from typing import Any

import httpx

from ngc.core.constants import BIND_HOST, MCP_PATH
from ngc.core.errors import NgcError

logger = logging.getLogger(__name__)


class ClientError(NgcError):
    """Exception for client-side errors (connection, timeout, protocol)."""


def parse_sse_frames(text: str) -> list[Any]:
    """Decode the JSON payloads of every `data:` frame in an SSE body.

    Comment frames (keep-alives) and frames whose payload is not valid JSON
    are skipped.
    """
    payloads: list[Any] = []
    for frame in text.split("\n\n"):
        data_lines = [
            line[5:].lstrip(" ") for line in frame.split("\n") if line.startswith("data:")
        ]
        if not data_lines:
            continue
        try:
            payloads.append(json.loads("\n".join(data_lines)))
        except json.JSONDecodeError:
            logger.debug("Skipping undecodable SSE frame: %r", frame)
    return payloads


class BridgeClient:
    """Async client for a bridge server.

    Usage:
        async with BridgeClient(port=41000) as client:
            status, replies = await client.post(
                {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
            )
    """

    def __init__(self, port: int, host: str = BIND_HOST, timeout: float = 5.0) -> None:
        self._url = f"http://{host}:{port}{MCP_PATH}"
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0
        logger.debug("BridgeClient initialized: url=%s, timeout=%s", self._url, timeout)

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> "BridgeClient":
        self._client = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise ClientError("Client not initialized. Use 'async with' context manager.")
        return self._client

    def next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def post(self, message: dict[str, Any]) -> tuple[int, list[Any]]:
        """POST one JSON-RPC message and collect the SSE replies.

        Returns:
            (HTTP status code, decoded data frame payloads).

        Raises:
            ClientError: On connection failure or timeout.
        """
        client = self._require_client()
        logger.debug("POST %s: method=%s", self._url, message.get("method"))
        try:
            response = await client.post(
                self._url,
                content=json.dumps(message, separators=(",", ":")),
                headers={"Content-Type": "application/json"},
            )
        except httpx.ConnectError as e:
            logger.warning("Connection failed to %s: %s", self._url, e)
            raise ClientError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            raise ClientError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ClientError(f"HTTP error: {e}") from e
        return response.status_code, parse_sse_frames(response.text)

    async def initialize(self) -> dict[str, Any]:
        """Run the initialize handshake and return the server's result.

        Raises:
            ClientError: If the server does not answer with a result.
        """
        status, replies = await self.post(
            {
                "jsonrpc": "2.0",
                "id": self.next_id(),
                "method": "initialize",
                "params": {"clientInfo": {"name": "ngc-probe"}},
            }
        )
        if status != 200:
            raise ClientError(f"initialize returned HTTP {status}")
        for reply in replies:
            if isinstance(reply, dict) and "result" in reply:
                await self.post({"jsonrpc": "2.0", "method": "notifications/initialized"})
                return reply["result"]
            if isinstance(reply, dict) and "error" in reply:
                error = reply["error"]
                raise ClientError(f"RPC error {error.get('code')}: {error.get('message')}")
        raise ClientError("initialize returned no result")

    async def open_stream(self) -> bool:
        """Check that GET /mcp opens an event stream.

        Returns:
            True if the server answered 200 with text/event-stream.
        """
        client = self._require_client()
        try:
            async with client.stream("GET", self._url) as response:
                content_type = response.headers.get("content-type", "")
                return response.status_code == 200 and content_type.startswith(
                    "text/event-stream"
                )
        except httpx.ConnectError as e:
            raise ClientError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            raise ClientError(f"Stream open timed out: {e}") from e
