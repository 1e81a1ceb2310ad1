"""Loopback IDE bridge server speaking JSON-RPC over HTTP/SSE.

The Gemini and Qwen CLIs connect to this server to talk to the editor:

    GET  /mcp  → Server-Sent Events stream the editor pushes messages onto
    POST /mcp  → one JSON-RPC message per connection, handed to on_request

Security:
    The server binds only to loopback and never to 0.0.0.0.

Example usage:
    session = BridgeSession()
    server = BridgeServer(session.on_request, session.on_close)
    port = await server.start(0)
    ...
    server.broadcast_to_streams({"jsonrpc": "2.0", "method": "ide/contextUpdate"})
    server.close()
    await server.wait_closed()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ngc.bridge.connection import BridgeConnection, CloseCallback, RequestCallback
from ngc.core.constants import (
    BIND_HOST,
    KEEP_ALIVE_INTERVAL,
    LISTEN_BACKLOG,
    POST_CLOSE_DELAY,
)
from ngc.core.errors import BridgeError

logger = logging.getLogger(__name__)

_LOOPBACK_HOSTS = ("127.0.0.1", "localhost", "::1")


class BridgeServer:
    """Accepts CLI connections and tracks them by id.

    Attributes:
        connections: Live connections keyed by id. Ids come from a counter
            that is never reset, so a stale id never names a new connection.
        port: The bound port once started, else None.
        bind_fallback: True if the requested port was unavailable and an
            ephemeral port was used instead.
    """

    def __init__(
        self,
        on_request: RequestCallback,
        on_close: CloseCallback | None = None,
        *,
        host: str = BIND_HOST,
        backlog: int = LISTEN_BACKLOG,
        keep_alive_interval: float = KEEP_ALIVE_INTERVAL,
        post_close_delay: float = POST_CLOSE_DELAY,
    ) -> None:
        if host not in _LOOPBACK_HOSTS:
            raise ValueError(f"Security: bridge must bind to loopback only, not {host!r}")

        self._on_request = on_request
        self._on_close = on_close
        self._host = host
        self._backlog = backlog
        self._keep_alive_interval = keep_alive_interval
        self._post_close_delay = post_close_delay

        self._server: asyncio.Server | None = None
        self._closed = False
        self._next_id = 0
        self.connections: dict[int, BridgeConnection] = {}
        self.port: int | None = None
        self.bind_fallback = False
        logger.info("Bridge server created")

    async def start(self, port: int = 0) -> int:
        """Bind to loopback and begin accepting connections.

        If the requested port cannot be bound, falls back to an ephemeral
        port and logs a warning: the CLIs need a working port more than a
        particular one.

        Args:
            port: Port to listen on. 0 picks an ephemeral port.

        Returns:
            The port actually bound.

        Raises:
            BridgeError: If the server is already started or no port could be bound.
        """
        if self._server is not None:
            raise BridgeError("Bridge server already started")

        try:
            self._server = await self._listen(port)
        except OSError as e:
            if port == 0:
                raise BridgeError(f"Failed to bind bridge server: {e}") from e
            logger.warning(
                "Error binding to port %d: %s; using an ephemeral port instead "
                "(running CLIs need to be restarted)",
                port,
                e,
            )
            self.bind_fallback = True
            try:
                self._server = await self._listen(0)
            except OSError as fallback_err:
                raise BridgeError(
                    f"Failed to bind bridge server: {fallback_err}"
                ) from fallback_err

        sockets = self._server.sockets
        self.port = sockets[0].getsockname()[1] if sockets else 0
        logger.info("Bridge listening on http://%s:%d/mcp", self._host, self.port)
        return self.port

    async def _listen(self, port: int) -> asyncio.Server:
        return await asyncio.start_server(
            self._accept,
            host=self._host,
            port=port,
            backlog=self._backlog,
        )

    async def _accept(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        if self._closed:
            writer.close()
            return

        connection_id = self._next_id
        self._next_id += 1
        connection = BridgeConnection(
            connection_id,
            reader,
            writer,
            self,
            self._on_request,
            self._on_close,
            keep_alive_interval=self._keep_alive_interval,
            post_close_delay=self._post_close_delay,
        )
        self.connections[connection_id] = connection
        logger.debug("c-%d: accepted new connection", connection_id)
        await connection.run()

    def unregister(self, connection_id: int) -> None:
        """Drop a connection from the registry (called by the connection on close)."""
        self.connections.pop(connection_id, None)

    @property
    def stream_connections(self) -> list[BridgeConnection]:
        """Open stream connections, oldest first."""
        return [
            self.connections[cid]
            for cid in sorted(self.connections)
            if self.connections[cid].is_stream
        ]

    def broadcast_to_streams(self, message: Any) -> int:
        """Send a message to every stream connection.

        Returns:
            Number of streams the message was written to.
        """
        sent = 0
        for connection in self.stream_connections:
            if connection.send(message):
                sent += 1
        return sent

    def send_to_last_stream(self, message: Any) -> bool:
        """Send a message to the most recently created stream connection.

        "Most recent" is the stream with the highest id, regardless of any
        non-stream connections accepted after it.

        Returns:
            True if a stream existed and the message was written.
        """
        streams = self.stream_connections
        if not streams:
            logger.debug("No stream connection to send to")
            return False
        return streams[-1].send(message)

    def close(self) -> None:
        """Close every connection, then the listener. Safe to call twice."""
        if not self._closed:
            logger.info("Closing bridge server")
        self._closed = True

        for connection in list(self.connections.values()):
            if connection.is_stream:
                connection.send_shutdown_frame()
            connection.close()
        self.connections.clear()

        if self._server is not None and self._server.is_serving():
            self._server.close()

    async def wait_closed(self) -> None:
        """Wait until the listener has shut down."""
        if self._server is not None:
            await self._server.wait_closed()

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()
