"""One accepted bridge connection: buffering, decoding, and the GET/POST branches.

Each connection carries exactly one HTTP request. A GET to /mcp turns the
socket into a long-lived Server-Sent Events stream that the server pushes
JSON-RPC messages onto. A POST to /mcp delivers one JSON-RPC message to the
request callback, answers with a bare status line and closes shortly after.
Anything else closes the connection.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from ngc.bridge.http import (
    KEEP_ALIVE_FRAME,
    SHUTDOWN_FRAME,
    HttpRequest,
    decode_http_request,
    encode_sse_data,
    format_response_head,
)
from ngc.core.constants import (
    INITIALIZED_NOTIFICATION,
    KEEP_ALIVE_INTERVAL,
    MAX_REQUEST_SIZE,
    MCP_PATH,
    POST_CLOSE_DELAY,
)
from ngc.core.errors import HttpParseError

if TYPE_CHECKING:
    from ngc.bridge.server import BridgeServer

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024

SSE_STREAM_HEADERS = [
    "Content-Type: text/event-stream",
    "Cache-Control: no-cache",
    "Connection: keep-alive",
]
POST_RESPONSE_HEADERS = [
    "Connection: close",
    "Content-Type: text/event-stream",
]

RequestCallback = Callable[["BridgeConnection", Any], None]
CloseCallback = Callable[[], None]


class ConnectionState(Enum):
    """Lifecycle of a bridge connection."""

    READING = "reading"
    STREAM = "stream"
    REQUEST = "request"
    CLOSED = "closed"


class BridgeConnection:
    """A single client socket owned by a BridgeServer.

    Attributes:
        id: Identifier assigned by the server at accept time.
        request_processed: True once the one allowed request was dispatched.
        is_stream: True once a GET was accepted and the SSE head written.
        last_read_time: Monotonic time of the last inbound chunk.
        last_write_time: Monotonic time of the last SSE data frame sent.
    """

    def __init__(
        self,
        connection_id: int,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        server: BridgeServer,
        on_request: RequestCallback,
        on_close: CloseCallback | None = None,
        *,
        keep_alive_interval: float = KEEP_ALIVE_INTERVAL,
        post_close_delay: float = POST_CLOSE_DELAY,
    ) -> None:
        self.id = connection_id
        self._reader: asyncio.StreamReader | None = reader
        self._writer: asyncio.StreamWriter | None = writer
        self._server = server
        self._on_request: RequestCallback | None = on_request
        self._on_close: CloseCallback | None = on_close
        self._keep_alive_interval = keep_alive_interval
        self._post_close_delay = post_close_delay

        self._buffer = b""
        self._state = ConnectionState.READING
        self.request_processed = False
        self.is_stream = False
        self.last_read_time = 0.0
        self.last_write_time = 0.0
        self._keep_alive_task: asyncio.Task[None] | None = None
        self._close_handle: asyncio.TimerHandle | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    @property
    def buffer(self) -> bytes:
        """Bytes received but not consumed by a dispatched request."""
        return self._buffer

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Read chunks until the peer disconnects or the connection is closed.

        Each chunk is appended to the buffer, then decoding runs on a fresh
        loop turn. Decoding of chunk N always completes before chunk N+1 is
        read.
        """
        logger.debug("c-%d: read started", self.id)
        while True:
            reader = self._reader
            if reader is None:
                return
            try:
                data = await reader.read(READ_CHUNK_SIZE)
            except asyncio.CancelledError:
                self.close()
                raise
            except (ConnectionError, OSError) as e:
                logger.error("c-%d: client read error: %s", self.id, e)
                self.close()
                return

            self.last_read_time = time.monotonic()
            if not data:
                logger.debug("c-%d: client disconnected", self.id)
                self.close()
                return
            if self._writer is None:
                return

            logger.debug("c-%d: received %d bytes", self.id, len(data))
            self._buffer += data
            if len(self._buffer) > MAX_REQUEST_SIZE:
                logger.error(
                    "c-%d: request too large: %d > %d bytes",
                    self.id,
                    len(self._buffer),
                    MAX_REQUEST_SIZE,
                )
                self.close()
                return
            await asyncio.sleep(0)
            self._parse_data()

    def _parse_data(self) -> None:
        if self._writer is None:
            return  # Closed between the read and this turn
        if self.request_processed:
            logger.error("c-%d: received another request after response", self.id)
            self.close()
            return
        self._parse_http_message()

    def _parse_http_message(self) -> None:
        try:
            request, remainder = decode_http_request(self._buffer)
        except HttpParseError as e:
            logger.error("c-%d: %s", self.id, e.message)
            self.close()
            return
        self._buffer = remainder

        if request is None:
            logger.debug("c-%d: HTTP header or body not complete yet", self.id)
            return
        if remainder:
            logger.warning(
                "c-%d: %d bytes after the request will not be processed",
                self.id,
                len(remainder),
            )

        if request.path != MCP_PATH:
            logger.error(
                "c-%d: invalid url %s, only %s supported", self.id, request.path, MCP_PATH
            )
            self.close()
            return

        if request.method == "GET":
            if not self._start_stream(request):
                return
        elif request.method == "POST":
            if not self._handle_post(request):
                return
        else:
            logger.error(
                "c-%d: invalid method %s, only GET and POST supported",
                self.id,
                request.method,
            )
            self._write(format_response_head(405))
            self.close()
            return
        self.request_processed = True

    # ------------------------------------------------------------------
    # Protocol branches
    # ------------------------------------------------------------------

    def _start_stream(self, request: HttpRequest) -> bool:
        if request.body:
            logger.error(
                "c-%d: GET request carried a %d byte body", self.id, len(request.body)
            )
            self.close()
            return False

        logger.debug("c-%d: received GET request, opening stream", self.id)
        self._write(format_response_head(200, SSE_STREAM_HEADERS))
        self.is_stream = True
        self._state = ConnectionState.STREAM
        self._keep_alive_task = asyncio.get_running_loop().create_task(
            self._keep_alive_loop()
        )
        return True

    def _handle_post(self, request: HttpRequest) -> bool:
        logger.debug("c-%d: received POST request", self.id)
        try:
            message = json.loads(request.body)
        except ValueError as e:
            logger.error(
                "c-%d: json decode error (%s) for message: %r",
                self.id,
                e,
                request.body[:500],
            )
            self.close()
            return False

        status = 200
        if isinstance(message, dict) and message.get("method") == INITIALIZED_NOTIFICATION:
            status = 202

        self._state = ConnectionState.REQUEST
        self._write(format_response_head(status, POST_RESPONSE_HEADERS))

        on_request = self._on_request
        if on_request is not None:
            try:
                on_request(self, message)
            except Exception:
                logger.exception("c-%d: request handler failed", self.id)

        if self._writer is not None:
            # Give the response bytes time to flush before tearing down
            self._close_handle = asyncio.get_running_loop().call_later(
                self._post_close_delay, self.close
            )
        return True

    async def _keep_alive_loop(self) -> None:
        while True:
            await asyncio.sleep(self._keep_alive_interval)
            self.send_keep_alive()

    def send_keep_alive(self) -> bool:
        """Write an SSE comment frame unless the stream saw recent traffic.

        Returns:
            True if a keep-alive frame was written.
        """
        now = time.monotonic()
        if (
            now - self.last_read_time < self._keep_alive_interval
            or now - self.last_write_time < self._keep_alive_interval
        ):
            logger.debug("c-%d: keep-alive skipped, recent activity", self.id)
            return False
        if self._write(KEEP_ALIVE_FRAME):
            logger.debug("c-%d: sent keep-alive packet", self.id)
            return True
        return False

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def _write(self, data: bytes) -> bool:
        writer = self._writer
        if writer is None or writer.is_closing():
            return False
        writer.write(data)
        return True

    def send(self, message: Any) -> bool:
        """Send a message to the client as an SSE data frame.

        A value that cannot be JSON-encoded is logged and dropped; the
        connection stays open.

        Returns:
            True if the frame was written.
        """
        try:
            frame = encode_sse_data(message)
        except (TypeError, ValueError) as e:
            logger.error("c-%d: JSON encode error: %s", self.id, e)
            return False
        if not self._write(frame):
            logger.debug("c-%d: dropping message, connection closed", self.id)
            return False
        self.last_write_time = time.monotonic()
        logger.debug("c-%d: sent message: %s", self.id, frame)
        return True

    def send_shutdown_frame(self) -> bool:
        """Write the frame that makes CLI peers notice a server shutdown."""
        return self._write(SHUTDOWN_FRAME)

    def close(self) -> None:
        """Tear the connection down. Safe to call more than once."""
        writer = self._writer
        if writer is None:
            return
        logger.debug("c-%d: closing client", self.id)
        self._writer = None
        self._state = ConnectionState.CLOSED

        on_close = self._on_close
        if on_close is not None:
            try:
                on_close()
            except Exception:
                logger.exception("c-%d: close callback failed", self.id)

        if self._keep_alive_task is not None:
            self._keep_alive_task.cancel()
        if self._close_handle is not None:
            self._close_handle.cancel()
        if not writer.is_closing():
            writer.close()
        self._server.unregister(self.id)

        self._on_request = None
        self._on_close = None
        self._keep_alive_task = None
        self._close_handle = None
        self._reader = None
