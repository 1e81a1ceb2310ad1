"""Default application logic behind the bridge: a minimal MCP server.

BridgeSession supplies the on_request/on_close callbacks for BridgeServer.
Replies go back on the POST connection that carried the request, as SSE
data frames written before the connection's delayed close.

Notifications pushed by the editor (context updates, diff results) go out on
the most recent stream via the server handle attached with attach().
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ngc import __version__
from ngc.core.constants import INITIALIZED_NOTIFICATION

if TYPE_CHECKING:
    from ngc.bridge.connection import BridgeConnection
    from ngc.bridge.server import BridgeServer

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"
SERVER_NAME = "ngc-ide-bridge"
CONTEXT_UPDATE_METHOD = "ide/contextUpdate"

# JSON-RPC 2.0 error codes
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ToolHandler = Callable[[dict[str, Any]], str]


def make_response(request_id: int | str | None, result: Any) -> dict[str, Any]:
    """Create a JSON-RPC success response."""
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def make_error(
    request_id: int | str | None, code: int, message: str
) -> dict[str, Any]:
    """Create a JSON-RPC error response."""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def make_notification(
    method: str, params: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create a JSON-RPC notification (no id)."""
    notif: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params:
        notif["params"] = params
    return notif


def make_tool_result(text: str, is_error: bool = False) -> dict[str, Any]:
    """Create a tools/call result."""
    return {"content": [{"type": "text", "text": text}], "isError": is_error}


@dataclass
class BridgeTool:
    """A tool exposed to the CLI over tools/list and tools/call."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class BridgeSession:
    """Handles decoded JSON-RPC messages from CLI connections.

    Attributes:
        initialized: True once a client sent notifications/initialized.
    """

    def __init__(self, server_name: str = SERVER_NAME) -> None:
        self._server_name = server_name
        self._server: BridgeServer | None = None
        self._tools: dict[str, BridgeTool] = {}
        self._request_connections: weakref.WeakSet[BridgeConnection] = weakref.WeakSet()
        self.initialized = False

    def attach(self, server: BridgeServer) -> None:
        """Attach the server used for editor-initiated notifications."""
        self._server = server

    def register_tool(self, tool: BridgeTool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    @property
    def tools(self) -> list[BridgeTool]:
        return list(self._tools.values())

    @property
    def active_connections(self) -> int:
        """Connections that delivered a request and are still open."""
        return sum(1 for conn in self._request_connections if conn.is_open)

    # Server callbacks

    def on_request(self, connection: BridgeConnection, message: Any) -> None:
        self._request_connections.add(connection)
        response = self.handle_message(message)
        if response is not None:
            connection.send(response)

    def on_close(self) -> None:
        logger.debug("Connection closed, %d request connections open", self.active_connections)

    # Message handling

    def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Build the reply for one decoded message, or None for notifications."""
        if not isinstance(message, dict):
            logger.warning("Ignoring non-object message: %r", message)
            return None

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params") or {}

        if method is None:
            # A response from the client (e.g. to a server request); nothing to do
            logger.debug("Received client response for id %r", request_id)
            return None

        if request_id is None:
            self._handle_notification(method, params)
            return None

        if not isinstance(params, dict):
            return make_error(request_id, INVALID_PARAMS, "params must be an object")

        try:
            if method == "initialize":
                return make_response(
                    request_id,
                    {
                        "protocolVersion": params.get("protocolVersion", PROTOCOL_VERSION),
                        "capabilities": {"tools": {"listChanged": False}},
                        "serverInfo": {"name": self._server_name, "version": __version__},
                    },
                )
            elif method == "ping":
                return make_response(request_id, {})
            elif method == "tools/list":
                return make_response(
                    request_id, {"tools": [t.to_dict() for t in self._tools.values()]}
                )
            elif method == "tools/call":
                return make_response(request_id, self._call_tool(params))
            else:
                return make_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
        except ValueError as e:
            return make_error(request_id, INVALID_PARAMS, str(e))
        except Exception as e:
            logger.error("Unexpected error handling %s: %s", method, e, exc_info=True)
            return make_error(request_id, INTERNAL_ERROR, f"Internal error: {type(e).__name__}")

    def _handle_notification(self, method: str, params: dict[str, Any]) -> None:
        if method == INITIALIZED_NOTIFICATION:
            self.initialized = True
            logger.info("CLI client initialized")
        else:
            logger.debug("Ignoring notification %s", method)

    def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise ValueError("tools/call requires a string 'name'")
        tool = self._tools.get(name)
        if tool is None:
            raise ValueError(f"Unknown tool: {name}")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise ValueError("tool arguments must be an object")
        try:
            return make_tool_result(tool.handler(arguments))
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            return make_tool_result(str(e), is_error=True)

    # Editor-initiated notifications

    def notify_context_update(
        self, open_files: list[dict[str, Any]], is_trusted: bool = True
    ) -> bool:
        """Push the editor's workspace state to the most recent CLI stream.

        Returns:
            True if a stream received the notification.
        """
        if self._server is None:
            logger.debug("Context update dropped, no server attached")
            return False
        notification = make_notification(
            CONTEXT_UPDATE_METHOD,
            {"workspaceState": {"openFiles": open_files, "isTrusted": is_trusted}},
        )
        return self._server.send_to_last_stream(notification)
