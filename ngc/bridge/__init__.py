"""IDE bridge: loopback JSON-RPC over HTTP/SSE transport for CLI agents."""

from ngc.bridge.connection import BridgeConnection, ConnectionState
from ngc.bridge.http import HttpRequest, decode_http_request
from ngc.bridge.server import BridgeServer
from ngc.bridge.session import BridgeSession, BridgeTool

__all__ = [
    "BridgeConnection",
    "BridgeServer",
    "BridgeSession",
    "BridgeTool",
    "ConnectionState",
    "HttpRequest",
    "decode_http_request",
]
