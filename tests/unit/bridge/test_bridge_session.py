"""Tests for the default MCP session behind the bridge."""

from unittest.mock import MagicMock

import pytest

from ngc import __version__
from ngc.bridge.session import (
    CONTEXT_UPDATE_METHOD,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    BridgeSession,
    BridgeTool,
    make_notification,
)


def _echo_tool() -> BridgeTool:
    return BridgeTool(
        name="echo",
        description="Echo the text argument",
        handler=lambda args: args.get("text", ""),
        input_schema={"type": "object", "properties": {"text": {"type": "string"}}},
    )


class TestHandleMessage:
    def test_initialize_reports_server_info(self) -> None:
        session = BridgeSession()
        reply = session.handle_message(
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
        )

        assert reply is not None
        result = reply["result"]
        assert reply["id"] == 1
        assert result["protocolVersion"] == PROTOCOL_VERSION
        assert result["capabilities"] == {"tools": {"listChanged": False}}
        assert result["serverInfo"] == {"name": "ngc-ide-bridge", "version": __version__}

    def test_initialize_echoes_client_protocol_version(self) -> None:
        session = BridgeSession()
        reply = session.handle_message(
            {"id": 1, "method": "initialize", "params": {"protocolVersion": "2025-03-26"}}
        )
        assert reply is not None
        assert reply["result"]["protocolVersion"] == "2025-03-26"

    def test_ping(self) -> None:
        reply = BridgeSession().handle_message({"id": "a", "method": "ping"})
        assert reply == {"jsonrpc": "2.0", "id": "a", "result": {}}

    def test_unknown_method(self) -> None:
        reply = BridgeSession().handle_message({"id": 2, "method": "nope"})
        assert reply is not None
        assert reply["error"]["code"] == METHOD_NOT_FOUND

    def test_notification_gets_no_reply(self) -> None:
        session = BridgeSession()
        assert session.handle_message({"method": "notifications/initialized"}) is None
        assert session.initialized

    def test_client_response_is_ignored(self) -> None:
        assert BridgeSession().handle_message({"id": 5, "result": {}}) is None

    def test_non_object_is_ignored(self) -> None:
        assert BridgeSession().handle_message([1, 2]) is None

    def test_non_object_params(self) -> None:
        reply = BridgeSession().handle_message({"id": 1, "method": "ping", "params": [1]})
        assert reply is not None
        assert reply["error"]["code"] == INVALID_PARAMS


class TestTools:
    def test_list_tools(self) -> None:
        session = BridgeSession()
        session.register_tool(_echo_tool())
        reply = session.handle_message({"id": 1, "method": "tools/list"})

        assert reply is not None
        tools = reply["result"]["tools"]
        assert [t["name"] for t in tools] == ["echo"]
        assert tools[0]["inputSchema"]["properties"]["text"] == {"type": "string"}

    def test_duplicate_registration_rejected(self) -> None:
        session = BridgeSession()
        session.register_tool(_echo_tool())
        with pytest.raises(ValueError):
            session.register_tool(_echo_tool())

    def test_call_tool(self) -> None:
        session = BridgeSession()
        session.register_tool(_echo_tool())
        reply = session.handle_message(
            {"id": 1, "method": "tools/call", "params": {"name": "echo", "arguments": {"text": "hi"}}}
        )

        assert reply is not None
        assert reply["result"] == {"content": [{"type": "text", "text": "hi"}], "isError": False}

    def test_call_unknown_tool(self) -> None:
        reply = BridgeSession().handle_message(
            {"id": 1, "method": "tools/call", "params": {"name": "missing"}}
        )
        assert reply is not None
        assert reply["error"]["code"] == INVALID_PARAMS

    def test_tool_failure_is_error_result(self) -> None:
        def fail(args: dict) -> str:
            raise RuntimeError("disk full")

        session = BridgeSession()
        session.register_tool(BridgeTool(name="fail", description="", handler=fail))
        reply = session.handle_message(
            {"id": 1, "method": "tools/call", "params": {"name": "fail"}}
        )

        assert reply is not None
        assert reply["result"]["isError"] is True
        assert reply["result"]["content"][0]["text"] == "disk full"


class TestCallbacks:
    def test_on_request_sends_reply_on_connection(self) -> None:
        session = BridgeSession()
        connection = MagicMock()

        session.on_request(connection, {"jsonrpc": "2.0", "id": 9, "method": "ping"})

        connection.send.assert_called_once_with({"jsonrpc": "2.0", "id": 9, "result": {}})
        assert session.active_connections == 1

    def test_on_request_notification_sends_nothing(self) -> None:
        session = BridgeSession()
        connection = MagicMock()

        session.on_request(connection, {"method": "notifications/initialized"})

        connection.send.assert_not_called()

    def test_active_connections_follow_is_open(self) -> None:
        session = BridgeSession()
        first = MagicMock(is_open=True)
        second = MagicMock(is_open=True)
        session.on_request(first, {"method": "x"})
        session.on_request(second, {"method": "y"})

        first.is_open = False
        session.on_close()
        session.on_close()

        assert session.active_connections == 1

    def test_unrelated_close_does_not_change_count(self) -> None:
        session = BridgeSession()
        connection = MagicMock(is_open=True)
        session.on_request(connection, {"method": "x"})

        session.on_close()

        assert session.active_connections == 1


class TestContextUpdate:
    def test_sent_to_last_stream(self) -> None:
        session = BridgeSession()
        server = MagicMock()
        server.send_to_last_stream.return_value = True
        session.attach(server)

        files = [{"path": "/w/a.py", "timestamp": 1, "isActive": True}]
        assert session.notify_context_update(files) is True

        server.send_to_last_stream.assert_called_once_with(
            make_notification(
                CONTEXT_UPDATE_METHOD,
                {"workspaceState": {"openFiles": files, "isTrusted": True}},
            )
        )

    def test_without_server(self) -> None:
        assert BridgeSession().notify_context_update([]) is False
