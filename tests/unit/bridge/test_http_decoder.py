"""Tests for incremental HTTP request decoding and response framing."""

import pytest

from ngc.bridge.http import (
    KEEP_ALIVE_FRAME,
    SHUTDOWN_FRAME,
    decode_http_request,
    encode_sse_data,
    format_response_head,
)
from ngc.core.constants import MAX_BODY_SIZE, MAX_HEADER_SIZE
from ngc.core.errors import HttpParseError

POST_HELLO = b"POST /mcp HTTP/1.1\r\nHost: 127.0.0.1\r\nContent-Length: 5\r\n\r\nhello"


class TestDecodeIncomplete:
    """The decoder returns the buffer untouched until a request is complete."""

    def test_empty_buffer(self) -> None:
        assert decode_http_request(b"") == (None, b"")

    def test_headers_not_terminated(self) -> None:
        buf = b"POST /mcp HTTP/1.1\r\nContent-Length: 5\r\n"
        request, remainder = decode_http_request(buf)
        assert request is None
        assert remainder == buf

    def test_body_short(self) -> None:
        buf = POST_HELLO[:-2]
        request, remainder = decode_http_request(buf)
        assert request is None
        assert remainder == buf

    def test_every_prefix_is_incomplete(self) -> None:
        """Feeding the request a byte at a time never yields a partial request."""
        for end in range(len(POST_HELLO)):
            request, remainder = decode_http_request(POST_HELLO[:end])
            assert request is None
            assert remainder == POST_HELLO[:end]

        request, remainder = decode_http_request(POST_HELLO)
        assert request is not None
        assert request.body == b"hello"
        assert remainder == b""


class TestDecodeComplete:
    def test_request_line_fields(self) -> None:
        request, _ = decode_http_request(POST_HELLO)
        assert request is not None
        assert request.method == "POST"
        assert request.path == "/mcp"
        assert request.version == "1.1"

    def test_body_is_exactly_content_length(self) -> None:
        request, remainder = decode_http_request(POST_HELLO + b"GET /mcp HTTP/1.1\r\n")
        assert request is not None
        assert request.body == b"hello"
        assert remainder == b"GET /mcp HTTP/1.1\r\n"

    def test_missing_content_length_means_empty_body(self) -> None:
        buf = b"GET /mcp HTTP/1.1\r\nAccept: text/event-stream\r\n\r\nextra"
        request, remainder = decode_http_request(buf)
        assert request is not None
        assert request.body == b""
        assert remainder == b"extra"

    def test_header_names_are_lowercased(self) -> None:
        buf = b"GET /mcp HTTP/1.1\r\nAccept: text/event-stream\r\n\r\n"
        request, _ = decode_http_request(buf)
        assert request is not None
        assert request.headers == {"accept": "text/event-stream"}

    def test_last_duplicate_header_wins(self) -> None:
        buf = b"GET /mcp HTTP/1.1\r\nX-Token: one\r\nx-token: two\r\n\r\n"
        request, _ = decode_http_request(buf)
        assert request is not None
        assert request.headers["x-token"] == "two"

    def test_header_without_space_after_colon(self) -> None:
        buf = b"POST /mcp HTTP/1.1\r\nContent-Length:2\r\n\r\n{}"
        request, _ = decode_http_request(buf)
        assert request is not None
        assert request.body == b"{}"

    def test_malformed_header_lines_are_skipped(self) -> None:
        buf = b"GET /mcp HTTP/1.1\r\nnot a header\r\nHost: x\r\n\r\n"
        request, _ = decode_http_request(buf)
        assert request is not None
        assert request.headers == {"host": "x"}

    def test_body_may_contain_header_terminator(self) -> None:
        body = b"a\r\n\r\nb"
        buf = b"POST /mcp HTTP/1.1\r\nContent-Length: 6\r\n\r\n" + body
        request, remainder = decode_http_request(buf)
        assert request is not None
        assert request.body == body
        assert remainder == b""


class TestDecodeErrors:
    def test_invalid_request_line(self) -> None:
        with pytest.raises(HttpParseError):
            decode_http_request(b"garbage\r\n\r\n")

    def test_non_numeric_content_length(self) -> None:
        with pytest.raises(HttpParseError, match="Content-Length"):
            decode_http_request(b"POST /mcp HTTP/1.1\r\nContent-Length: abc\r\n\r\n")

    def test_negative_content_length(self) -> None:
        with pytest.raises(HttpParseError):
            decode_http_request(b"POST /mcp HTTP/1.1\r\nContent-Length: -1\r\n\r\n")

    def test_oversized_content_length(self) -> None:
        head = b"POST /mcp HTTP/1.1\r\nContent-Length: %d\r\n\r\n" % (MAX_BODY_SIZE + 1)
        with pytest.raises(HttpParseError, match="too large"):
            decode_http_request(head)

    def test_unterminated_headers_over_limit(self) -> None:
        buf = b"POST /mcp HTTP/1.1\r\nX-Pad: " + b"a" * MAX_HEADER_SIZE
        with pytest.raises(HttpParseError, match="Headers too large"):
            decode_http_request(buf)

    def test_terminated_headers_over_limit(self) -> None:
        buf = b"POST /mcp HTTP/1.1\r\nX-Pad: " + b"a" * MAX_HEADER_SIZE + b"\r\n\r\n"
        with pytest.raises(HttpParseError, match="Headers too large"):
            decode_http_request(buf)


class TestFraming:
    def test_response_head_with_headers(self) -> None:
        head = format_response_head(202, ["Connection: close"])
        assert head == b"HTTP/1.1 202 Accepted\r\nConnection: close\r\n\r\n"

    def test_response_head_without_headers(self) -> None:
        assert format_response_head(405) == b"HTTP/1.1 405 Method Not Allowed\r\n\r\n"

    def test_sse_data_is_compact_json(self) -> None:
        frame = encode_sse_data({"jsonrpc": "2.0", "id": 1, "result": {}})
        assert frame == b'data: {"jsonrpc":"2.0","id":1,"result":{}}\n\n'

    def test_sse_data_rejects_nan(self) -> None:
        with pytest.raises(ValueError):
            encode_sse_data({"value": float("nan")})

    def test_sse_data_rejects_unserializable(self) -> None:
        with pytest.raises(TypeError):
            encode_sse_data({"value": object()})

    def test_fixed_frames(self) -> None:
        assert KEEP_ALIVE_FRAME == b":keep-alive\n\n"
        assert SHUTDOWN_FRAME == b"data:{error-json\n\n"
