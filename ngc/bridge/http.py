"""Incremental HTTP request decoding and response framing for the IDE bridge.

The bridge reads raw chunks off a socket with no framing guarantees, so the
decoder works on the whole accumulated buffer and either returns one complete
request or reports that more bytes are needed. It never consumes a partial
message: on "incomplete" the caller gets its buffer back unchanged and
re-decodes from scratch once more data has arrived.

Only what the bridge needs is supported: a request line, `Name: value`
headers, and a `Content-Length` delimited body. No chunked encoding.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from ngc.core.constants import MAX_BODY_SIZE, MAX_HEADER_SIZE
from ngc.core.errors import HttpParseError

HEADER_TERMINATOR = b"\r\n\r\n"

# Request line: "POST /mcp HTTP/1.1"
_REQUEST_LINE = re.compile(rb"^(\S+) (\S+) HTTP/(\S+)")
# Header line: "Content-Length: 42"
_HEADER_LINE = re.compile(rb"^([A-Za-z0-9_-]+): ?([^\r\n]*)$")

STATUS_MESSAGES = {
    200: "OK",
    202: "Accepted",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
}

KEEP_ALIVE_FRAME = b":keep-alive\n\n"
# Deliberately malformed: CLI peers ignore a clean EOF on the stream, but a
# frame they cannot parse makes them drop the connection.
SHUTDOWN_FRAME = b"data:{error-json\n\n"


@dataclass
class HttpRequest:
    """Parsed HTTP request.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Request path (e.g., "/mcp")
        version: Protocol version from the request line (e.g., "1.1")
        headers: Dict of lowercase header names to values (last occurrence wins)
        body: Exactly Content-Length bytes of body
    """

    method: str
    path: str
    version: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def _parse_content_length(headers: dict[str, str]) -> int:
    raw = headers.get("content-length")
    if raw is None:
        return 0
    try:
        length = int(raw.strip())
    except ValueError as e:
        raise HttpParseError(f"Invalid Content-Length: {raw!r}") from e
    if length < 0:
        raise HttpParseError(f"Invalid Content-Length: {raw!r}")
    if length > MAX_BODY_SIZE:
        raise HttpParseError(f"Request body too large: {length} > {MAX_BODY_SIZE}")
    return length


def decode_http_request(buffer: bytes) -> tuple[HttpRequest | None, bytes]:
    """Decode at most one HTTP request from the front of a buffer.

    Args:
        buffer: Raw bytes accumulated from the socket so far.

    Returns:
        (request, remainder). When the headers or the body are not yet fully
        buffered, request is None and remainder is the input buffer itself.
        Otherwise remainder holds whatever follows the body.

    Raises:
        HttpParseError: If the request line or Content-Length is malformed, or
            the headers or declared body exceed the size limits.
    """
    header_end = buffer.find(HEADER_TERMINATOR)
    if header_end == -1:
        if len(buffer) > MAX_HEADER_SIZE:
            raise HttpParseError(f"Headers too large: over {MAX_HEADER_SIZE} bytes")
        return None, buffer
    if header_end > MAX_HEADER_SIZE:
        raise HttpParseError(f"Headers too large: {header_end} > {MAX_HEADER_SIZE}")

    head = buffer[:header_end]
    lines = head.split(b"\r\n")

    match = _REQUEST_LINE.match(lines[0])
    if match is None:
        raise HttpParseError(
            f"Invalid request line: {lines[0][:200].decode('latin-1')!r}"
        )
    method, path, version = (part.decode("latin-1") for part in match.groups())

    headers: dict[str, str] = {}
    for line in lines[1:]:
        header = _HEADER_LINE.match(line)
        if header is None:
            continue  # Skip malformed headers
        name, value = header.groups()
        headers[name.decode("latin-1").lower()] = value.decode("latin-1")

    content_length = _parse_content_length(headers)
    body_start = header_end + len(HEADER_TERMINATOR)
    if len(buffer) - body_start < content_length:
        return None, buffer

    body_end = body_start + content_length
    request = HttpRequest(
        method=method,
        path=path,
        version=version,
        headers=headers,
        body=bytes(buffer[body_start:body_end]),
    )
    return request, bytes(buffer[body_end:])


def format_response_head(status: int, headers: list[str] | None = None) -> bytes:
    """Build a status line plus headers, terminated by a blank line.

    Args:
        status: HTTP status code.
        headers: Header lines such as "Connection: close".

    Returns:
        The encoded response head; no body follows.
    """
    lines = [f"HTTP/1.1 {status} {STATUS_MESSAGES.get(status, 'Unknown')}"]
    lines.extend(headers or [])
    lines.extend(["", ""])
    return "\r\n".join(lines).encode("latin-1")


def encode_sse_data(message: Any) -> bytes:
    """Encode a JSON-serializable value as one SSE data frame.

    Raises:
        TypeError, ValueError: If the value is not JSON-serializable.
    """
    encoded = json.dumps(message, separators=(",", ":"), allow_nan=False)
    return f"data: {encoded}\n\n".encode("utf-8")
