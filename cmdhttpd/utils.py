"""HTTP and serialisation helpers shared by the server."""

from __future__ import annotations

import hashlib
import json
import os
from typing import Any, Protocol

__all__ = [
    "parse_query_params",
    "write_http_response",
    "sanitize_file_name",
    "json_response",
    "sha256_hash",
]

_REASONS = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class _Writable(Protocol):
    def sendall(self, data: bytes) -> Any: ...


def parse_query_params(raw_query: str) -> dict[str, str]:
    """Split ``a=1&b=foo`` into a dict; pairs without ``=`` are ignored."""
    params: dict[str, str] = {}
    if not raw_query:
        return params
    for pair in raw_query.split("&"):
        key, sep, value = pair.partition("=")
        if sep:
            params[key] = value
    return params


def write_http_response(
    conn: _Writable, status_code: int, content_type: str, body: str
) -> None:
    """Send a minimal HTTP/1.0 response over ``conn``."""
    payload = body.encode("utf-8")
    reason = _REASONS.get(status_code, "Status")
    header = (
        f"HTTP/1.0 {status_code} {reason}\r\n"
        f"Content-Type: {content_type}\r\n"
        f"Content-Length: {len(payload)}\r\n\r\n"
    )
    conn.sendall(header.encode("utf-8"))
    conn.sendall(payload)


def sanitize_file_name(name: str) -> str:
    """Return only the final path component of ``name``."""
    if not name:
        return "."
    stripped = name.rstrip(os.sep)
    if not stripped:
        return ""
    return os.path.basename(stripped).replace(os.sep, "")


def json_response(data: Any) -> str:
    """Serialise ``data`` as indented JSON; raw bytes are returned as text."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    text = json.dumps(data, indent=2, ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def sha256_hash(text: str) -> str:
    """Return the hexadecimal SHA-256 digest of ``text``."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()