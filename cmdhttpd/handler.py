"""Serve one HTTP/1.0 GET request by dispatching it to a command."""

from __future__ import annotations

import logging
import re
import socket
from typing import Any, Callable

from cmdhttpd import workers
from cmdhttpd.commands import CommandError
from cmdhttpd.status import current_metrics
from cmdhttpd.utils import json_response, parse_query_params, write_http_response

__all__ = ["handle_connection"]

log = logging.getLogger(__name__)

_DEADLINE = 5.0
_INT_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)
_INT_MIN, _INT_MAX = -(2**63), 2**63 - 1


class _BadRequest(Exception):
    """A request parameter could not be understood."""


def _atoi(value: str) -> int:
    if not _INT_PATTERN.fullmatch(value):
        raise ValueError(f"invalid integer: {value!r}")
    number = int(value)
    if not _INT_MIN <= number <= _INT_MAX:
        raise ValueError(f"integer out of range: {value!r}")
    return number


def _int_params(params: dict[str, str], names: tuple[str, ...], message: str) -> list[int]:
    try:
        return [_atoi(params.get(name, "")) for name in names]
    except ValueError:
        raise _BadRequest(message) from None


def _fibonacci(params: dict[str, str]) -> Any:
    (n,) = _int_params(params, ("num",), "Invalid 'num' parameter\n")
    return workers.run("fibonacci", n)


def _create_file(params: dict[str, str]) -> Any:
    try:
        repeat = _atoi(params.get("repeat", ""))
    except ValueError:
        repeat = 0
    return workers.run(
        "createfile", params.get("name", ""), params.get("content", ""), repeat
    )


def _delete_file(params: dict[str, str]) -> Any:
    return workers.run("deletefile", params.get("name", ""))


def _reverse(params: dict[str, str]) -> Any:
    return workers.run("reverse", params.get("text", ""))


def _to_upper(params: dict[str, str]) -> Any:
    return workers.run("toupper", params.get("text", ""))


def _random(params: dict[str, str]) -> Any:
    count, minimum, maximum = _int_params(
        params, ("count", "min", "max"), "Invalid count/min/max parameters\n"
    )
    return workers.run("random", count, minimum, maximum)


def _timestamp(params: dict[str, str]) -> Any:
    return workers.run("timestamp")


def _hash(params: dict[str, str]) -> Any:
    return workers.run("hash", params.get("text", ""))


def _simulate(params: dict[str, str]) -> Any:
    (seconds,) = _int_params(params, ("seconds",), "Invalid 'seconds' parameter\n")
    return workers.run("simulate", seconds, params.get("task", ""))


def _sleep(params: dict[str, str]) -> Any:
    (seconds,) = _int_params(params, ("seconds",), "Invalid 'seconds' parameter\n")
    return workers.run("sleep", seconds)


def _load_test(params: dict[str, str]) -> Any:
    tasks, sleep_sec = _int_params(
        params, ("tasks", "sleep"), "Invalid tasks/sleep parameters\n"
    )
    return workers.run("loadtest", tasks, sleep_sec)


def _status(params: dict[str, str]) -> Any:
    return current_metrics().marshal()


def _help(params: dict[str, str]) -> Any:
    return workers.run("help")


_ROUTES: dict[str, Callable[[dict[str, str]], Any]] = {
    "/fibonacci": _fibonacci,
    "/createfile": _create_file,
    "/deletefile": _delete_file,
    "/reverse": _reverse,
    "/toupper": _to_upper,
    "/random": _random,
    "/timestamp": _timestamp,
    "/hash": _hash,
    "/simulate": _simulate,
    "/sleep": _sleep,
    "/loadtest": _load_test,
    "/status": _status,
    "/help": _help,
}


def _respond(conn: socket.socket, status_code: int, content_type: str, body: str) -> None:
    try:
        write_http_response(conn, status_code, content_type, body)
    except OSError as exc:
        log.debug("could not write response: %s", exc)


def _read_request_line(conn: socket.socket) -> str | None:
    try:
        conn.settimeout(_DEADLINE)
        with conn.makefile("rb") as reader:
            raw = reader.readline()
    except OSError:
        return None
    if not raw.endswith(b"\n"):
        return None
    return raw.decode("utf-8", errors="replace")


def _serve_request(conn: socket.socket) -> None:
    line = _read_request_line(conn)
    if line is None:
        _respond(conn, 400, "text/plain", "400 Bad Request\n")
        return
    parts = line.strip().split(" ")
    if len(parts) < 3:
        _respond(conn, 400, "text/plain", "400 Bad Request\n")
        return
    method, raw_uri = parts[0], parts[1]
    if method != "GET":
        _respond(conn, 405, "text/plain", "405 Method Not Allowed\n")
        return

    path, _, query = raw_uri.partition("?")
    params = parse_query_params(query)

    route = _ROUTES.get(path)
    if route is None:
        _respond(conn, 404, "text/plain", "404 Not Found\n")
        return

    try:
        payload = route(params)
    except _BadRequest as exc:
        _respond(conn, 400, "text/plain", str(exc))
        return
    except CommandError as exc:
        log.info("command %s failed: %s", path, exc)
        _respond(conn, 500, "text/plain", "500 Internal Server Error\n")
        return
    except Exception:
        log.exception("unexpected failure in %s", path)
        _respond(conn, 500, "text/plain", "500 Internal Server Error\n")
        return

    if isinstance(payload, str):
        _respond(conn, 200, "text/plain", payload)
    else:
        _respond(conn, 200, "application/json", json_response(payload))


def handle_connection(conn: socket.socket) -> None:
    """Read one request from ``conn``, run the matching command and answer it."""
    metrics = current_metrics()
    metrics.inc_total_connections()
    metrics.inc_active_handlers()
    try:
        _serve_request(conn)
    finally:
        metrics.dec_active_handlers()