import socket
import threading
import time

import pytest

from cmdhttpd.listener import Listener, start_listener


def _request(port: int, raw: bytes) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=5) as conn:
        conn.sendall(raw)
        with conn.makefile("rb") as reader:
            return reader.read()


def _wait_for_count(listener: Listener, expected: int) -> None:
    deadline = time.monotonic() + 5
    while listener.connection_count != expected and time.monotonic() < deadline:
        time.sleep(0.01)


@pytest.fixture
def running():
    listener = Listener(0)
    thread = threading.Thread(target=listener.serve, daemon=True)
    thread.start()
    yield listener, thread
    listener.shutdown()
    thread.join(timeout=5)


def test_serves_requests(running):
    listener, _ = running
    response = _request(listener.port, b"GET /reverse?text=abc HTTP/1.0\r\n\r\n")
    head, _, body = response.partition(b"\r\n\r\n")
    assert head.startswith(b"HTTP/1.0 200 OK\r\n")
    assert body == b"cba"


def test_connection_closed_after_response(running):
    listener, _ = running
    response = _request(listener.port, b"GET /unknown HTTP/1.0\r\n\r\n")
    assert response.endswith(b"404 Not Found\n")
    _wait_for_count(listener, 0)
    assert listener.connection_count == 0


def test_concurrent_clients(running):
    listener, _ = running
    results = []

    def client():
        results.append(_request(listener.port, b"GET /status HTTP/1.0\r\n\r\n"))

    threads = [threading.Thread(target=client) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    assert len(results) == 20
    assert all(r.startswith(b"HTTP/1.0 200 OK") for r in results)
    _wait_for_count(listener, 0)
    assert listener.connection_count == 0


def test_shutdown_stops_serving(running):
    listener, thread = running
    port = listener.port
    listener.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()
    with pytest.raises(ConnectionRefusedError):
        socket.create_connection(("127.0.0.1", port), timeout=2)


def test_shutdown_closes_active_connections(running):
    listener, _ = running
    with socket.create_connection(("127.0.0.1", listener.port), timeout=5) as conn:
        _wait_for_count(listener, 1)
        assert listener.connection_count == 1
        listener.shutdown()
        try:
            data = conn.recv(1024)
        except ConnectionResetError:
            data = b""
        assert data == b""
        assert listener.connection_count == 0


def test_serve_after_shutdown_returns_immediately():
    listener = Listener(0)
    port = listener.port
    listener.shutdown()
    listener.shutdown()
    listener.serve()
    with pytest.raises(ConnectionRefusedError):
        socket.create_connection(("127.0.0.1", port), timeout=2)


def test_port_in_use_raises():
    with socket.socket() as occupant:
        occupant.bind(("", 0))
        occupant.listen()
        port = occupant.getsockname()[1]
        with pytest.raises(OSError, match="no se pudo iniciar el listener"):
            Listener(port)
        with pytest.raises(OSError, match="no se pudo iniciar el listener"):
            start_listener(str(port))


def test_invalid_port_raises():
    with pytest.raises(OSError, match="no se pudo iniciar el listener en :nope"):
        Listener("nope")