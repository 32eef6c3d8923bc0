"""TCP listener that hands each accepted connection to its own thread."""

from __future__ import annotations

import logging
import socket
import threading

from cmdhttpd.handler import handle_connection

__all__ = ["Listener", "start_listener"]

log = logging.getLogger(__name__)

_ACCEPT_POLL = 0.2


class Listener:
    """A bound server socket serving HTTP requests until shut down."""

    def __init__(self, port: str | int, host: str = "") -> None:
        self.address = f"{host}:{port}"
        try:
            self._sock = socket.create_server((host, int(port)))
        except (OSError, ValueError) as exc:
            raise OSError(
                f"no se pudo iniciar el listener en {self.address}: {exc}"
            ) from exc
        self._sock.settimeout(_ACCEPT_POLL)
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._serving = False
        self._connections: set[socket.socket] = set()

    @property
    def port(self) -> int:
        """The port the socket is bound to."""
        return self._sock.getsockname()[1]

    @property
    def connection_count(self) -> int:
        """Number of connections currently being handled."""
        with self._lock:
            return len(self._connections)

    def serve(self) -> None:
        """Accept connections until :meth:`shutdown` is called."""
        with self._lock:
            if self._stopping.is_set():
                self._sock.close()
                return
            self._serving = True
        log.info("Servidor escuchando en %s", self.address)
        try:
            while not self._stopping.is_set():
                try:
                    conn, peer = self._sock.accept()
                except socket.timeout:
                    continue
                except OSError as exc:
                    if self._stopping.is_set() or self._sock.fileno() == -1:
                        break
                    log.warning("error al aceptar conexión: %s", exc)
                    continue
                with self._lock:
                    if self._stopping.is_set():
                        conn.close()
                        break
                    self._connections.add(conn)
                log.info("Nueva conexión desde %s", peer)
                threading.Thread(
                    target=self._handle, args=(conn, peer), daemon=True
                ).start()
        finally:
            with self._lock:
                self._serving = False
            self._sock.close()
            log.info("Cerrando listener...")

    def _handle(self, conn: socket.socket, peer: object) -> None:
        try:
            handle_connection(conn)
        finally:
            with self._lock:
                self._connections.discard(conn)
            conn.close()
            log.info("Conexión cerrada: %s", peer)

    def shutdown(self) -> None:
        """Stop accepting connections and close every active one."""
        with self._lock:
            self._stopping.set()
            serving = self._serving
            active = list(self._connections)
            self._connections.clear()
        if not serving:
            self._sock.close()
        for conn in active:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()

    def __enter__(self) -> Listener:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def start_listener(port: str | int) -> None:
    """Listen on ``port`` on every interface and serve until shut down."""
    Listener(port).serve()