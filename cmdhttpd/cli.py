"""Command-line entry point that runs the server until interrupted."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
import time

from cmdhttpd.listener import Listener
from cmdhttpd.workers import init_worker_pools

__all__ = ["main"]

log = logging.getLogger(__name__)

_DEFAULT_PORT = "8080"
_GRACE_PERIOD = 0.5
_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def main(argv: list[str] | None = None) -> int:
    """Start the worker pools and the listener; stop on SIGINT or SIGTERM."""
    parser = argparse.ArgumentParser(
        prog="cmdhttpd",
        description="Serve command endpoints over HTTP/1.0; the port comes from $PORT.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    init_worker_pools()
    port = os.environ.get("PORT") or _DEFAULT_PORT
    log.info("Server starting on port %s", port)

    stop = threading.Event()
    received: list[int] = []

    def _on_signal(signum: int, frame: object) -> None:
        received.append(signum)
        stop.set()

    previous = {sig: signal.signal(sig, _on_signal) for sig in _SIGNALS}
    try:
        try:
            listener = Listener(port)
        except OSError as exc:
            log.error("Server error: %s", exc)
            return 1

        failures: list[BaseException] = []

        def _serve() -> None:
            try:
                listener.serve()
            except Exception as exc:
                failures.append(exc)
                stop.set()

        thread = threading.Thread(target=_serve, name="listener", daemon=True)
        thread.start()
        while not stop.wait(0.5):
            pass

        if failures:
            log.error("Server error: %s", failures[0])
            listener.shutdown()
            return 1

        name = signal.Signals(received[-1]).name if received else "signal"
        log.info("Received %s, shutting down...", name)
        time.sleep(_GRACE_PERIOD)
        listener.shutdown()
        thread.join(timeout=5)
        log.info("Shutdown complete")
        return 0
    finally:
        for sig, handler in previous.items():
            if handler is not None:
                signal.signal(sig, handler)


if __name__ == "__main__":
    raise SystemExit(main())