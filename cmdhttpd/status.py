"""Runtime metrics for the running server."""

from __future__ import annotations

import socket
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime

from cmdhttpd.utils import json_response

__all__ = [
    "ProcessInfo",
    "ServerMetrics",
    "init_metrics",
    "current_metrics",
]


@dataclass(frozen=True)
class ProcessInfo:
    """A tracked child process and whether it is ``busy`` or ``idle``."""

    pid: int
    command: str
    status: str = "idle"

    def as_dict(self) -> dict[str, object]:
        return {"pid": self.pid, "command": self.command, "status": self.status}


def _rfc3339(moment: datetime) -> str:
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return ""


@dataclass
class ServerMetrics:
    """Connection counters and tracked processes, safe to share between threads."""

    start_time: datetime = field(default_factory=lambda: datetime.now().astimezone())
    total_connections: int = 0
    active_handlers: int = 0
    active_processes: dict[int, ProcessInfo] = field(default_factory=dict)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def inc_total_connections(self) -> None:
        """Count one more accepted connection."""
        with self._lock:
            self.total_connections += 1

    def inc_active_handlers(self) -> None:
        """Count one more handler in progress."""
        with self._lock:
            self.active_handlers += 1

    def dec_active_handlers(self) -> None:
        """Count one handler fewer in progress."""
        with self._lock:
            self.active_handlers -= 1

    def register_process(self, pid: int, command: str) -> None:
        """Track a process, initially ``idle``."""
        with self._lock:
            self.active_processes[pid] = ProcessInfo(pid=pid, command=command)

    def set_process_status(self, pid: int, status: str) -> None:
        """Change the status of an already registered process; unknown pids are ignored."""
        with self._lock:
            process = self.active_processes.get(pid)
            if process is not None:
                self.active_processes[pid] = replace(process, status=status)

    def marshal(self) -> bytes:
        """Return the metrics, with the host name, as indented JSON."""
        with self._lock:
            payload = {
                "hostname": _hostname(),
                "start_time": _rfc3339(self.start_time),
                "total_connections": self.total_connections,
                "active_handlers": self.active_handlers,
                "processes": [p.as_dict() for p in self.active_processes.values()],
            }
        return json_response(payload).encode("utf-8")


_metrics = ServerMetrics()
_metrics_lock = threading.Lock()


def init_metrics() -> ServerMetrics:
    """Replace the shared metrics with a fresh instance and return it."""
    global _metrics
    fresh = ServerMetrics()
    with _metrics_lock:
        _metrics = fresh
    return fresh


def current_metrics() -> ServerMetrics:
    """Return the shared metrics instance."""
    with _metrics_lock:
        return _metrics