"""Fixed-size thread pools that run commands from a bounded queue."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable

from cmdhttpd import commands

__all__ = ["WorkerPool", "init_worker_pools", "run"]

_STOP = object()

# name -> (command, worker count); every queue holds 100 jobs.
_POOL_CONFIG: dict[str, tuple[Callable[..., Any], int]] = {
    "fibonacci": (commands.fibonacci, 4),
    "createfile": (commands.create_file, 2),
    "deletefile": (commands.delete_file, 2),
    "reverse": (commands.reverse, 2),
    "toupper": (commands.to_upper, 2),
    "random": (commands.random_numbers, 2),
    "timestamp": (commands.timestamp, 2),
    "hash": (commands.hash_text, 2),
    "simulate": (commands.simulate, 2),
    "sleep": (commands.sleep, 2),
    "loadtest": (commands.load_test, 4),
    "help": (commands.help_text, 1),
}
_QUEUE_SIZE = 100


class WorkerPool:
    """A set of threads that run ``func`` for each submitted job."""

    def __init__(
        self,
        func: Callable[..., Any],
        workers: int,
        queue_size: int = _QUEUE_SIZE,
        name: str = "pool",
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.name = name
        self._func = func
        self._jobs: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
        self._lock = threading.Lock()
        self._closed = False
        self._threads = [
            threading.Thread(target=self._work, name=f"{name}-{i}", daemon=True)
            for i in range(workers)
        ]
        for thread in self._threads:
            thread.start()

    @property
    def workers(self) -> int:
        return len(self._threads)

    @property
    def closed(self) -> bool:
        return self._closed

    def _work(self) -> None:
        while True:
            job = self._jobs.get()
            if job is _STOP:
                return
            args, future = job
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = self._func(*args)
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

    def submit(self, *args: Any) -> Any:
        """Queue a job, wait for a worker to run it and return its result."""
        with self._lock:
            if self._closed:
                raise RuntimeError(f"worker pool {self.name!r} is closed")
        future: Future[Any] = Future()
        self._jobs.put((args, future))
        return future.result()

    def close(self) -> None:
        """Stop accepting jobs and wait for the workers to finish."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for _ in self._threads:
            self._jobs.put(_STOP)
        for thread in self._threads:
            thread.join()

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


_pools: dict[str, WorkerPool] = {}
_pools_lock = threading.Lock()


def init_worker_pools() -> dict[str, WorkerPool]:
    """Start one pool per command with the default sizes, replacing any running ones."""
    global _pools
    fresh = {
        name: WorkerPool(func, workers, _QUEUE_SIZE, name=name)
        for name, (func, workers) in _POOL_CONFIG.items()
    }
    with _pools_lock:
        old, _pools = _pools, fresh
    for pool in old.values():
        pool.close()
    return dict(fresh)


def run(name: str, *args: Any) -> Any:
    """Run the named command on its pool, starting the pools if needed."""
    with _pools_lock:
        pools = _pools
    if not pools:
        pools = init_worker_pools()
    try:
        pool = pools[name]
    except KeyError:
        raise KeyError(f"unknown worker pool: {name!r}") from None
    return pool.submit(*args)