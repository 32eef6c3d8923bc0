"""Command implementations exposed by the HTTP endpoints."""

from __future__ import annotations

import hashlib
import json
import os
import random
import threading
import time
from datetime import datetime, timezone

__all__ = [
    "CommandError",
    "fibonacci",
    "create_file",
    "delete_file",
    "hash_text",
    "help_text",
    "load_test",
    "random_numbers",
    "reverse",
    "simulate",
    "sleep",
    "timestamp",
    "to_upper",
]

_HELP_LINES = (
    "/fibonacci?num={N}                 : Calcula el N-ésimo número de Fibonacci",
    "/createfile?name={name}&content={text}&repeat={times} : Crea o trunca un archivo con contenido repetido",
    "/deletefile?name={name}           : Elimina un archivo existente",
    "/reverse?text={text}              : Invierte la cadena de texto dada",
    "/toupper?text={text}              : Convierte el texto a mayúsculas",
    "/random?count={c}&min={min}&max={max} : Genera un arreglo de números aleatorios",
    "/timestamp                        : Devuelve la hora actual en formato ISO-8601",
    "/hash?text={text}                 : Calcula el hash SHA-256 del texto",
    "/simulate?seconds={s}&task={name} : Simula una tarea durmiendo X segundos",
    "/sleep?seconds={s}                : Suspende la ejecución durante X segundos",
    "/loadtest?tasks={n}&sleep={s}     : Ejecuta N tareas concurrentes durmiendo S segundos cada una",
    "/status                           : Muestra métricas del servidor (uptime, conexiones, procesos)",
    "/help                             : Muestra este mensaje de ayuda",
)


class CommandError(Exception):
    """Raised when a command receives invalid parameters or fails."""


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _validate_file_name(name: str) -> None:
    if not name:
        raise CommandError("el parámetro 'name' es obligatorio")
    if "/" in name or "\\" in name or os.path.basename(name) != name:
        raise CommandError(f"nombre de archivo inválido: {_quote(name)}")


def fibonacci(n: int) -> str:
    """Return the n-th Fibonacci number as a decimal string."""
    if n < 0:
        raise CommandError(f"el parámetro 'num' debe ser >= 0, recibí {n}")
    current, following = 0, 1
    for _ in range(n):
        current, following = following, current + following
    return str(current)


def create_file(name: str, content: str, repeat: int) -> str:
    """Create or truncate ``name`` and write ``content`` ``repeat`` times."""
    _validate_file_name(name)
    repeat = max(repeat, 1)
    try:
        with open(name, "w", encoding="utf-8", newline="") as handle:
            handle.write(content * repeat)
    except OSError as exc:
        raise CommandError(
            f"error al crear o truncar el archivo {_quote(name)}: {exc}"
        ) from exc
    return f"Archivo {_quote(name)} creado/truncado con éxito ({repeat} repeticiones)"


def delete_file(name: str) -> str:
    """Remove the named file from the working directory."""
    _validate_file_name(name)
    try:
        os.stat(name)
    except FileNotFoundError as exc:
        raise CommandError(f"archivo no encontrado: {_quote(name)}") from exc
    except OSError as exc:
        raise CommandError(f"error al acceder al archivo {_quote(name)}: {exc}") from exc
    try:
        os.remove(name)
    except OSError as exc:
        raise CommandError(f"error al eliminar el archivo {_quote(name)}: {exc}") from exc
    return f"Archivo {_quote(name)} eliminado con éxito"


def hash_text(text: str) -> str:
    """Return the hexadecimal SHA-256 digest of ``text``."""
    if not text:
        raise CommandError("el parámetro 'text' es obligatorio")
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def help_text() -> str:
    """Return a listing of every available endpoint."""
    return "\r\n".join(_HELP_LINES)


def load_test(tasks: int, sleep_sec: int) -> str:
    """Run ``tasks`` concurrent sleepers and wait for all of them."""
    if tasks <= 0:
        raise CommandError(f"el parámetro 'tasks' debe ser > 0, recibí {tasks}")
    if sleep_sec < 0:
        raise CommandError(f"el parámetro 'sleep' debe ser >= 0, recibí {sleep_sec}")
    workers = [
        threading.Thread(target=time.sleep, args=(sleep_sec,), daemon=True)
        for _ in range(tasks)
    ]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()
    return f"Executed {tasks} concurrent tasks sleeping {sleep_sec} seconds each"


def random_numbers(count: int, minimum: int, maximum: int) -> list[int]:
    """Return ``count`` random integers in the closed range [minimum, maximum]."""
    if count <= 0:
        raise CommandError(f"el parámetro 'count' debe ser > 0, recibí {count}")
    if minimum > maximum:
        raise CommandError(
            f"el parámetro 'max' ({maximum}) debe ser >= 'min' ({minimum})"
        )
    return [random.randint(minimum, maximum) for _ in range(count)]


def reverse(text: str) -> str:
    """Return ``text`` with its code points in reverse order."""
    return text[::-1]


def simulate(seconds: int, task: str = "") -> str:
    """Pretend to run ``task`` by sleeping ``seconds`` seconds."""
    if seconds < 0:
        raise CommandError(f"el parámetro 'seconds' debe ser >= 0, recibí {seconds}")
    time.sleep(seconds)
    description = task or "tarea"
    return f"Simulated task: {description} for {seconds} seconds"


def sleep(seconds: int) -> str:
    """Block for ``seconds`` seconds."""
    if seconds < 0:
        raise CommandError(f"el parámetro 'seconds' debe ser >= 0, recibí {seconds}")
    time.sleep(seconds)
    return f"Slept for {seconds} seconds"


def timestamp() -> str:
    """Return the current UTC time in RFC 3339 format."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _upper_char(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def to_upper(text: str) -> str:
    """Return ``text`` with each character mapped to its upper case."""
    return "".join(_upper_char(char) for char in text)