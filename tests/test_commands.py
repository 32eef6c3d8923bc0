import time
from datetime import datetime

import pytest

from cmdhttpd import commands
from cmdhttpd.commands import CommandError


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


# --- Fibonacci ---


def test_fibonacci_valid():
    assert commands.fibonacci(10) == "55"


@pytest.mark.parametrize("n, expected", [(0, "0"), (1, "1"), (2, "1"), (10, "55")])
def test_fibonacci_small_values(n, expected):
    assert commands.fibonacci(n) == expected


def test_fibonacci_negative():
    with pytest.raises(CommandError):
        commands.fibonacci(-1)


# --- CreateFile ---


def test_create_file_valid(workdir):
    msg = commands.create_file("testfile.txt", "hello", 2)
    assert "creado/truncado con éxito" in msg
    assert (workdir / "testfile.txt").read_text(encoding="utf-8") == "hellohello"


def test_create_file_invalid_name(workdir):
    with pytest.raises(CommandError):
        commands.create_file("../badname.txt", "hi", 1)


def test_create_file_backslash_rejected(workdir):
    with pytest.raises(CommandError):
        commands.create_file("a\\b.txt", "hi", 1)


def test_create_file_empty_name(workdir):
    with pytest.raises(CommandError):
        commands.create_file("", "hi", 1)


def test_create_file_repeat_zero(workdir):
    msg = commands.create_file("testfile2.txt", "x", 0)
    assert "creado/truncado con éxito" in msg
    assert "(1 repeticiones)" in msg
    assert (workdir / "testfile2.txt").read_text(encoding="utf-8") == "x"


def test_create_file_truncates(workdir):
    first = commands.create_file("t.txt", "long content", 3)
    assert "(3 repeticiones)" in first
    second = commands.create_file("t.txt", "ab", 1)
    assert "creado/truncado con éxito" in second
    assert "(1 repeticiones)" in second
    assert (workdir / "t.txt").read_text(encoding="utf-8") == "ab"


# --- DeleteFile ---


def test_delete_file_valid(workdir):
    commands.create_file("todelete.txt", "data", 1)
    msg = commands.delete_file("todelete.txt")
    assert "eliminado con éxito" in msg
    assert not (workdir / "todelete.txt").exists()


def test_delete_file_not_exist(workdir):
    with pytest.raises(CommandError):
        commands.delete_file("nonexistent.txt")


def test_delete_file_invalid_name(workdir):
    with pytest.raises(CommandError):
        commands.delete_file("../badname.txt")


# --- Hash ---


def test_hash_valid():
    result = commands.hash_text("test")
    assert result.startswith("9f86d081")
    assert len(result) == 64


def test_hash_empty():
    with pytest.raises(CommandError):
        commands.hash_text("")


# --- Help ---


def test_help():
    text = commands.help_text()
    assert "/fibonacci?num={N}" in text
    assert text.count("\r\n") == 12


# --- LoadTest ---


def test_load_test_valid():
    start = time.monotonic()
    msg = commands.load_test(2, 1)
    elapsed = time.monotonic() - start
    assert "Executed 2 concurrent tasks sleeping 1 seconds each" in msg
    assert elapsed >= 1


def test_load_test_invalid_tasks():
    with pytest.raises(CommandError):
        commands.load_test(0, 1)


def test_load_test_invalid_sleep():
    with pytest.raises(CommandError):
        commands.load_test(1, -1)


# --- Random ---


def test_random_valid():
    nums = commands.random_numbers(5, 1, 10)
    assert len(nums) == 5
    assert all(1 <= value <= 10 for value in nums)


def test_random_single_value_range():
    assert commands.random_numbers(4, 7, 7) == [7, 7, 7, 7]


def test_random_invalid_count():
    with pytest.raises(CommandError):
        commands.random_numbers(0, 1, 10)


def test_random_min_greater_than_max():
    with pytest.raises(CommandError):
        commands.random_numbers(5, 10, 1)


# --- Reverse ---


def test_reverse():
    assert commands.reverse("abcd") == "dcba"


def test_reverse_round_trip_unicode():
    text = "añb€"
    assert commands.reverse(commands.reverse(text)) == text
    assert commands.reverse(text)[0] == "€"


# --- Simulate ---


def test_simulate_valid():
    msg = commands.simulate(1, "task1")
    assert "task1" in msg


def test_simulate_default_description():
    assert commands.simulate(0, "") == "Simulated task: tarea for 0 seconds"


def test_simulate_invalid_seconds():
    with pytest.raises(CommandError):
        commands.simulate(-1, "task1")


# --- Sleep ---


def test_sleep_valid():
    assert "Slept for 1 seconds" in commands.sleep(1)


def test_sleep_invalid_seconds():
    with pytest.raises(CommandError):
        commands.sleep(-1)


# --- Timestamp ---


def test_timestamp():
    ts = commands.timestamp()
    assert len(ts) >= len("2006-01-02T15:04:05Z")
    parsed = datetime.strptime(ts, "%Y-%m-%dT%H:%M:%SZ")
    assert parsed.year >= 2024


# --- ToUpper ---


def test_to_upper_valid():
    assert commands.to_upper("hello") == "HELLO"


def test_to_upper_empty():
    assert commands.to_upper("") == ""