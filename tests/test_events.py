"""Event scheduler and terminal key decoding tests."""

from __future__ import annotations

import os
import threading
import time
from typing import Iterator, Optional

import pytest

from whisk.events import EventScheduler, KeyPress, SchedulerError, TerminalKeySource, Tick


class ScriptedKeys:
    """Key source that returns queued keys, then idles until the timeout."""

    def __init__(self, keys: list[str] | None = None) -> None:
        self._keys = list(keys or [])
        self._lock = threading.Lock()
        self.reads = 0

    def push(self, key: str) -> None:
        with self._lock:
            self._keys.append(key)

    def read(self, timeout: float) -> Optional[str]:
        with self._lock:
            self.reads += 1
            if self._keys:
                return self._keys.pop(0)
        time.sleep(timeout)
        return None


class BrokenKeys:
    def read(self, timeout: float) -> Optional[str]:
        raise OSError("input device vanished")


@pytest.fixture
def scheduler_factory() -> Iterator:
    created: list[EventScheduler] = []

    def _make(source, tick: float = 0.02) -> EventScheduler:
        scheduler = EventScheduler(source, tick_interval=tick)
        created.append(scheduler)
        scheduler.start()
        return scheduler

    yield _make
    for scheduler in created:
        scheduler.stop()


def _next_keys(scheduler: EventScheduler, count: int) -> list[str]:
    keys: list[str] = []
    while len(keys) < count:
        event = scheduler.next_event(timeout=2)
        if isinstance(event, KeyPress):
            keys.append(event.key)
    return keys


def test_keys_are_delivered_in_order(scheduler_factory) -> None:
    scheduler = scheduler_factory(ScriptedKeys(["p", "down", "down", "up", "q"]))

    assert _next_keys(scheduler, 5) == ["p", "down", "down", "up", "q"]


def test_ticks_are_emitted_without_input(scheduler_factory) -> None:
    scheduler = scheduler_factory(ScriptedKeys())

    assert scheduler.next_event(timeout=2) == Tick()
    assert scheduler.next_event(timeout=2) == Tick()


def test_ticks_keep_flowing_between_keys(scheduler_factory) -> None:
    source = ScriptedKeys()
    scheduler = scheduler_factory(source)

    assert isinstance(scheduler.next_event(timeout=2), Tick)
    source.push("h")
    events = [scheduler.next_event(timeout=2) for _ in range(4)]

    assert KeyPress("h") in events
    assert Tick() in events[events.index(KeyPress("h")) :]


def test_pause_stops_polling_until_resumed(scheduler_factory) -> None:
    source = ScriptedKeys()
    scheduler = scheduler_factory(source)
    scheduler.next_event(timeout=2)

    scheduler.pause()
    reads = source.reads
    time.sleep(0.1)
    assert source.reads == reads

    source.push("x")
    scheduler.resume()
    assert _next_keys(scheduler, 1) == ["x"]


def test_source_failure_is_raised_to_consumer(scheduler_factory) -> None:
    scheduler = scheduler_factory(BrokenKeys())

    with pytest.raises(SchedulerError, match="input device vanished"):
        scheduler.next_event(timeout=2)


def test_tick_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EventScheduler(ScriptedKeys(), tick_interval=0)


@pytest.fixture
def pipe() -> Iterator[tuple[int, int]]:
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    os.close(read_fd)
    os.close(write_fd)


def test_terminal_source_decodes_keys(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    source = TerminalKeySource(read_fd)
    os.write(write_fd, "a\x1b[A\x1b[B\r\x03é".encode("utf-8"))

    keys = [source.read(0.1) for _ in range(6)]

    assert keys == ["a", "up", "down", "enter", "ctrl+c", "é"]


def test_terminal_source_times_out_and_reads_bare_escape(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    source = TerminalKeySource(read_fd)

    assert source.read(0.01) is None

    os.write(write_fd, b"\x1b")
    assert source.read(0.1) == "esc"
