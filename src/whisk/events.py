"""Keyboard and tick event scheduling for the interactive screen."""

from __future__ import annotations

import codecs
import logging
import os
import queue
import select
import threading
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Union

LOGGER = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.2

_ESCAPE_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
}
_CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x03": "ctrl+c",
}


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A key read from the terminal.

    Attributes:
        key: Printable character, or a name such as ``up`` or ``enter``.
    """

    key: str


@dataclass(frozen=True, slots=True)
class Tick:
    """Emitted when a tick interval passes, to drive redraws."""


Event = Union[KeyPress, Tick]


class SchedulerError(RuntimeError):
    """Raised to the consumer when the input thread stopped unexpectedly."""


class KeySource(Protocol):
    """Something that can be polled for a single key."""

    def read(self, timeout: float) -> Optional[str]:
        """Return the next key, or ``None`` if none arrived within ``timeout`` seconds."""
        ...


class TerminalKeySource:
    """Read keys from a POSIX terminal file descriptor.

    The descriptor is expected to already be in raw or cbreak mode.
    """

    def __init__(self, fd: int) -> None:
        self._fd = fd
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def read(self, timeout: float) -> Optional[str]:
        if not self._wait(timeout):
            return None
        char = self._read_char()
        if char == "\x1b":
            return self._read_escape()
        return _CONTROL_KEYS.get(char, char)

    def _wait(self, timeout: float) -> bool:
        readable, _, _ = select.select([self._fd], [], [], max(0.0, timeout))
        return bool(readable)

    def _read_char(self) -> str:
        while True:
            data = os.read(self._fd, 1)
            if not data:
                raise EOFError("terminal input closed")
            char = self._decoder.decode(data)
            if char:
                return char

    def _read_escape(self) -> str:
        sequence = ""
        while len(sequence) < 2 and self._wait(0.01):
            sequence += self._read_char()
        return _ESCAPE_SEQUENCES.get(sequence, "esc")


_FAILED = object()


class EventScheduler:
    """Merge key presses and periodic ticks into one ordered queue.

    A background thread polls the key source with a timeout equal to the time
    left in the current tick interval. Keys are queued as soon as they are
    read; a ``Tick`` is queued whenever the interval has fully elapsed. The
    foreground loop consumes events with :meth:`next_event`.
    """

    def __init__(
        self,
        source: KeySource,
        *,
        tick_interval: float = DEFAULT_TICK_SECONDS,
    ) -> None:
        """Initialize the scheduler.

        Args:
            source: Key source polled by the background thread.
            tick_interval: Seconds between ticks when no key arrives.
        """
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        self._source = source
        self._tick_interval = tick_interval
        self._queue: queue.Queue[object] = queue.Queue()
        self._stop_event = threading.Event()
        self._running = threading.Event()
        self._running.set()
        self._parked = threading.Event()
        self._failure: BaseException | None = None
        self._thread = threading.Thread(target=self._run, daemon=True, name="whisk-input")

    @property
    def tick_interval(self) -> float:
        """Return the tick interval in seconds."""
        return self._tick_interval

    def start(self) -> None:
        """Start the background input thread."""
        LOGGER.debug("Starting input thread with %.3fs tick interval", self._tick_interval)
        self._thread.start()

    def next_event(self, timeout: float | None = None) -> Event:
        """Block until the next event is available.

        Args:
            timeout: Optional upper bound in seconds.

        Returns:
            Event: The next key press or tick in production order.

        Raises:
            queue.Empty: If ``timeout`` elapsed without an event.
            SchedulerError: If the input thread failed.
        """
        item = self._queue.get(timeout=timeout)
        if item is _FAILED:
            raise SchedulerError(f"Input thread stopped: {self._failure}") from self._failure
        return item  # type: ignore[return-value]

    def pause(self) -> None:
        """Stop polling input until :meth:`resume` is called.

        Blocks until the input thread has parked so another program can read
        the terminal without competition.
        """
        self._running.clear()
        if not self._thread.is_alive():
            return
        LOGGER.debug("Pausing input thread")
        self._parked.wait(timeout=self._tick_interval * 5)

    def resume(self) -> None:
        """Resume polling input after :meth:`pause`."""
        LOGGER.debug("Resuming input thread")
        self._running.set()

    def stop(self) -> None:
        """Ask the input thread to exit at its next poll boundary."""
        self._stop_event.set()
        self._running.set()

    def _run(self) -> None:
        last_tick = time.monotonic()
        try:
            while not self._stop_event.is_set():
                if not self._running.is_set():
                    self._parked.set()
                    self._running.wait()
                    self._parked.clear()
                    last_tick = time.monotonic()
                    continue

                remaining = self._tick_interval - (time.monotonic() - last_tick)
                key = self._source.read(max(0.0, remaining))
                if key is not None:
                    self._queue.put(KeyPress(key))

                if time.monotonic() - last_tick >= self._tick_interval:
                    self._queue.put(Tick())
                    last_tick = time.monotonic()
        except Exception as exc:
            LOGGER.exception("Input thread failed")
            self._failure = exc
            self._queue.put(_FAILED)


__all__ = [
    "KeyPress",
    "Tick",
    "Event",
    "KeySource",
    "TerminalKeySource",
    "EventScheduler",
    "SchedulerError",
    "DEFAULT_TICK_SECONDS",
]
