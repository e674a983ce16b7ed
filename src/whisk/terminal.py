"""Terminal mode handling for the interactive screen."""

from __future__ import annotations

import logging
import sys
import termios
import tty
from types import TracebackType
from typing import Any, Optional, TextIO

LOGGER = logging.getLogger(__name__)


class RawTerminal:
    """Switch a terminal into unbuffered, unechoed input for the duration of a block.

    Keys are delivered one at a time without echo. Output processing and
    signal keys are left intact so full-screen redraws and Ctrl+C behave
    normally.

    The saved attributes are restored on every exit path, including
    exceptions, and may also be restored and re-applied temporarily with
    :meth:`restore` and :meth:`enable` while another program uses the
    terminal.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin
        self._saved: Optional[list[Any]] = None

    @property
    def fd(self) -> int:
        """Return the file descriptor of the controlled terminal."""
        return self._stream.fileno()

    @property
    def active(self) -> bool:
        """Return whether raw mode is currently applied."""
        return self._saved is not None

    def enable(self) -> None:
        """Save the current attributes and enter character input mode."""
        if self._saved is not None:
            return
        fd = self.fd
        self._saved = termios.tcgetattr(fd)
        tty.setcbreak(fd, termios.TCSANOW)
        LOGGER.debug("Terminal switched to raw mode")

    def restore(self) -> None:
        """Restore the attributes saved by :meth:`enable`."""
        if self._saved is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        self._saved = None
        LOGGER.debug("Terminal restored to cooked mode")

    def __enter__(self) -> "RawTerminal":
        self.enable()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()


__all__ = ["RawTerminal"]
