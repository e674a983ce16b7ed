"""Interactive project browser main loop."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, ContextManager, Iterator, Optional, Protocol

from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from whisk.config import WhiskConfig
from whisk.events import EventScheduler, KeySource, TerminalKeySource
from whisk.picker import DirectoryPicker, build_picker
from whisk.store import ProjectStore
from whisk.terminal import RawTerminal
from whisk.ui.render import render_screen
from whisk.ui.state import Outcome, ScreenState, ViewModel

LOGGER = logging.getLogger(__name__)


class TerminalMode(Protocol):
    """Terminal input mode switch used by the application."""

    @property
    def fd(self) -> int: ...

    def enable(self) -> None: ...

    def restore(self) -> None: ...


class _SuspendingPicker:
    """Run a picker with the screen and input thread handed back to the user."""

    def __init__(
        self, picker: DirectoryPicker, suspend: Callable[[], ContextManager[None]]
    ) -> None:
        self._picker = picker
        self._suspend = suspend

    def pick(self) -> Optional[str]:
        with self._suspend():
            return self._picker.pick()


class WhiskApp:
    """Own the terminal, the event scheduler and the render loop.

    Each iteration draws the screen from the current state and a fresh read of
    the store, then blocks for exactly one event and applies it.
    """

    def __init__(
        self,
        config: WhiskConfig,
        *,
        store: ProjectStore | None = None,
        picker: DirectoryPicker | None = None,
        console: Console | None = None,
        terminal: TerminalMode | None = None,
        key_source: KeySource | None = None,
    ) -> None:
        """Initialize the application.

        Args:
            config: Effective configuration.
            store: Project store; defaults to the configured document path.
            picker: Directory picker; defaults to the configured picker.
            console: Rich console used for drawing.
            terminal: Terminal mode switch; defaults to ``RawTerminal()``.
            key_source: Key source; defaults to reading the terminal.
        """
        self._config = config
        self._store = store or ProjectStore(Path(config.store.path))
        self._picker = picker or build_picker(config.picker)
        self._console = console or Console()
        self._terminal = terminal or RawTerminal()
        self._key_source = key_source
        self._state = ScreenState()
        self._scheduler: EventScheduler | None = None
        self._live: Live | None = None

    @property
    def state(self) -> ScreenState:
        """Return the screen state."""
        return self._state

    @property
    def store(self) -> ProjectStore:
        """Return the project store."""
        return self._store

    def draw(self) -> Layout:
        """Return the screen for the current state and stored projects."""
        return render_screen(
            self._state,
            self._store.load(),
            settings=self._config.ui,
            keys=self._config.keys,
            db_path=self._store.path,
        )

    def run(self) -> None:
        """Run until the quit key is pressed.

        The terminal is restored and the cursor shown again on every exit
        path. Store and picker errors propagate to the caller after cleanup.
        """
        self._store.ensure_exists()
        view_model = ViewModel(
            self._store,
            _SuspendingPicker(self._picker, self._suspended),
            keys=self._config.keys,
            state=self._state,
        )

        self._terminal.enable()
        try:
            source = self._key_source or TerminalKeySource(self._terminal.fd)
            self._scheduler = EventScheduler(source, tick_interval=self._config.ui.tick_ms / 1000)
            self._scheduler.start()
            with Live(
                self.draw(),
                console=self._console,
                screen=True,
                auto_refresh=False,
                redirect_stdout=False,
                redirect_stderr=False,
            ) as live:
                self._live = live
                self._loop(self._scheduler, view_model, live)
        except KeyboardInterrupt:
            LOGGER.info("Interrupted; leaving the interactive screen")
        finally:
            if self._scheduler is not None:
                self._scheduler.stop()
            self._live = None
            self._terminal.restore()
            self._console.show_cursor(True)

    def _loop(self, scheduler: EventScheduler, view_model: ViewModel, live: Live) -> None:
        while True:
            event = scheduler.next_event()
            if view_model.handle(event) is Outcome.QUIT:
                LOGGER.debug("Quit requested")
                return
            live.update(self.draw(), refresh=True)

    @contextmanager
    def _suspended(self) -> Iterator[None]:
        """Hand the terminal back to the user for the duration of the block."""
        live = self._live
        scheduler = self._scheduler
        if scheduler is not None:
            scheduler.pause()
        if live is not None:
            live.stop()
        self._terminal.restore()
        try:
            yield
        finally:
            self._terminal.enable()
            if live is not None:
                live.start(refresh=True)
            if scheduler is not None:
                scheduler.resume()


__all__ = ["WhiskApp", "TerminalMode"]
