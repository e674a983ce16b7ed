"""Screen state and the key handling that drives it."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from whisk.config.models import INTERRUPT_KEY, KeyBindings
from whisk.events import Event, KeyPress
from whisk.picker import DirectoryPicker, project_name_for
from whisk.store import ProjectStore

LOGGER = logging.getLogger(__name__)


class Tab(enum.Enum):
    """Top-level screens reachable from the menu bar."""

    HOME = "Home"
    PROJECTS = "Projects"


class Outcome(enum.Enum):
    """What the main loop should do after an event was handled."""

    CONTINUE = "continue"
    QUIT = "quit"


@dataclass
class ScreenState:
    """Mutable UI state owned by the main loop.

    Attributes:
        active_tab: Screen currently shown below the menu bar.
        selected: Cursor position in the project list, or ``None`` when absent.
    """

    active_tab: Tab = Tab.HOME
    selected: Optional[int] = 0

    def selection(self, count: int) -> Optional[int]:
        """Return the cursor position valid for a list of ``count`` projects.

        A cursor beyond the end (the list shrank since it was set) resolves to
        the last entry, and a cleared cursor resolves to the first entry once
        the list has entries again. Only an empty list has no selection.
        """
        if count <= 0:
            return None
        current = 0 if self.selected is None else self.selected
        return min(max(current, 0), count - 1)

    def move(self, step: int, count: int) -> None:
        """Move the cursor by ``step`` entries, wrapping at both ends."""
        current = self.selection(count)
        if current is None:
            return
        self.selected = (current + step + count) % count


class ViewModel:
    """Apply input events to the screen state and the project store."""

    def __init__(
        self,
        store: ProjectStore,
        picker: DirectoryPicker,
        *,
        keys: KeyBindings | None = None,
        state: ScreenState | None = None,
    ) -> None:
        """Initialize the view model.

        Args:
            store: Project store mutated by add and delete commands.
            picker: Directory picker used by the add command.
            keys: Key bindings; defaults to ``KeyBindings()``.
            state: Initial screen state; defaults to the home tab.
        """
        self._store = store
        self._picker = picker
        self._state = state or ScreenState()
        bindings = keys or KeyBindings()
        self._handlers: dict[str, Callable[[], Outcome]] = {
            bindings.home: self._show_home,
            bindings.projects: self._show_projects,
            bindings.add: self._add_project,
            bindings.delete: self._delete_project,
            bindings.down: self._select_next,
            bindings.up: self._select_previous,
            bindings.quit: self._quit,
            INTERRUPT_KEY: self._quit,
        }

    @property
    def state(self) -> ScreenState:
        """Return the screen state rendered by the main loop."""
        return self._state

    def handle(self, event: Event) -> Outcome:
        """Apply one event.

        Args:
            event: Key press or tick from the scheduler.

        Returns:
            Outcome: ``QUIT`` when the loop should end, else ``CONTINUE``.

        Raises:
            StoreError: If the project document cannot be read or written.
            PickerError: If the directory picker fails.
        """
        if not isinstance(event, KeyPress):
            return Outcome.CONTINUE
        handler = self._handlers.get(event.key)
        if handler is None:
            return Outcome.CONTINUE
        return handler()

    def _quit(self) -> Outcome:
        return Outcome.QUIT

    def _show_home(self) -> Outcome:
        self._state.active_tab = Tab.HOME
        return Outcome.CONTINUE

    def _show_projects(self) -> Outcome:
        self._state.active_tab = Tab.PROJECTS
        return Outcome.CONTINUE

    def _add_project(self) -> Outcome:
        directory = self._picker.pick()
        if directory is None:
            LOGGER.debug("Add cancelled from the directory picker")
            return Outcome.CONTINUE
        self._store.append(project_name_for(directory), directory)
        if self._state.selected is None:
            self._state.selected = 0
        return Outcome.CONTINUE

    def _delete_project(self) -> Outcome:
        if self._state.active_tab is not Tab.PROJECTS:
            return Outcome.CONTINUE
        count = len(self._store.load())
        index = self._state.selection(count)
        if index is None:
            return Outcome.CONTINUE
        LOGGER.debug("Deleting project at position %d of %d", index, count)
        self._store.remove_at(index)
        self._state.selected = None if count == 1 else max(index - 1, 0)
        return Outcome.CONTINUE

    def _select_next(self) -> Outcome:
        if self._state.active_tab is Tab.PROJECTS:
            self._state.move(1, len(self._store.load()))
        return Outcome.CONTINUE

    def _select_previous(self) -> Outcome:
        if self._state.active_tab is Tab.PROJECTS:
            self._state.move(-1, len(self._store.load()))
        return Outcome.CONTINUE


__all__ = ["Tab", "Outcome", "ScreenState", "ViewModel", "INTERRUPT_KEY"]
