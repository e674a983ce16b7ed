"""Screen state machine and renderer for the interactive view."""

from .render import render_screen
from .state import Outcome, ScreenState, Tab, ViewModel

__all__ = ["Outcome", "ScreenState", "Tab", "ViewModel", "render_screen"]
