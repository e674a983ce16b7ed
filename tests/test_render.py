"""Renderer tests using a recording rich console."""

from __future__ import annotations

import io
from datetime import datetime, timezone

from rich.console import Console

from whisk.config.models import KeyBindings
from whisk.store import Project
from whisk.ui.render import (
    HIGHLIGHT_STYLE,
    NO_SELECTION_TITLE,
    format_timestamp,
    render_menu,
    render_project_detail,
    render_project_list,
    render_screen,
)
from whisk.ui.state import ScreenState, Tab


def _text(renderable, width: int = 220, height: int = 24) -> str:
    console = Console(file=io.StringIO(), width=width, height=height, record=True)
    console.print(renderable)
    return console.export_text()


def _projects() -> list[Project]:
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return [
        Project(id="id-alpha", name="alpha", directory="/work/alpha", created_at=created),
        Project(id="id-beta", name="beta", directory="/work/beta", created_at=created),
        Project(id="id-gamma", name="gamma", directory="/work/gamma", created_at=created),
    ]


def test_menu_lists_all_titles() -> None:
    panel = render_menu(Tab.PROJECTS)

    assert panel.renderable.plain == "Home | Projects | Add | Delete | Quit"


def test_menu_highlights_active_tab() -> None:
    text = render_menu(Tab.PROJECTS).renderable
    start = text.plain.index("rojects")

    styles = {str(span.style) for span in text.spans if span.start <= start < span.end}

    assert "yellow" in styles


def test_home_screen_shows_welcome() -> None:
    output = _text(render_screen(ScreenState(active_tab=Tab.HOME), _projects()))

    assert "Welcome" in output
    assert "whisk-CLI" in output
    assert "Menu" in output


def test_empty_projects_screen_shows_placeholder() -> None:
    state = ScreenState(active_tab=Tab.PROJECTS, selected=0)

    output = _text(render_screen(state, []))

    assert NO_SELECTION_TITLE in output


def test_projects_screen_shows_selected_detail() -> None:
    state = ScreenState(active_tab=Tab.PROJECTS, selected=1)

    output = _text(render_screen(state, _projects()))

    assert "alpha" in output
    assert "gamma" in output
    assert "Detail" in output
    assert "id-beta" in output
    assert "/work/beta" in output
    assert "2024-01-02 03:04:05 UTC" in output
    assert NO_SELECTION_TITLE not in output


def test_stale_selection_renders_last_project() -> None:
    state = ScreenState(active_tab=Tab.PROJECTS, selected=9)

    output = _text(render_screen(state, _projects()))

    assert "/work/gamma" in output


def test_list_highlights_only_selected_entry() -> None:
    panel = render_project_list(_projects(), 1)

    styles = [line.style for line in panel.renderable.renderables]

    assert styles == ["", HIGHLIGHT_STYLE, ""]


def test_detail_placeholder_for_missing_project() -> None:
    panel = render_project_detail(None)

    assert panel.title == NO_SELECTION_TITLE


def test_footer_reflects_key_bindings() -> None:
    keys = KeyBindings(add="n")
    state = ScreenState(active_tab=Tab.HOME)

    output = _text(render_screen(state, [], keys=keys))

    assert "n add" in output
    assert "'n' to add a new project" in output


def test_format_timestamp_uses_pattern() -> None:
    project = _projects()[0]

    assert format_timestamp(project, "%Y/%m/%d") == "2024/01/02"


def test_cleared_cursor_highlights_first_project() -> None:
    state = ScreenState(active_tab=Tab.PROJECTS, selected=None)

    output = _text(render_screen(state, _projects()))

    assert "/work/alpha" in output
    assert NO_SELECTION_TITLE not in output
