"""Rich renderables for the interactive screen.

Every function here is pure: it builds renderables from the screen state and a
snapshot of the project list and never touches the store or the terminal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from rich.align import Align
from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from whisk.config.models import KeyBindings, UISettings
from whisk.store import Project
from whisk.ui.state import ScreenState, Tab

MENU_TITLES = ("Home", "Projects", "Add", "Delete", "Quit")
NO_SELECTION_TITLE = "No project selected"
HIGHLIGHT_STYLE = "bold black on yellow"


def render_menu(active: Tab) -> Panel:
    """Return the menu bar with the active tab highlighted.

    Args:
        active: Tab currently shown.

    Returns:
        Panel: Bordered menu bar.
    """
    menu = Text(style="white")
    for position, title in enumerate(MENU_TITLES):
        if position:
            menu.append(" | ")
        rest_style = "yellow" if title == active.value else "white"
        menu.append(title[0], style="yellow underline")
        menu.append(title[1:], style=rest_style)
    return Panel(menu, title="Menu", title_align="left", border_style="white")


def render_home(keys: KeyBindings | None = None) -> Panel:
    """Return the static welcome panel."""
    keys = keys or KeyBindings()
    body = Text(justify="center")
    body.append("\nWelcome\n\nto\n\n")
    body.append("whisk-CLI", style="bright_blue")
    body.append(
        f"\n\nPress '{keys.projects}' to access projects, '{keys.add}' to add a new project "
        f"and '{keys.delete}' to delete the currently selected project."
    )
    return Panel(Align.center(body), title="Home", title_align="left", border_style="white")


def render_project_list(projects: Sequence[Project], selected: Optional[int]) -> Panel:
    """Return the project name list with the selected entry highlighted.

    Args:
        projects: Projects in stored order.
        selected: Valid cursor position, or ``None``.

    Returns:
        Panel: Bordered list of project names.
    """
    lines = []
    for index, project in enumerate(projects):
        style = HIGHLIGHT_STYLE if index == selected else ""
        lines.append(Text(project.name, style=style, no_wrap=True, overflow="ellipsis"))
    return Panel(Group(*lines), title="Projects", title_align="left", border_style="white")


def render_project_detail(
    project: Optional[Project],
    timestamp_format: str = UISettings().timestamp_format,
) -> Panel:
    """Return the detail panel for a project, or the empty placeholder.

    Args:
        project: Project to describe, or ``None`` when nothing is selected.
        timestamp_format: ``strftime`` pattern for the creation time.

    Returns:
        Panel: Bordered detail table or placeholder.
    """
    if project is None:
        return Panel("", title=NO_SELECTION_TITLE, title_align="left", border_style="white")

    table = Table(expand=True, box=None, header_style="bold", pad_edge=False)
    table.add_column("ID", ratio=25, overflow="fold")
    table.add_column("Name", ratio=15, overflow="fold")
    table.add_column("Directory", ratio=50, overflow="fold")
    table.add_column("Created At", ratio=20, overflow="fold")
    table.add_row(
        project.id,
        project.name,
        project.directory,
        format_timestamp(project, timestamp_format),
    )
    return Panel(table, title="Detail", title_align="left", border_style="white")


def render_footer(keys: KeyBindings, db_path: Path | None = None) -> Panel:
    """Return the key help line shown below the main area."""
    hints = Text(style="white")
    for label, key in (
        ("home", keys.home),
        ("projects", keys.projects),
        ("add", keys.add),
        ("delete", keys.delete),
        ("move", f"{keys.up}/{keys.down}"),
        ("quit", keys.quit),
    ):
        hints.append(key, style="yellow")
        hints.append(f" {label}  ")
    if db_path is not None:
        hints.append(str(db_path), style="dim")
    return Panel(hints, border_style="white")


def render_screen(
    state: ScreenState,
    projects: Sequence[Project],
    *,
    settings: UISettings | None = None,
    keys: KeyBindings | None = None,
    db_path: Path | None = None,
) -> Layout:
    """Compose the full screen for the current state.

    Args:
        state: Screen state to draw.
        projects: Current project list, read fresh by the caller.
        settings: Presentation settings.
        keys: Key bindings shown in help text.
        db_path: Document path shown in the footer.

    Returns:
        Layout: Menu bar, main area and footer.
    """
    settings = settings or UISettings()
    keys = keys or KeyBindings()

    root = Layout(name="root")
    root.split_column(
        Layout(render_menu(state.active_tab), name="menu", size=3),
        Layout(name="main", minimum_size=2),
        Layout(render_footer(keys, db_path), name="footer", size=3),
    )

    main = root["main"]
    if state.active_tab is Tab.HOME:
        main.update(render_home(keys))
        return root

    selected = state.selection(len(projects))
    current = projects[selected] if selected is not None else None
    main.split_row(
        Layout(render_project_list(projects, selected), name="list", ratio=settings.list_ratio),
        Layout(
            render_project_detail(current, settings.timestamp_format),
            name="detail",
            ratio=settings.detail_ratio,
        ),
    )
    return root


def format_timestamp(project: Project, timestamp_format: str) -> str:
    """Return the project's creation time rendered in UTC."""
    return project.created_at.strftime(timestamp_format)


__all__ = [
    "MENU_TITLES",
    "NO_SELECTION_TITLE",
    "render_menu",
    "render_home",
    "render_project_list",
    "render_project_detail",
    "render_footer",
    "render_screen",
    "format_timestamp",
]
