"""File-backed persistence for whisk project records."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from .errors import IndexOutOfRange, StorageFormatError, StorageReadError, StoreError
from .models import Project, ProjectList

LOGGER = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("~/.config/whisk/db.json")
EMPTY_DOCUMENT = "[]"


class ProjectStore:
    """Read and rewrite the project document as a single unit.

    Every mutation loads the current document, changes it in memory and writes
    the full list back. There is no locking; concurrent writers race and the
    last one wins.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the store for a document path.

        Args:
            path: Location of the JSON document. Defaults to ``DEFAULT_DB_PATH``.
        """
        self._path = (path or DEFAULT_DB_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved document path."""
        return self._path

    def ensure_exists(self) -> Path:
        """Create the document directory and an empty document when missing.

        Returns:
            Path: Location of the document.

        Raises:
            StorageReadError: If the directory or file cannot be created.
        """
        path = self._path
        if path.exists():
            return path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(EMPTY_DOCUMENT, encoding="utf-8")
        except OSError as exc:
            raise StorageReadError(f"Unable to create project document at {path}: {exc}") from exc
        LOGGER.info("Created empty project document at %s", path)
        return path

    def load(self) -> list[Project]:
        """Return every stored project in document order.

        Returns:
            list[Project]: Projects in persisted order.

        Raises:
            StorageReadError: If the document cannot be read.
            StorageFormatError: If the document is not a list of projects.
        """
        self.ensure_exists()
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageReadError(f"Unable to read project document {self._path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageFormatError(f"Invalid project document {self._path}: {exc}") from exc

        if not isinstance(data, list):
            raise StorageFormatError(
                f"Invalid project document {self._path}: expected a JSON array at the top level"
            )

        try:
            return ProjectList.validate_python(data)
        except ValidationError as exc:
            raise StorageFormatError(f"Invalid project record in {self._path}: {exc}") from exc

    def append(self, name: str, directory: str) -> list[Project]:
        """Add a new project at the end of the document.

        Args:
            name: Display name for the project.
            directory: Absolute directory path of the project.

        Returns:
            list[Project]: The updated project list.
        """
        projects = self.load()
        project = Project(name=name, directory=directory, created_at=datetime.now(timezone.utc))
        projects.append(project)
        self._write(projects)
        LOGGER.info("Added project %s (%s) at %s", project.name, project.id, project.directory)
        return projects

    def remove_at(self, index: int) -> None:
        """Remove the project stored at a position.

        Args:
            index: Zero-based position of the project to remove.

        Raises:
            IndexOutOfRange: If ``index`` does not address a stored project.
        """
        projects = self.load()
        if not 0 <= index < len(projects):
            raise IndexOutOfRange(index, len(projects))
        removed = projects.pop(index)
        self._write(projects)
        LOGGER.info("Removed project %s (%s)", removed.name, removed.id)

    def _write(self, projects: Sequence[Project]) -> None:
        """Replace the document with the serialized project list.

        The list is written to a sibling temporary file and moved into place so
        readers never observe a partially written document.

        Args:
            projects: Projects to persist in order.

        Raises:
            StorageReadError: If the document cannot be written.
        """
        payload = ProjectList.dump_python(list(projects), mode="json")
        content = json.dumps(payload, indent=2)
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=str(directory)
            )
        except OSError as exc:
            raise StorageReadError(f"Unable to write project document {self._path}: {exc}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageReadError(f"Unable to write project document {self._path}: {exc}") from exc
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        LOGGER.debug("Wrote %d project(s) to %s", len(projects), self._path)


__all__ = [
    "ProjectStore",
    "DEFAULT_DB_PATH",
    "Project",
    "ProjectList",
    "StoreError",
    "StorageReadError",
    "StorageFormatError",
    "IndexOutOfRange",
]
