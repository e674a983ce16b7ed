"""Project record models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(BaseModel):
    """A tracked project directory.

    Attributes:
        id: Opaque identifier assigned once at creation.
        name: Display name shown in the project list.
        directory: Absolute path of the project directory.
        created_at: UTC timestamp of when the record was added.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    directory: str
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("created_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


ProjectList = TypeAdapter(List[Project])


__all__ = ["Project", "ProjectList"]
