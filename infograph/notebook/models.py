"""Notebook, Source and Infographic records.

A Notebook owns its sources and its (single) infographic: they are stored
inside the notebook record and share its lifecycle.
"""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from infograph.core import NotFoundError


def utcnow() -> datetime:
    return datetime.now(UTC)


def format_date(day: date) -> str:
    """Human date label, e.g. 'October 19, 2026'."""
    return f"{day:%B} {day.day}, {day.year}"


def generate_notebook_id() -> str:
    """Generate a notebook ID: 'nb_' + 12 hex chars from uuid4."""
    return "nb_" + uuid.uuid4().hex[:12]


def generate_source_id() -> str:
    """Generate a source ID: 'src_' + 12 hex chars from uuid4.

    Random rather than clock-derived, so two sources added in the same tick
    still get distinct ids.
    """
    return "src_" + uuid.uuid4().hex[:12]


class SourceType(StrEnum):
    TEXT = "text"
    YOUTUBE = "youtube"
    URL = "url"


class Source(BaseModel):
    id: str = Field(default_factory=generate_source_id)
    type: SourceType
    content: str
    metadata: dict[str, str] = Field(default_factory=dict)
    added: datetime = Field(default_factory=utcnow)


class Infographic(BaseModel):
    data: str
    generated: datetime = Field(default_factory=utcnow)


class Notebook(BaseModel):
    id: str
    name: str
    created: datetime
    updated: datetime
    sources: list[Source] = Field(default_factory=list)
    infographic: Infographic | None = None

    def touch(self) -> None:
        """Refresh `updated`, never moving it before `created`."""
        self.updated = max(utcnow(), self.created)

    def require_infographic(self) -> Infographic:
        if self.infographic is None:
            raise NotFoundError(f"Notebook {self.id} has no infographic", hint="Generate one first")
        return self.infographic


class NotebookDraft(BaseModel):
    """What a caller supplies to create a notebook; the store fills in the rest."""

    name: str


class SourceDraft(BaseModel):
    type: SourceType = SourceType.TEXT
    content: str
    metadata: dict[str, str] = Field(default_factory=dict)
