"""Notebook lifecycle on top of a RecordStore.

The store replaces whole records, so two interleaved get→change→update
cycles on one notebook would lose one of the changes. Every mutation goes
through `NotebookManager.mutate`, which holds a per-notebook lock for the
whole cycle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import date

from infograph.core import ValidationError
from infograph.notebook.models import Infographic, Notebook, NotebookDraft, format_date, utcnow
from infograph.notebook.store import RecordStore

logger = logging.getLogger("infograph.manager")


def default_notebook_name(today: date | None = None) -> str:
    return f"Notebook {format_date(today or date.today())}"


class NotebookLocks:
    """One asyncio.Lock per notebook id."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def hold(self, notebook_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(notebook_id, asyncio.Lock())
        async with lock:
            yield

    def discard(self, notebook_id: str) -> None:
        lock = self._locks.get(notebook_id)
        if lock is not None and not lock.locked():
            del self._locks[notebook_id]


class NotebookManager:
    def __init__(self, store: RecordStore, locks: NotebookLocks | None = None) -> None:
        self.store = store
        self._locks = locks or NotebookLocks()

    async def create_notebook(self, name: str | None = None) -> Notebook:
        """Create an empty notebook; a blank name gets a date-based default."""
        name = (name or "").strip() or default_notebook_name()
        return await self.store.create(NotebookDraft(name=name))

    async def get_notebook(self, notebook_id: str) -> Notebook:
        return await self.store.get(notebook_id)

    async def list_notebooks(self) -> list[Notebook]:
        """All notebooks, most recently updated first."""
        notebooks = await self.store.get_all()
        return sorted(notebooks, key=lambda nb: nb.updated, reverse=True)

    async def mutate(self, notebook_id: str, change: Callable[[Notebook], None]) -> Notebook:
        """Serialized read-modify-write of one notebook record."""
        async with self._locks.hold(notebook_id):
            nb = await self.store.get(notebook_id)
            change(nb)
            nb.touch()
            return await self.store.update(nb)

    async def update_notebook(self, notebook: Notebook) -> Notebook:
        """Replace a whole record, keeping its immutable id and creation time."""

        def _replace(nb: Notebook) -> None:
            nb.name = notebook.name
            nb.sources = [s.model_copy(deep=True) for s in notebook.sources]
            nb.infographic = notebook.infographic.model_copy() if notebook.infographic else None

        if not notebook.name.strip():
            raise ValidationError("Notebook name must not be empty")
        return await self.mutate(notebook.id, _replace)

    async def rename_notebook(self, notebook_id: str, name: str) -> Notebook:
        name = name.strip()
        if not name:
            raise ValidationError("Notebook name must not be empty")

        def _rename(nb: Notebook) -> None:
            nb.name = name

        return await self.mutate(notebook_id, _rename)

    async def save_infographic(self, notebook_id: str, data: str) -> Notebook:
        """Attach a freshly generated infographic, replacing any previous one."""

        def _attach(nb: Notebook) -> None:
            nb.infographic = Infographic(data=data, generated=utcnow())

        nb = await self.mutate(notebook_id, _attach)
        logger.info("Saved infographic for notebook %s", notebook_id)
        return nb

    async def delete_notebook(self, notebook_id: str) -> None:
        """Delete a notebook with its sources and infographic."""
        async with self._locks.hold(notebook_id):
            await self.store.delete(notebook_id)
        self._locks.discard(notebook_id)
