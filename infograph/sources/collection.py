"""Ordered sources within a notebook."""

from __future__ import annotations

import logging

from infograph.core import NotFoundError, ValidationError
from infograph.notebook.manager import NotebookManager
from infograph.notebook.models import Notebook, Source, SourceDraft

logger = logging.getLogger("infograph.sources")


class SourceCollection:
    def __init__(self, manager: NotebookManager) -> None:
        self._manager = manager

    async def add_source(self, notebook_id: str, draft: SourceDraft) -> Notebook:
        """Append a source to the end of the notebook and persist."""
        if not draft.content.strip():
            raise ValidationError("Source content must not be empty")
        source = Source(type=draft.type, content=draft.content, metadata=dict(draft.metadata))

        def _append(nb: Notebook) -> None:
            nb.sources.append(source)

        nb = await self._manager.mutate(notebook_id, _append)
        logger.info("Added %s source %s to notebook %s", source.type, source.id, notebook_id)
        return nb

    async def remove_source(self, notebook_id: str, source_id: str) -> Notebook:
        """Remove a source by id. Unknown source ids leave the sources untouched."""

        def _remove(nb: Notebook) -> None:
            remaining = [s for s in nb.sources if s.id != source_id]
            if len(remaining) == len(nb.sources):
                logger.info("Source %s not in notebook %s; nothing removed", source_id, notebook_id)
            nb.sources = remaining

        return await self._manager.mutate(notebook_id, _remove)

    async def ensure_notebook(self, notebook_id: str) -> None:
        """Raise NotFoundError unless the notebook exists."""
        await self._manager.get_notebook(notebook_id)

    async def get_source(self, notebook_id: str, source_id: str) -> Source:
        nb = await self._manager.get_notebook(notebook_id)
        for source in nb.sources:
            if source.id == source_id:
                return source
        raise NotFoundError(f"Source {source_id} not found in notebook {notebook_id}")
