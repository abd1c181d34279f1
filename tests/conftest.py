"""Shared test fixtures for infograph tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from infograph.notebook.manager import NotebookManager
from infograph.notebook.models import Notebook, SourceDraft, SourceType
from infograph.notebook.store import JsonRecordStore, MemoryRecordStore, RecordStore
from infograph.sources.collection import SourceCollection

FOX = "The quick brown fox jumps over the lazy dog near the old bridge."


def fixed_measure(text: str) -> float:
    """10 units per character: 62 characters fit the 620-unit card text width."""
    return len(text) * 10.0


def text_draft(content: str = FOX) -> SourceDraft:
    return SourceDraft(type=SourceType.TEXT, content=content)


class YieldingStore(MemoryRecordStore):
    """Memory store that yields to the event loop on every call, like real I/O."""

    async def get(self, notebook_id: str) -> Notebook:
        await asyncio.sleep(0)
        return await super().get(notebook_id)

    async def update(self, notebook: Notebook) -> Notebook:
        await asyncio.sleep(0)
        return await super().update(notebook)


@pytest.fixture(params=["memory", "json"])
async def store(request: pytest.FixtureRequest, tmp_path: Path) -> RecordStore:
    s: RecordStore = MemoryRecordStore() if request.param == "memory" else JsonRecordStore(tmp_path / "notebooks")
    await s.init()
    return s


@pytest.fixture
def manager(store: RecordStore) -> NotebookManager:
    return NotebookManager(store)


@pytest.fixture
def collection(manager: NotebookManager) -> SourceCollection:
    return SourceCollection(manager)
