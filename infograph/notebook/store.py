"""Record stores for notebooks.

`JsonRecordStore` keeps one JSON file per notebook under a directory
(~/.infograph/notebooks/{id}.json by default). `MemoryRecordStore` keeps
records in a dict and is what the tests and `storage.backend = "memory"` use.

Both hand out copies: a Notebook returned by a store is detached from stored
state until it is passed back through `update`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as ModelValidationError

from infograph.core import NotFoundError, StorageError
from infograph.notebook.models import Notebook, NotebookDraft, generate_notebook_id, utcnow

logger = logging.getLogger("infograph.store")


class RecordStore(Protocol):
    async def init(self) -> None: ...

    async def create(self, draft: NotebookDraft) -> Notebook: ...

    async def get(self, notebook_id: str) -> Notebook: ...

    async def get_all(self) -> list[Notebook]: ...

    async def update(self, notebook: Notebook) -> Notebook: ...

    async def delete(self, notebook_id: str) -> None: ...


def _new_notebook(notebook_id: str, draft: NotebookDraft) -> Notebook:
    now = utcnow()
    return Notebook(id=notebook_id, name=draft.name, created=now, updated=now)


class MemoryRecordStore:
    """In-process store; nothing survives the process."""

    def __init__(self) -> None:
        self._records: dict[str, Notebook] = {}
        self._issued: set[str] = set()

    async def init(self) -> None:
        return None

    async def create(self, draft: NotebookDraft) -> Notebook:
        notebook_id = generate_notebook_id()
        while notebook_id in self._issued:
            notebook_id = generate_notebook_id()
        self._issued.add(notebook_id)
        nb = _new_notebook(notebook_id, draft)
        self._records[nb.id] = nb.model_copy(deep=True)
        return nb

    async def get(self, notebook_id: str) -> Notebook:
        try:
            return self._records[notebook_id].model_copy(deep=True)
        except KeyError:
            raise NotFoundError(f"Notebook {notebook_id} not found") from None

    async def get_all(self) -> list[Notebook]:
        return [nb.model_copy(deep=True) for nb in self._records.values()]

    async def update(self, notebook: Notebook) -> Notebook:
        if notebook.id not in self._records:
            raise NotFoundError(f"Notebook {notebook.id} not found")
        nb = notebook.model_copy(deep=True)
        nb.touch()
        self._records[nb.id] = nb.model_copy(deep=True)
        return nb

    async def delete(self, notebook_id: str) -> None:
        if self._records.pop(notebook_id, None) is None:
            raise NotFoundError(f"Notebook {notebook_id} not found")


class JsonRecordStore:
    """Stores each notebook as a JSON document, written atomically."""

    def __init__(self, notebooks_dir: Path) -> None:
        self._notebooks_dir = notebooks_dir
        self._issued: set[str] = set()

    def _path(self, notebook_id: str) -> Path:
        return self._notebooks_dir / f"{notebook_id}.json"

    async def init(self) -> None:
        try:
            await asyncio.to_thread(self._notebooks_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to open notebook store at {self._notebooks_dir}: {e}") from e
        logger.info("Notebook store ready at %s", self._notebooks_dir)

    async def create(self, draft: NotebookDraft) -> Notebook:
        notebook_id = generate_notebook_id()
        while notebook_id in self._issued or self._path(notebook_id).exists():
            notebook_id = generate_notebook_id()
        self._issued.add(notebook_id)
        nb = _new_notebook(notebook_id, draft)
        await asyncio.to_thread(self._write, nb)
        logger.info("Created notebook %s (%r)", nb.id, nb.name)
        return nb

    async def get(self, notebook_id: str) -> Notebook:
        return await asyncio.to_thread(self._read, self._path(notebook_id), notebook_id)

    async def get_all(self) -> list[Notebook]:
        return await asyncio.to_thread(self._read_all)

    async def update(self, notebook: Notebook) -> Notebook:
        if not self._path(notebook.id).exists():
            raise NotFoundError(f"Notebook {notebook.id} not found")
        nb = notebook.model_copy(deep=True)
        nb.touch()
        await asyncio.to_thread(self._write, nb)
        logger.info("Saved notebook %s (%d sources)", nb.id, len(nb.sources))
        return nb

    async def delete(self, notebook_id: str) -> None:
        path = self._path(notebook_id)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            raise NotFoundError(f"Notebook {notebook_id} not found") from None
        except OSError as e:
            raise StorageError(f"Failed to delete notebook {notebook_id}: {e}") from e
        logger.info("Deleted notebook %s", notebook_id)

    def _write(self, nb: Notebook) -> None:
        """Atomic write: write to .tmp, then rename over the record."""
        path = self._path(nb.id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(nb.model_dump_json(indent=2) + "\n")
            tmp_path.replace(path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write notebook {nb.id}: {e}") from e

    def _read(self, path: Path, notebook_id: str) -> Notebook:
        try:
            text = path.read_text()
        except FileNotFoundError:
            raise NotFoundError(f"Notebook {notebook_id} not found") from None
        except OSError as e:
            raise StorageError(f"Failed to read notebook {notebook_id}: {e}") from e
        try:
            return Notebook.model_validate_json(text)
        except ModelValidationError as e:
            raise StorageError(f"Notebook {notebook_id} is corrupt: {e}") from e

    def _read_all(self) -> list[Notebook]:
        notebooks: list[Notebook] = []
        try:
            paths = sorted(self._notebooks_dir.glob("nb_*.json"))
        except OSError as e:
            raise StorageError(f"Failed to list notebooks: {e}") from e
        for path in paths:
            try:
                data = json.loads(path.read_text())
                notebooks.append(Notebook.model_validate(data))
            except FileNotFoundError:
                # deleted between glob and read
                continue
            except (json.JSONDecodeError, ModelValidationError):
                logger.warning("Skipping corrupt notebook: %s", path)
            except OSError as e:
                raise StorageError(f"Failed to read {path.name}: {e}") from e
        return notebooks
