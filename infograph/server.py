"""FastAPI server for infograph."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from infograph.config import load_config
from infograph.core import (
    FetchError,
    InfographError,
    NoSourcesError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from infograph.infographic.render import decode_data_url
from infograph.notebook.models import Notebook
from infograph.workspace import Workspace, open_workspace

logger = logging.getLogger("infograph.server")

_workspace_lock = asyncio.Lock()


async def _get_workspace() -> Workspace:
    """The workspace set on app.state, opened from config on first use.

    Opening is serialized so concurrent first requests share one Workspace,
    and with it one set of notebook locks.
    """
    workspace: Workspace | None = getattr(app.state, "workspace", None)
    if workspace is not None:
        return workspace
    async with _workspace_lock:
        workspace = getattr(app.state, "workspace", None)
        if workspace is None:
            workspace = await open_workspace(load_config())
            app.state.workspace = workspace
    return workspace


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    workspace = await _get_workspace()
    logger.info("Serving %s", type(workspace.store).__name__)
    yield


app = FastAPI(title="infograph", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS: dict[type[InfographError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    NoSourcesError: 409,
    FetchError: 502,
    StorageError: 500,
}


@app.exception_handler(InfographError)
async def _infograph_error(request: Request, exc: InfographError) -> JSONResponse:
    status = _STATUS.get(type(exc), 500)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content={"error": exc.to_diag().model_dump(exclude_none=True)})


def _summary(nb: Notebook) -> dict[str, Any]:
    return {
        "id": nb.id,
        "name": nb.name,
        "created": nb.created.isoformat(),
        "updated": nb.updated.isoformat(),
        "source_count": len(nb.sources),
        "has_infographic": nb.infographic is not None,
    }


@app.get("/api/health")
async def health() -> dict[str, Any]:
    workspace = await _get_workspace()
    return {"ok": True, "store": type(workspace.store).__name__}


class CreateNotebookRequest(BaseModel):
    name: str | None = None


class RenameNotebookRequest(BaseModel):
    name: str


class AddSourceRequest(BaseModel):
    type: Literal["text", "youtube", "url"] = "text"
    content: str = ""
    url: str = ""


@app.get("/api/notebooks")
async def list_notebooks() -> list[dict[str, Any]]:
    workspace = await _get_workspace()
    return [_summary(nb) for nb in await workspace.notebooks.list_notebooks()]


@app.post("/api/notebooks", status_code=201)
async def create_notebook(request: CreateNotebookRequest) -> dict[str, Any]:
    workspace = await _get_workspace()
    nb = await workspace.notebooks.create_notebook(request.name)
    return nb.model_dump(mode="json")


@app.get("/api/notebooks/{notebook_id}")
async def get_notebook(notebook_id: str) -> dict[str, Any]:
    workspace = await _get_workspace()
    nb = await workspace.notebooks.get_notebook(notebook_id)
    return nb.model_dump(mode="json")


@app.patch("/api/notebooks/{notebook_id}")
async def rename_notebook(notebook_id: str, request: RenameNotebookRequest) -> dict[str, Any]:
    workspace = await _get_workspace()
    nb = await workspace.notebooks.rename_notebook(notebook_id, request.name)
    return _summary(nb)


@app.delete("/api/notebooks/{notebook_id}")
async def delete_notebook(notebook_id: str) -> dict[str, Any]:
    workspace = await _get_workspace()
    await workspace.notebooks.delete_notebook(notebook_id)
    return {"ok": True}


@app.post("/api/notebooks/{notebook_id}/sources", status_code=201)
async def add_source(notebook_id: str, request: AddSourceRequest) -> dict[str, Any]:
    logger.info("POST /api/notebooks/%s/sources type=%s", notebook_id, request.type)
    workspace = await _get_workspace()
    if request.type == "youtube":
        nb = await workspace.ingest.add_youtube(notebook_id, request.url or request.content)
    elif request.type == "url":
        nb = await workspace.ingest.add_url(notebook_id, request.url or request.content)
    else:
        nb = await workspace.ingest.add_text(notebook_id, request.content)
    return nb.model_dump(mode="json")


@app.delete("/api/notebooks/{notebook_id}/sources/{source_id}")
async def remove_source(notebook_id: str, source_id: str) -> dict[str, Any]:
    workspace = await _get_workspace()
    nb = await workspace.sources.remove_source(notebook_id, source_id)
    return nb.model_dump(mode="json")


@app.post("/api/notebooks/{notebook_id}/infographic")
async def generate_infographic(notebook_id: str) -> dict[str, Any]:
    logger.info("POST /api/notebooks/%s/infographic", notebook_id)
    workspace = await _get_workspace()
    nb = await workspace.generate_infographic(notebook_id)
    return nb.require_infographic().model_dump(mode="json")


@app.get("/api/notebooks/{notebook_id}/infographic.png")
async def download_infographic(notebook_id: str) -> Response:
    workspace = await _get_workspace()
    nb = await workspace.notebooks.get_notebook(notebook_id)
    infographic = nb.require_infographic()
    filename = "infographic-" + re.sub(r"[^A-Za-z0-9_-]+", "-", nb.name).strip("-") + ".png"
    return Response(
        content=decode_data_url(infographic.data),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
