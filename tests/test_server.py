"""Tests for the HTTP API."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from infograph import server
from infograph.core import Result
from infograph.notebook.models import NotebookDraft
from infograph.notebook.store import JsonRecordStore, MemoryRecordStore
from infograph.server import app
from infograph.workspace import Workspace

from .conftest import FOX


@pytest.fixture
def workspace(monkeypatch: pytest.MonkeyPatch) -> Workspace:
    """Provide an in-memory Workspace on app.state."""
    pages = AsyncMock()
    pages.fetch.return_value = Result(data="Article text that is long enough to be a statement.")
    ws = Workspace(MemoryRecordStore(), page_fetcher=pages)
    monkeypatch.setattr(app.state, "workspace", ws, raising=False)
    return ws


@pytest.fixture
async def client(workspace: Workspace) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _create(client: AsyncClient, name: str | None = "Trip") -> dict[str, Any]:
    resp = await client.post("/api/notebooks", json={"name": name})
    assert resp.status_code == 201
    return resp.json()


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "store": "MemoryRecordStore"}


async def test_create_and_get(client: AsyncClient) -> None:
    nb = await _create(client)
    assert nb["name"] == "Trip"
    assert nb["sources"] == []
    assert nb["infographic"] is None

    resp = await client.get(f"/api/notebooks/{nb['id']}")
    assert resp.status_code == 200
    assert resp.json() == nb


async def test_create_default_name(client: AsyncClient) -> None:
    nb = await _create(client, None)
    assert nb["name"].startswith("Notebook ")


async def test_get_missing(client: AsyncClient) -> None:
    resp = await client.get("/api/notebooks/nb_nonexistent")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


async def test_list_summaries(client: AsyncClient) -> None:
    a = await _create(client, "A")
    b = await _create(client, "B")
    await client.post(f"/api/notebooks/{a['id']}/sources", json={"type": "text", "content": FOX})

    resp = await client.get("/api/notebooks")
    assert resp.status_code == 200
    summaries = resp.json()
    assert [s["id"] for s in summaries] == [a["id"], b["id"]]
    assert summaries[0]["source_count"] == 1
    assert summaries[0]["has_infographic"] is False


async def test_rename(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.patch(f"/api/notebooks/{nb['id']}", json={"name": "Holiday"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Holiday"

    resp = await client.patch(f"/api/notebooks/{nb['id']}", json={"name": "  "})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION"


async def test_delete(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.delete(f"/api/notebooks/{nb['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert (await client.delete(f"/api/notebooks/{nb['id']}")).status_code == 404


async def test_add_and_remove_sources(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.post(f"/api/notebooks/{nb['id']}/sources", json={"type": "text", "content": FOX})
    assert resp.status_code == 201
    resp = await client.post(
        f"/api/notebooks/{nb['id']}/sources", json={"type": "url", "url": "https://example.com/article"}
    )
    assert resp.status_code == 201
    sources = resp.json()["sources"]
    assert [s["type"] for s in sources] == ["text", "url"]
    assert sources[1]["metadata"] == {"url": "https://example.com/article"}

    resp = await client.delete(f"/api/notebooks/{nb['id']}/sources/{sources[0]['id']}")
    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()["sources"]] == [sources[1]["id"]]

    # removing again is a no-op
    resp = await client.delete(f"/api/notebooks/{nb['id']}/sources/{sources[0]['id']}")
    assert resp.status_code == 200
    assert len(resp.json()["sources"]) == 1


async def test_add_youtube_source(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.post(
        f"/api/notebooks/{nb['id']}/sources",
        json={"type": "youtube", "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
    )
    assert resp.status_code == 201
    source = resp.json()["sources"][0]
    assert source["type"] == "youtube"
    assert source["metadata"]["videoId"] == "dQw4w9WgXcQ"


async def test_add_blank_source(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.post(f"/api/notebooks/{nb['id']}/sources", json={"type": "text", "content": " "})
    assert resp.status_code == 400


async def test_add_source_fetch_failure(client: AsyncClient, workspace: Workspace) -> None:
    failed: Result[str] = Result()
    failed.error("FETCH_ERROR", "could not fetch content")
    workspace.ingest._pages.fetch.return_value = failed  # type: ignore[attr-defined]

    nb = await _create(client)
    resp = await client.post(f"/api/notebooks/{nb['id']}/sources", json={"type": "url", "url": "https://example.com"})
    assert resp.status_code == 502
    assert resp.json()["error"]["message"] == "could not fetch content"


async def test_generate_and_download(client: AsyncClient) -> None:
    nb = await _create(client)
    await client.post(f"/api/notebooks/{nb['id']}/sources", json={"type": "text", "content": FOX})

    resp = await client.post(f"/api/notebooks/{nb['id']}/infographic")
    assert resp.status_code == 200
    assert resp.json()["data"].startswith("data:image/png;base64,")

    resp = await client.get(f"/api/notebooks/{nb['id']}/infographic.png")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content.startswith(b"\x89PNG")
    assert 'filename="infographic-Trip.png"' in resp.headers["content-disposition"]


async def test_generate_without_sources(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.post(f"/api/notebooks/{nb['id']}/infographic")
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "NO_SOURCES"


async def test_download_without_infographic(client: AsyncClient) -> None:
    nb = await _create(client)
    resp = await client.get(f"/api/notebooks/{nb['id']}/infographic.png")
    assert resp.status_code == 404


async def test_concurrent_first_requests_share_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INFOGRAPH_HOME", str(tmp_path))
    monkeypatch.setattr(app.state, "workspace", None, raising=False)
    monkeypatch.setattr(server, "_workspace_lock", asyncio.Lock())
    store = JsonRecordStore(tmp_path / "notebooks")
    await store.init()
    nb = await store.create(NotebookDraft(name="Trip"))

    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        responses = await asyncio.gather(
            *(
                c.post(f"/api/notebooks/{nb.id}/sources", json={"type": "text", "content": f"Source number {i}"})
                for i in range(6)
            )
        )

    assert [r.status_code for r in responses] == [201] * 6
    saved = await store.get(nb.id)
    assert sorted(s.content for s in saved.sources) == [f"Source number {i}" for i in range(6)]
