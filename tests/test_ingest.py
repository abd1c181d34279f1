"""Tests for typed source intake."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from infograph.core import FetchError, NotFoundError, Result, ValidationError
from infograph.notebook.manager import NotebookManager
from infograph.notebook.models import SourceType
from infograph.notebook.store import MemoryRecordStore
from infograph.sources.collection import SourceCollection
from infograph.sources.fetchers import TRANSCRIPT_FAILURE
from infograph.sources.ingest import SourceIngestor, extract_youtube_id, is_valid_url


def _fetcher(text: str | None = "Fetched text for the source.") -> AsyncMock:
    fetcher = AsyncMock()
    result: Result[str] = Result(data=text)
    if text is None:
        result.error("FETCH_ERROR", TRANSCRIPT_FAILURE)
    fetcher.fetch.return_value = result
    return fetcher


@pytest.fixture
def nbm() -> NotebookManager:
    return NotebookManager(MemoryRecordStore())


def _ingestor(
    manager: NotebookManager, transcripts: AsyncMock | None = None, pages: AsyncMock | None = None
) -> SourceIngestor:
    return SourceIngestor(SourceCollection(manager), transcripts or _fetcher(), pages or _fetcher())


async def _notebook_id(manager: NotebookManager) -> str:
    nb = await manager.create_notebook("Trip")
    return nb.id


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ&t=42", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://example.com/watch?v=dQw4w9WgXcQ", None),
        ("not a video", None),
    ],
)
def test_extract_youtube_id(url: str, expected: str | None) -> None:
    assert extract_youtube_id(url) == expected


@pytest.mark.parametrize(
    ("url", "valid"),
    [
        ("https://example.com/article", True),
        ("http://localhost:8000/page", True),
        ("example.com", False),
        ("ftp://example.com/file", False),
        ("https://", False),
    ],
)
def test_is_valid_url(url: str, valid: bool) -> None:
    assert is_valid_url(url) is valid


async def test_add_text_strips(nbm: NotebookManager) -> None:
    ingestor = _ingestor(nbm)
    nb_id = await _notebook_id(nbm)
    nb = await ingestor.add_text(nb_id, "  Some notes about the trip.  ")
    assert nb.sources[0].type == SourceType.TEXT
    assert nb.sources[0].content == "Some notes about the trip."


async def test_add_text_blank(nbm: NotebookManager) -> None:
    ingestor = _ingestor(nbm)
    nb_id = await _notebook_id(nbm)
    with pytest.raises(ValidationError):
        await ingestor.add_text(nb_id, "   ")


async def test_add_youtube(nbm: NotebookManager) -> None:
    transcripts = _fetcher("Transcript of the video.")
    ingestor = _ingestor(nbm, transcripts=transcripts)
    nb_id = await _notebook_id(nbm)

    nb = await ingestor.add_youtube(nb_id, "https://youtu.be/dQw4w9WgXcQ")

    transcripts.fetch.assert_awaited_once_with("dQw4w9WgXcQ")
    source = nb.sources[0]
    assert source.type == SourceType.YOUTUBE
    assert source.content == "Transcript of the video."
    assert source.metadata == {"videoId": "dQw4w9WgXcQ", "url": "https://youtu.be/dQw4w9WgXcQ"}


async def test_add_youtube_invalid_url_not_fetched(nbm: NotebookManager) -> None:
    transcripts = _fetcher()
    ingestor = _ingestor(nbm, transcripts=transcripts)
    nb_id = await _notebook_id(nbm)
    with pytest.raises(ValidationError):
        await ingestor.add_youtube(nb_id, "https://example.com/video")
    transcripts.fetch.assert_not_called()


async def test_add_youtube_fetch_failure(nbm: NotebookManager) -> None:
    ingestor = _ingestor(nbm, transcripts=_fetcher(None))
    nb_id = await _notebook_id(nbm)
    with pytest.raises(FetchError, match="could not fetch transcript"):
        await ingestor.add_youtube(nb_id, "dQw4w9WgXcQ")
    nb = await nbm.get_notebook(nb_id)
    assert nb.sources == []


async def test_add_youtube_missing_notebook_not_fetched(nbm: NotebookManager) -> None:
    transcripts = _fetcher()
    ingestor = _ingestor(nbm, transcripts=transcripts)
    with pytest.raises(NotFoundError):
        await ingestor.add_youtube("nb_nonexistent", "dQw4w9WgXcQ")
    transcripts.fetch.assert_not_called()


async def test_add_url(nbm: NotebookManager) -> None:
    pages = _fetcher("Main article text.")
    ingestor = _ingestor(nbm, pages=pages)
    nb_id = await _notebook_id(nbm)

    nb = await ingestor.add_url(nb_id, " https://example.com/article ")

    pages.fetch.assert_awaited_once_with("https://example.com/article")
    assert nb.sources[0].type == SourceType.URL
    assert nb.sources[0].metadata == {"url": "https://example.com/article"}


async def test_add_url_logs_fetch_warnings(nbm: NotebookManager, caplog: pytest.LogCaptureFixture) -> None:
    pages = _fetcher('{"summary": "Trip notes"}')
    pages.fetch.return_value.warning("NOT_TEXT", "https://example.com/data served application/json")
    ingestor = _ingestor(nbm, pages=pages)
    nb_id = await _notebook_id(nbm)

    with caplog.at_level(logging.WARNING, logger="infograph.ingest"):
        nb = await ingestor.add_url(nb_id, "https://example.com/data")

    assert len(nb.sources) == 1
    assert "NOT_TEXT" in caplog.text


@pytest.mark.parametrize("url", ["", "example.com/article"])
async def test_add_url_invalid(nbm: NotebookManager, url: str) -> None:
    pages = _fetcher()
    ingestor = _ingestor(nbm, pages=pages)
    nb_id = await _notebook_id(nbm)
    with pytest.raises(ValidationError):
        await ingestor.add_url(nb_id, url)
    pages.fetch.assert_not_called()
