"""Typed source intake: text, YouTube transcripts and web pages."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from infograph.core import FetchError, Severity, ValidationError
from infograph.notebook.models import Notebook, SourceDraft, SourceType
from infograph.sources.collection import SourceCollection
from infograph.sources.fetchers import ContentFetcher

logger = logging.getLogger("infograph.ingest")

_YOUTUBE_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([A-Za-z0-9_-]{11})"),
    re.compile(r"^([A-Za-z0-9_-]{11})$"),
)


def extract_youtube_id(url: str) -> str | None:
    """Return the 11-character video id from a YouTube URL or bare id, else None."""
    url = url.strip()
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class SourceIngestor:
    def __init__(
        self,
        collection: SourceCollection,
        transcript_fetcher: ContentFetcher,
        page_fetcher: ContentFetcher,
    ) -> None:
        self._collection = collection
        self._transcripts = transcript_fetcher
        self._pages = page_fetcher

    async def add_text(self, notebook_id: str, text: str) -> Notebook:
        text = text.strip()
        if not text:
            raise ValidationError("Please enter some text")
        return await self._collection.add_source(notebook_id, SourceDraft(type=SourceType.TEXT, content=text))

    async def add_youtube(self, notebook_id: str, url: str) -> Notebook:
        url = url.strip()
        if not url:
            raise ValidationError("Please enter a YouTube URL")
        video_id = extract_youtube_id(url)
        if video_id is None:
            raise ValidationError(f"Invalid YouTube URL: {url}")

        # missing notebooks are rejected before fetching
        await self._collection.ensure_notebook(notebook_id)
        transcript = await self._fetch(self._transcripts, video_id)
        return await self._collection.add_source(
            notebook_id,
            SourceDraft(type=SourceType.YOUTUBE, content=transcript, metadata={"videoId": video_id, "url": url}),
        )

    async def add_url(self, notebook_id: str, url: str) -> Notebook:
        url = url.strip()
        if not url:
            raise ValidationError("Please enter a URL")
        if not is_valid_url(url):
            raise ValidationError(f"Invalid URL: {url}", hint="Use an absolute http(s) URL")

        await self._collection.ensure_notebook(notebook_id)
        content = await self._fetch(self._pages, url)
        return await self._collection.add_source(
            notebook_id,
            SourceDraft(type=SourceType.URL, content=content, metadata={"url": url}),
        )

    async def _fetch(self, fetcher: ContentFetcher, descriptor: str) -> str:
        result = await fetcher.fetch(descriptor)
        for d in result.diagnostics:
            if d.severity == Severity.WARNING:
                logger.warning("Fetched %s with %s: %s", descriptor, d.code, d.message)
        if not result.ok or not result.data:
            diag = result.first_error()
            message = diag.message if diag else "fetch returned no content"
            raise FetchError(message, hint=diag.hint if diag else None)
        return result.data
