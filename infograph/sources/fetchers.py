"""Content fetchers for non-text sources.

A fetcher turns a descriptor (a video id, a page URL) into plain text. It
never raises for a failed fetch: it returns a Result carrying a FETCH_ERROR
diagnostic, and the caller decides what to do with it.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from bs4 import BeautifulSoup

from infograph.config import FetchConfig
from infograph.core import Result

logger = logging.getLogger("infograph.fetchers")

TRANSCRIPT_FAILURE = "could not fetch transcript"
CONTENT_FAILURE = "could not fetch content"

_STRIP_TAGS = ("script", "style", "noscript", "nav", "header", "footer", "aside", "form", "svg")


class ContentFetcher(Protocol):
    async def fetch(self, descriptor: str) -> Result[str]: ...


def html_to_text(html: str) -> str:
    """Extract readable text from an HTML page, dropping scripts, styles and navigation."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_STRIP_TAGS):
        tag.decompose()
    root = soup.find("main") or soup.find("article") or soup.body or soup
    lines = [" ".join(fragment.split()) for fragment in root.stripped_strings]
    return "\n".join(lines)


class _HttpFetcher:
    def __init__(self, config: FetchConfig | None = None, client: httpx.AsyncClient | None = None) -> None:
        self._config = config or FetchConfig()
        self._client = client

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url)
        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            headers={"User-Agent": self._config.user_agent},
            follow_redirects=True,
        ) as client:
            return await client.get(url)


class HttpPageFetcher(_HttpFetcher):
    """Downloads a page and reduces it to its text."""

    async def fetch(self, descriptor: str) -> Result[str]:
        result: Result[str] = Result()
        try:
            response = await self._get(descriptor)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Page fetch failed for %s: %s", descriptor, e)
            result.error("FETCH_ERROR", CONTENT_FAILURE, hint=str(e))
            return result

        content_type = response.headers.get("content-type", "")
        if "html" in content_type or not content_type:
            text = html_to_text(response.text)
        else:
            text = response.text.strip()
            if not content_type.startswith("text/"):
                result.warning("NOT_TEXT", f"{descriptor} served {content_type}", hint="Stored the raw body as text")
        if not text:
            result.error("FETCH_ERROR", CONTENT_FAILURE, hint="Page has no readable text")
            return result
        result.data = text
        return result


class HttpTranscriptFetcher(_HttpFetcher):
    """Fetches plain-text transcripts from a service addressed by `transcript_url_template`."""

    async def fetch(self, descriptor: str) -> Result[str]:
        result: Result[str] = Result()
        template = self._config.transcript_url_template
        if not template:
            result.error("FETCH_ERROR", TRANSCRIPT_FAILURE, hint="No transcript service configured")
            return result
        try:
            response = await self._get(template.format(video_id=descriptor))
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Transcript fetch failed for %s: %s", descriptor, e)
            result.error("FETCH_ERROR", TRANSCRIPT_FAILURE, hint=str(e))
            return result

        text = response.text.strip()
        if not text:
            result.error("FETCH_ERROR", TRANSCRIPT_FAILURE, hint="Empty transcript")
            return result
        result.data = text
        return result


class PlaceholderTranscriptFetcher:
    """Simulated transcript, for running without a transcript service."""

    async def fetch(self, descriptor: str) -> Result[str]:
        return Result(
            data=(
                f"[Placeholder transcript for video {descriptor}]\n\n"
                "This is a simulated transcript standing in for the spoken content of the video. "
                "Configure a transcript service to fetch the real transcript for this video. "
                "The transcript text is stored as a source and used to generate an infographic with key points."
            )
        )


class PlaceholderPageFetcher:
    """Simulated page content, for running offline."""

    async def fetch(self, descriptor: str) -> Result[str]:
        return Result(
            data=(
                f"[Placeholder content from {descriptor}]\n\n"
                "This is simulated content standing in for the text of the web page. "
                "Enable page fetching to download the page and extract its main text. "
                "The extracted content is stored as a source and used for infographic generation."
            )
        )
