"""Wires the store, manager, sources and generator together from config.

Callers construct one Workspace at startup and pass it where it is needed.
"""

from __future__ import annotations

from infograph.config import InfographConfig, notebooks_dir
from infograph.infographic.generator import InfographicGenerator
from infograph.notebook.manager import NotebookManager
from infograph.notebook.models import Notebook
from infograph.notebook.store import JsonRecordStore, MemoryRecordStore, RecordStore
from infograph.sources.collection import SourceCollection
from infograph.sources.fetchers import (
    ContentFetcher,
    HttpPageFetcher,
    HttpTranscriptFetcher,
    PlaceholderPageFetcher,
    PlaceholderTranscriptFetcher,
)
from infograph.sources.ingest import SourceIngestor


class Workspace:
    def __init__(
        self,
        store: RecordStore,
        *,
        transcript_fetcher: ContentFetcher | None = None,
        page_fetcher: ContentFetcher | None = None,
        generator: InfographicGenerator | None = None,
    ) -> None:
        self.store = store
        self.notebooks = NotebookManager(store)
        self.sources = SourceCollection(self.notebooks)
        self.ingest = SourceIngestor(
            self.sources,
            transcript_fetcher or PlaceholderTranscriptFetcher(),
            page_fetcher or PlaceholderPageFetcher(),
        )
        self.generator = generator or InfographicGenerator()

    async def generate_infographic(self, notebook_id: str) -> Notebook:
        return await self.generator.generate_for_notebook(self.notebooks, notebook_id)


def build_store(config: InfographConfig) -> RecordStore:
    if config.storage.backend == "memory":
        return MemoryRecordStore()
    return JsonRecordStore(notebooks_dir(config))


async def open_workspace(config: InfographConfig) -> Workspace:
    """Build a Workspace from config and initialise its store."""
    store = build_store(config)
    await store.init()
    transcripts: ContentFetcher = (
        HttpTranscriptFetcher(config.fetch) if config.fetch.transcript_url_template else PlaceholderTranscriptFetcher()
    )
    pages: ContentFetcher = HttpPageFetcher(config.fetch) if config.fetch.fetch_pages else PlaceholderPageFetcher()
    return Workspace(
        store,
        transcript_fetcher=transcripts,
        page_fetcher=pages,
        generator=InfographicGenerator(config.render),
    )
