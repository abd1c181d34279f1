"""Infographic generation: aggregated text → statements → layout → PNG data URL.

`generate` is pure given the text and the date (the date only shows in the
footer). `generate_for_notebook` wraps it with the read, the no-sources
check and the write-back.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from infograph.aggregator import aggregate
from infograph.config import RenderConfig
from infograph.infographic.extract import extract_statements
from infograph.infographic.layout import Layout, build_layout
from infograph.infographic.render import Fonts, encode_data_url, render_png
from infograph.notebook.manager import NotebookManager
from infograph.notebook.models import Notebook

logger = logging.getLogger("infograph.generator")


class InfographicGenerator:
    def __init__(self, config: RenderConfig | None = None) -> None:
        self._config = config or RenderConfig()
        self._fonts: Fonts | None = None

    @property
    def fonts(self) -> Fonts:
        if self._fonts is None:
            self._fonts = Fonts(self._config)
        return self._fonts

    def layout(self, text: str, today: date | None = None) -> Layout:
        statements = extract_statements(text)
        return build_layout(statements, today or date.today(), self.fonts.measure)

    def generate(self, text: str, today: date | None = None) -> str:
        """Render `text` into an infographic and return it as a PNG data URL."""
        layout = self.layout(text, today)
        png = render_png(layout, self.fonts)
        logger.info("Rendered infographic with %d statements (%d bytes)", len(layout.cards), len(png))
        return encode_data_url(png)

    async def generate_for_notebook(self, manager: NotebookManager, notebook_id: str) -> Notebook:
        """Generate from the notebook's current sources and store the result on it.

        Raises NoSourcesError before any rendering when the notebook is empty.
        """
        nb = await manager.get_notebook(notebook_id)
        text = aggregate(nb)
        data = await asyncio.to_thread(self.generate, text)
        return await manager.save_infographic(notebook_id, data)
