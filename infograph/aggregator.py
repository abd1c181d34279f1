"""Combine a notebook's sources into one text, in source order."""

from __future__ import annotations

from infograph.core import NoSourcesError
from infograph.notebook.models import Notebook

SOURCE_SEPARATOR = "\n\n"


def aggregate(notebook: Notebook) -> str:
    """Join source contents with a blank line between them.

    Raises NoSourcesError for a notebook without sources.
    """
    if not notebook.sources:
        raise NoSourcesError(
            f"Notebook {notebook.id} has no sources",
            hint="Add at least one source to generate an infographic",
        )
    return SOURCE_SEPARATOR.join(source.content for source in notebook.sources)
