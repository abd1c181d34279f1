"""Key statement extraction: purely lexical sentence filtering."""

from __future__ import annotations

import re

_SENTENCE_END = re.compile(r"[.!?]+")

MIN_STATEMENT_LENGTH = 21
MAX_STATEMENT_LENGTH = 149
MAX_STATEMENTS = 5


def extract_statements(text: str, *, limit: int = MAX_STATEMENTS) -> list[str]:
    """Split on sentence-ending punctuation and keep the first display-sized sentences.

    A sentence survives when its stripped length is within
    [MIN_STATEMENT_LENGTH, MAX_STATEMENT_LENGTH]. Order is preserved.
    """
    statements: list[str] = []
    for candidate in _SENTENCE_END.split(text):
        sentence = candidate.strip()
        if MIN_STATEMENT_LENGTH <= len(sentence) <= MAX_STATEMENT_LENGTH:
            statements.append(sentence)
            if len(statements) == limit:
                break
    return statements
