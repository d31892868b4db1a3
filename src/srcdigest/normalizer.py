# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Summary text normalization."""

import re

_TRAILING_SEPARATORS = ", \t"
_TERMINAL_PUNCTUATION = (".", "!", "?")
_TRAILING_AND = re.compile(r"(?:^|\s)and$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_summary(text: str, budget: int) -> str:
    """Close a possibly truncated reply as a punctuated phrase.

    A reply that already reaches ``budget`` characters and does not end with a
    comma or the word ``and`` is returned trimmed but otherwise unchanged.
    Otherwise trailing commas and a dangling ``and`` are removed and a period
    is appended, unless the text already ends with terminal punctuation.

    Args:
        text: Raw reply text.
        budget: Length budget in characters.

    Returns:
        Normalized single-line summary.
    """
    trimmed = _WHITESPACE.sub(" ", text).strip()
    if not _is_dangling(trimmed) and len(trimmed) >= budget:
        return trimmed

    closed = trimmed.rstrip(_TRAILING_SEPARATORS)
    match = _TRAILING_AND.search(closed)
    if match is not None:
        closed = closed[: match.start()].rstrip(_TRAILING_SEPARATORS)
    if not closed:
        return closed
    if closed.endswith(_TERMINAL_PUNCTUATION):
        return closed
    return f"{closed}."


def _is_dangling(text: str) -> bool:
    return text.endswith(",") or _TRAILING_AND.search(text) is not None
