# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Size-bounded chunk packing of summary text."""

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SEPARATOR = "\n"
CHARS_PER_TOKEN = 4

Measure = Callable[[str], int]


@dataclass(frozen=True)
class Chunk:
    """Represent one packed block of summary text.

    Attributes:
        index: 1-based position in the chunk sequence.
        units: Packed texts in original order.
        oversized: True when the chunk holds a single unit above the limit.
    """

    index: int
    units: tuple[str, ...]
    oversized: bool = False

    @property
    def text(self) -> str:
        return SEPARATOR.join(self.units)


def approximate_tokens(text: str) -> int:
    """Estimate a token count at roughly four characters per token."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def pack_chunks(
    units: Iterable[str], limit: int, measure: Measure = len
) -> list[Chunk]:
    """Greedily pack texts into contiguous chunks bounded by ``limit``.

    Units are never split or reordered. A unit whose own size exceeds
    ``limit`` is emitted alone as an oversized chunk.

    Args:
        units: Texts in output order.
        limit: Maximum measured size of a chunk.
        measure: Size function; characters by default.

    Returns:
        Chunks whose texts, joined by ``SEPARATOR``, reproduce the input.

    Raises:
        ValueError: If ``limit`` is not greater than zero.
    """
    if limit <= 0:
        raise ValueError("limit must be > 0")
    separator_size = measure(SEPARATOR)
    chunks: list[Chunk] = []
    current: list[str] = []
    current_size = 0

    def flush() -> None:
        chunks.append(
            Chunk(
                index=len(chunks) + 1,
                units=tuple(current),
                oversized=len(current) == 1 and current_size > limit,
            )
        )

    for unit in units:
        unit_size = measure(unit)
        if current and current_size + separator_size + unit_size > limit:
            flush()
            current = []
            current_size = 0
        if current:
            current_size += separator_size + unit_size
        else:
            current_size = unit_size
        current.append(unit)
        if unit_size > limit:
            logger.warning(
                f"Unit exceeds chunk limit; emitting oversized chunk "
                f"(size={unit_size} limit={limit})"
            )

    if current:
        flush()
    return chunks
