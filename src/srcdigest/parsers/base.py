# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parser contracts for building declaration trees."""

from typing import Literal, Protocol

from srcdigest.declarations import Declaration

Language = Literal["csharp", "python"]


class ParseError(RuntimeError):
    """Represent a source file that cannot be turned into a declaration tree."""


class DeclarationParser(Protocol):
    """Language-specific declaration tree parser contract."""

    suffixes: tuple[str, ...]

    def parse(self, source: str) -> list[Declaration]:
        """Parse source text into root declarations.

        Args:
            source: Decoded file content.

        Returns:
            Root declarations in source order.

        Raises:
            ParseError: If the source is malformed.
        """
