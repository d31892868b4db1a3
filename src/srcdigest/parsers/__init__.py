# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Declaration parsers for the source digest."""

from srcdigest.parsers.base import DeclarationParser, Language, ParseError
from srcdigest.parsers.csharp import CSharpParser
from srcdigest.parsers.python import PythonParser

LANGUAGES: tuple[Language, ...] = ("csharp", "python")


def build_parser(language: Language) -> DeclarationParser:
    """Create the declaration parser for a language.

    Raises:
        ValueError: If the language is not supported.
    """
    if language == "csharp":
        return CSharpParser()
    if language == "python":
        return PythonParser()
    raise ValueError(f"Unsupported language: {language}")


__all__ = [
    "CSharpParser",
    "DeclarationParser",
    "LANGUAGES",
    "Language",
    "ParseError",
    "PythonParser",
    "build_parser",
]
