# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Source file discovery beneath a digest root."""

import logging
import os
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)


class IgnoreMatcher:
    """Match project paths against .gitignore patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        """Initialize matcher.

        Args:
            spec: Compiled gitignore matcher.
        """
        self._spec = spec

    @classmethod
    def from_project_root(cls, root_path: Path) -> "IgnoreMatcher":
        """Build matcher from root and nested .gitignore files.

        Args:
            root_path: Project root.

        Returns:
            Configured ignore matcher.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(root_path.rglob(".gitignore")):
            base = ignore_path.parent.relative_to(root_path).as_posix()
            if base == ".":
                base = ""
            lines = ignore_path.read_text(encoding="utf-8").splitlines()
            for line in lines:
                patterns.append(_translate_gitignore_line(line=line, base=base))
        spec = pathspec.GitIgnoreSpec.from_lines(patterns)
        return cls(spec=spec)

    def matches(self, relative_path: str) -> bool:
        """Check whether a file path should be ignored.

        Args:
            relative_path: Project-relative POSIX path.

        Returns:
            True when path should be ignored.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        return bool(self._spec.match_file(normalized))


def discover_sources(
    root_path: Path,
    suffixes: tuple[str, ...],
    ignore_matcher: IgnoreMatcher | None = None,
) -> list[Path]:
    """List source files beneath ``root_path`` in lexical path order.

    Args:
        root_path: Root directory to search recursively.
        suffixes: File suffixes to include, e.g. ``(".cs",)``.
        ignore_matcher: Optional matcher for paths to skip.

    Returns:
        Matching file paths sorted by their root-relative POSIX path.
    """
    found: list[Path] = []
    skipped = 0
    for path in root_path.rglob("*"):
        if not path.is_file() or path.suffix not in suffixes:
            continue
        relative = path.relative_to(root_path).as_posix()
        if ".git" in relative.split("/"):
            continue
        if ignore_matcher is not None and ignore_matcher.matches(relative):
            skipped += 1
            continue
        found.append(path)
    if skipped:
        logger.info(f"Skipped ignored source files (root={root_path} count={skipped})")
    return sorted(found, key=lambda path: path.relative_to(root_path).as_posix())


def _translate_gitignore_line(line: str, base: str) -> str:
    """Translate one .gitignore line to root-relative pattern.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to project root.

    Returns:
        Root-relative pattern line.
    """
    if not base:
        return line
    if not line:
        return line
    if line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    prefixed = f"{base}/{normalized_pattern}" if normalized_pattern else base
    if anchored:
        prefixed = f"/{prefixed}"
    if is_negation:
        return f"!{prefixed}"
    return prefixed
