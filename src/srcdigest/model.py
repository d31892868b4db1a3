# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for digest artifacts."""

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from srcdigest.declarations import DeclarationKind

SummaryStatus = Literal["ok", "parse_failed"]

KIND_LABELS: dict[str, str] = {
    "namespace": "Namespace",
    "class": "Class",
    "interface": "Interface",
    "struct": "Struct",
    "method": "Method",
    "property": "Property",
    "field": "Field",
    "other": "Other",
}


@dataclass(frozen=True)
class SourceUnit:
    """Represent one input file read from disk.

    Attributes:
        path: Absolute file path.
        relative_path: Root-relative POSIX path; the stable cache key.
        text: Decoded file content.
        content_hash: SHA-256 hex digest of the UTF-8 encoded ``text``.
    """

    path: Path
    relative_path: str
    text: str
    content_hash: str

    @classmethod
    def read(cls, root_path: Path, path: Path) -> "SourceUnit":
        """Read one source file beneath ``root_path``.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not valid UTF-8.
        """
        text = path.read_text(encoding="utf-8")
        return cls(
            path=path,
            relative_path=path.relative_to(root_path).as_posix(),
            text=text,
            content_hash=content_hash(text),
        )


@dataclass(frozen=True)
class MemberSummary:
    """Represent one rendered summary line.

    Attributes:
        kind: Declaration kind the line was produced for.
        identifier: Declared name.
        text: Single-line rendered text.
        depth: Nesting level below the file root.
    """

    kind: DeclarationKind
    identifier: str
    text: str
    depth: int = 0

    def render(self, indent: bool = False) -> str:
        if indent:
            return f"{'  ' * self.depth}{self.text}"
        return self.text


@dataclass(frozen=True)
class FileSummary:
    """Represent the ordered summary of one source file.

    Attributes:
        file_path: Root-relative POSIX path of the summarized file.
        members: Member lines in traversal emission order.
        content_hash: Hash of the content the summary was computed from.
        status: ``ok`` or ``parse_failed`` for diagnostic placeholders.
    """

    file_path: str
    members: tuple[MemberSummary, ...]
    content_hash: str
    status: SummaryStatus = "ok"

    @property
    def header(self) -> str:
        return f"File: {self.file_path}"

    def lines(self, indent: bool = False) -> list[str]:
        """Return member lines without the file header."""
        return [member.render(indent=indent) for member in self.members]

    def render(self, indent: bool = False) -> str:
        """Render the summary as a header line followed by member lines."""
        return "\n".join([self.header, *self.lines(indent=indent)])


def content_hash(text: str) -> str:
    """Hash file content for cache validation."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
