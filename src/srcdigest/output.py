# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Output writers for file summaries and packed chunks."""

import json
import logging
import threading
from dataclasses import asdict
from pathlib import Path, PurePosixPath
from typing import Protocol

from srcdigest.model import FileSummary
from srcdigest.packer import Chunk

logger = logging.getLogger(__name__)

SUMMARY_SUFFIX = "_summary.txt"
CHUNK_PREFIX = "Chunk_"
JSON_OUTPUT_NAME = "digest.json"


class OutputError(RuntimeError):
    """Represent a failure writing digest output."""


class SummaryWriter(Protocol):
    """Define the output sink of a digest run."""

    def write_file_summary(self, summary: FileSummary) -> None:
        """Write one file summary as soon as it is complete."""

    def write_chunk(self, chunk: Chunk) -> None:
        """Write one packed chunk."""

    def close(self) -> None:
        """Flush buffered output."""


def summary_file_name(file_path: str) -> str:
    """Map a root-relative source path to its summary file name.

    ``src/Foo.cs`` becomes ``src__Foo_summary.txt``.
    """
    stem = PurePosixPath(file_path).with_suffix("").as_posix()
    return stem.replace("/", "__") + SUMMARY_SUFFIX


class DirectoryWriter:
    """Write one text file per summary and per chunk into a directory."""

    def __init__(self, output_dir: Path, indent: bool = False) -> None:
        """Initialize writer.

        Args:
            output_dir: Target directory, created on first write.
            indent: Indent member lines by nesting depth.
        """
        self._output_dir = output_dir
        self._indent = indent

    def write_file_summary(self, summary: FileSummary) -> None:
        """Write ``<path>_summary.txt`` for one file.

        Raises:
            OutputError: If the file cannot be written.
        """
        self._write(summary_file_name(summary.file_path), summary.render(self._indent))

    def write_chunk(self, chunk: Chunk) -> None:
        """Write ``Chunk_<index>.txt``.

        Raises:
            OutputError: If the file cannot be written.
        """
        target = self._write(f"{CHUNK_PREFIX}{chunk.index}.txt", chunk.text)
        logger.info(f"Chunk {chunk.index} written to {target}")

    def close(self) -> None:
        return None

    def _write(self, name: str, text: str) -> Path:
        target = self._output_dir / name
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning(f"Failed to write output file (path={target} error={exc})")
            raise OutputError(f"Failed to write {target}: {exc}") from exc
        return target


class JsonWriter:
    """Collect summaries and chunks into a single JSON document."""

    def __init__(self, output_path: Path, indent: bool = False) -> None:
        """Initialize writer.

        Args:
            output_path: JSON file written on ``close``.
            indent: Indent member lines by nesting depth.
        """
        self._output_path = output_path
        self._indent = indent
        self._files: dict[str, dict[str, object]] = {}
        self._chunks: list[dict[str, object]] = []
        self._lock = threading.Lock()

    def write_file_summary(self, summary: FileSummary) -> None:
        with self._lock:
            self._files[summary.file_path] = {
                "file_path": summary.file_path,
                "status": summary.status,
                "content_hash": summary.content_hash,
                "lines": summary.lines(indent=self._indent),
                "members": [asdict(member) for member in summary.members],
            }

    def write_chunk(self, chunk: Chunk) -> None:
        with self._lock:
            self._chunks.append(
                {"index": chunk.index, "oversized": chunk.oversized, "text": chunk.text}
            )

    def close(self) -> None:
        """Write the collected document.

        Raises:
            OutputError: If directory creation or file writing fails.
        """
        payload = {
            "files": [self._files[key] for key in sorted(self._files)],
            "chunks": list(self._chunks),
        }
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            self._output_path.write_text(
                json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
            )
        except OSError as exc:
            logger.warning(
                f"Failed to write JSON output file (output_path={self._output_path} error={exc})"
            )
            raise OutputError(f"Failed to write {self._output_path}: {exc}") from exc
