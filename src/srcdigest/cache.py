# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Summary cache contracts."""

import json
import logging
from typing import Protocol

from srcdigest.model import FileSummary, MemberSummary

logger = logging.getLogger(__name__)


class CacheError(RuntimeError):
    """Represent an unreachable or corrupt summary cache."""


class SummaryCache(Protocol):
    """Define keyed storage of per-file summaries."""

    def lookup(self, key: str, content_hash: str) -> FileSummary | None:
        """Return a reusable summary for ``key`` or ``None``.

        Raises:
            CacheError: If the backing store cannot be read.
        """

    def store(self, summary: FileSummary) -> None:
        """Insert or replace the record keyed by ``summary.file_path``.

        Raises:
            CacheError: If the backing store cannot be written.
        """

    def reset(self) -> None:
        """Remove every record.

        Raises:
            CacheError: If the backing store cannot be written.
        """


def encode_members(members: tuple[MemberSummary, ...]) -> str:
    """Serialize member lines for storage."""
    return json.dumps(
        [
            {
                "kind": member.kind,
                "identifier": member.identifier,
                "text": member.text,
                "depth": member.depth,
            }
            for member in members
        ]
    )


def decode_members(payload: str) -> tuple[MemberSummary, ...]:
    """Deserialize stored member lines.

    Raises:
        CacheError: If the payload is not a valid member list.
    """
    try:
        rows = json.loads(payload)
        return tuple(
            MemberSummary(
                kind=row["kind"],
                identifier=row["identifier"],
                text=row["text"],
                depth=int(row.get("depth", 0)),
            )
            for row in rows
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CacheError(f"Corrupt cached members: {exc}") from exc
