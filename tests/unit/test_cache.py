import sqlite3
from pathlib import Path

import pytest

from srcdigest.cache import CacheError, decode_members
from srcdigest.database import SQLiteSummaryCache
from srcdigest.model import FileSummary, MemberSummary


def _sample_summary(
    *,
    file_path: str = "src/Service.cs",
    content_hash: str = "hash-1",
    text: str = "Method: Run - Runs the job.",
) -> FileSummary:
    return FileSummary(
        file_path=file_path,
        members=(
            MemberSummary(kind="class", identifier="Service", text="Class: Service"),
            MemberSummary(kind="method", identifier="Run", text=text, depth=1),
        ),
        content_hash=content_hash,
    )


def test_ph4_cache_001_store_then_lookup_returns_identical_summary(
    tmp_path: Path,
) -> None:
    cache = SQLiteSummaryCache(db_path=tmp_path / "cache.sqlite")
    summary = _sample_summary()

    cache.store(summary)

    assert cache.lookup("src/Service.cs", content_hash="hash-1") == summary


def test_ph4_cache_002_lookup_misses_unknown_key(tmp_path: Path) -> None:
    cache = SQLiteSummaryCache(db_path=tmp_path / "cache.sqlite")

    assert cache.lookup("missing.cs", content_hash="hash-1") is None


def test_ph4_cache_003_hash_validation_rejects_stale_record(tmp_path: Path) -> None:
    cache = SQLiteSummaryCache(db_path=tmp_path / "cache.sqlite", validation="hash")
    cache.store(_sample_summary(content_hash="old"))

    assert cache.lookup("src/Service.cs", content_hash="new") is None


def test_ph4_cache_004_existence_validation_reuses_stale_record(
    tmp_path: Path,
) -> None:
    cache = SQLiteSummaryCache(
        db_path=tmp_path / "cache.sqlite", validation="existence"
    )
    cache.store(_sample_summary(content_hash="old"))

    cached = cache.lookup("src/Service.cs", content_hash="new")

    assert cached is not None
    assert cached.content_hash == "old"


def test_ph4_cache_005_store_replaces_existing_record(tmp_path: Path) -> None:
    db_path = tmp_path / "cache.sqlite"
    cache = SQLiteSummaryCache(db_path=db_path)
    cache.store(_sample_summary(content_hash="h1", text="Method: Run - Old."))
    cache.store(_sample_summary(content_hash="h2", text="Method: Run - New."))

    cached = cache.lookup("src/Service.cs", content_hash="h2")

    assert cached is not None
    assert cached.members[1].text == "Method: Run - New."
    connection = sqlite3.connect(db_path)
    try:
        assert connection.execute("SELECT COUNT(*) FROM file_summaries").fetchone() == (
            1,
        )
    finally:
        connection.close()


def test_ph4_cache_006_reset_removes_all_records(tmp_path: Path) -> None:
    cache = SQLiteSummaryCache(db_path=tmp_path / "cache.sqlite")
    cache.store(_sample_summary(file_path="a.cs"))
    cache.store(_sample_summary(file_path="b.cs"))

    cache.reset()

    assert cache.lookup("a.cs", content_hash="hash-1") is None
    assert cache.lookup("b.cs", content_hash="hash-1") is None


def test_ph4_cache_007_diagnostic_summaries_are_not_stored(tmp_path: Path) -> None:
    cache = SQLiteSummaryCache(db_path=tmp_path / "cache.sqlite")
    diagnostic = FileSummary(
        file_path="broken.cs",
        members=(
            MemberSummary(kind="other", identifier="broken.cs", text="Parse error: x"),
        ),
        content_hash="hash-1",
        status="parse_failed",
    )

    cache.store(diagnostic)

    assert cache.lookup("broken.cs", content_hash="hash-1") is None


def test_ph4_cache_008_unreachable_database_raises_cache_error(
    tmp_path: Path,
) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file", encoding="utf-8")
    cache = SQLiteSummaryCache(db_path=blocker / "cache.sqlite")

    with pytest.raises(CacheError):
        cache.store(_sample_summary())
    with pytest.raises(CacheError):
        cache.lookup("src/Service.cs", content_hash="hash-1")


def test_ph4_cache_009_corrupt_members_payload_raises_cache_error() -> None:
    with pytest.raises(CacheError):
        decode_members("{not json")
    with pytest.raises(CacheError):
        decode_members('[{"kind": "class"}]')
