# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Digest orchestration over discovered source files."""

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from srcdigest.cache import CacheError, SummaryCache
from srcdigest.config import (
    DigestConfig,
    MethodErrorPolicy,
    PackBy,
    SummarizerConfig,
)
from srcdigest.database import SQLiteSummaryCache
from srcdigest.llm_client import LLMClient, SummarizationError
from srcdigest.model import FileSummary, MemberSummary, SourceUnit
from srcdigest.output import (
    JSON_OUTPUT_NAME,
    DirectoryWriter,
    JsonWriter,
    SummaryWriter,
)
from srcdigest.packer import Chunk, Measure, approximate_tokens, pack_chunks
from srcdigest.parsers import DeclarationParser, ParseError, build_parser
from srcdigest.summarizer import MethodSummarizer
from srcdigest.visitor import DeclarationVisitor

logger = logging.getLogger(__name__)

FileErrorKind = Literal["read", "parse", "summarization"]


@dataclass(frozen=True)
class FileError:
    """Represent one file that could not be summarized normally."""

    file_path: str
    kind: FileErrorKind
    message: str


@dataclass(frozen=True)
class DigestResult:
    """Represent the outcome of one digest run.

    Attributes:
        summaries: File summaries in lexical file order.
        chunks: Packed chunks; empty when the run was aborted.
        errors: Per-file errors in lexical file order.
        cached_count: Files whose summary was reused from the cache.
        aborted: True when a fatal summarization failure stopped the run.
    """

    summaries: list[FileSummary]
    chunks: list[Chunk]
    errors: list[FileError]
    cached_count: int = 0
    aborted: bool = False


class DigestAbortedError(RuntimeError):
    """Represent a run stopped by the ``run`` method failure policy."""

    def __init__(self, message: str, result: DigestResult) -> None:
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class _FileOutcome:
    summary: FileSummary | None
    error: FileError | None = None
    cached: bool = False
    cancelled: bool = False


@dataclass
class _Progress:
    total: int
    completed: int = 0
    failed: int = 0
    cached: int = 0
    started_at: float = field(default_factory=time.monotonic)


class DigestPipeline:
    """Summarize files, cache the results and pack them into chunks."""

    def __init__(
        self,
        parser: DeclarationParser,
        visitor: DeclarationVisitor,
        writer: SummaryWriter,
        cache: SummaryCache | None = None,
        chunk_limit: int = 4000,
        measure: Measure = len,
        pack_by: PackBy = "file",
        on_method_error: MethodErrorPolicy = "file",
        max_workers: int = 1,
        progress_batch_size: int = 10,
        indent: bool = False,
    ) -> None:
        """Initialize the pipeline.

        Args:
            parser: Declaration tree parser for the configured language.
            visitor: Declaration visitor bound to a method summarizer.
            writer: Output sink for summaries and chunks.
            cache: Summary cache; caching is disabled when ``None``.
            chunk_limit: Maximum measured chunk size.
            measure: Size function used by the packer.
            pack_by: Pack whole file summaries or single lines.
            on_method_error: ``run`` aborts the run on the first failure.
            max_workers: Maximum number of files processed concurrently.
            progress_batch_size: Emit progress log line every N files.
            indent: Indent member lines by nesting depth.

        Raises:
            ValueError: If ``max_workers`` or ``progress_batch_size`` is not
                greater than zero.
        """
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        if progress_batch_size <= 0:
            raise ValueError("progress_batch_size must be > 0")
        self._parser = parser
        self._visitor = visitor
        self._writer = writer
        self._cache = cache
        self._chunk_limit = chunk_limit
        self._measure = measure
        self._pack_by = pack_by
        self._on_method_error = on_method_error
        self._max_workers = max_workers
        self._progress_batch_size = progress_batch_size
        self._indent = indent
        self._abort = threading.Event()

    def run(self, root_path: Path, files: list[Path]) -> DigestResult:
        """Summarize ``files`` and write summaries and chunks.

        Files are merged back in the given order regardless of completion
        order, so callers should pass them sorted.

        Args:
            root_path: Root directory the files were discovered under.
            files: Source files to summarize.

        Returns:
            Run result with summaries, chunks and per-file errors.

        Raises:
            DigestAbortedError: If a method fails under the ``run`` policy.
        """
        self._abort.clear()
        progress = _Progress(total=len(files))
        outcomes: list[_FileOutcome] = []
        abort_error: SummarizationError | None = None
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers
        ) as executor:
            futures = [
                executor.submit(self.process_file, root_path, path) for path in files
            ]
            for path, future in zip(files, futures):
                try:
                    outcome = future.result()
                except SummarizationError as exc:
                    for pending in futures:
                        pending.cancel()
                    relative_path = path.relative_to(root_path).as_posix()
                    logger.warning(
                        f"Aborting run after summarization failure "
                        f"(file_path={relative_path} error={exc})"
                    )
                    outcomes.append(
                        _FileOutcome(
                            summary=None,
                            error=FileError(
                                file_path=relative_path,
                                kind="summarization",
                                message=str(exc),
                            ),
                        )
                    )
                    abort_error = exc
                    break
                outcomes.append(outcome)
                self._record_progress(progress, outcome)

        if abort_error is not None:
            self._writer.close()
            result = self._build_result(outcomes, chunks=[], aborted=True)
            raise DigestAbortedError(str(abort_error), result) from abort_error

        summaries = [o.summary for o in outcomes if o.summary is not None]
        chunks = pack_chunks(
            self._pack_units(summaries), limit=self._chunk_limit, measure=self._measure
        )
        for chunk in chunks:
            self._writer.write_chunk(chunk)
        self._writer.close()
        logger.info(
            f"Digest completed (files={len(files)} summaries={len(summaries)} "
            f"chunks={len(chunks)} cached={progress.cached} failed={progress.failed})"
        )
        return self._build_result(outcomes, chunks=chunks, aborted=False)

    def process_file(self, root_path: Path, path: Path) -> _FileOutcome:
        """Summarize one file, reusing the cache when possible.

        Returns a cancelled outcome without touching the file once another
        file has aborted the run.

        Raises:
            SummarizationError: If a method fails under the ``run`` policy.
        """
        relative_path = path.relative_to(root_path).as_posix()
        if self._abort.is_set():
            logger.debug(f"Skipping file after run abort (file_path={relative_path})")
            return _FileOutcome(summary=None, cancelled=True)
        try:
            unit = SourceUnit.read(root_path, path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                f"Skipping file due to read failure (file_path={relative_path} error={exc})"
            )
            return self._diagnostic(relative_path, "", "read", exc)

        cached = self._lookup(unit)
        if cached is not None:
            self._writer.write_file_summary(cached)
            return _FileOutcome(summary=cached, cached=True)

        try:
            declarations = self._parser.parse(unit.text)
        except ParseError as exc:
            logger.warning(
                f"Emitting diagnostic summary due to parse failure "
                f"(file_path={relative_path} error={exc})"
            )
            return self._diagnostic(relative_path, unit.content_hash, "parse", exc)

        try:
            members = self._visitor.visit_root(declarations)
        except SummarizationError as exc:
            if self._on_method_error == "run":
                self._abort.set()
                raise
            logger.warning(
                f"Summarization failed for file (file_path={relative_path} error={exc})"
            )
            return _FileOutcome(
                summary=None,
                error=FileError(
                    file_path=relative_path, kind="summarization", message=str(exc)
                ),
            )

        summary = FileSummary(
            file_path=relative_path,
            members=tuple(members),
            content_hash=unit.content_hash,
        )
        self._store(summary)
        self._writer.write_file_summary(summary)
        return _FileOutcome(summary=summary)

    def _lookup(self, unit: SourceUnit) -> FileSummary | None:
        if self._cache is None:
            return None
        try:
            cached = self._cache.lookup(unit.relative_path, unit.content_hash)
        except CacheError as exc:
            logger.warning(
                f"Cache lookup failed; summarizing without cache "
                f"(file_path={unit.relative_path} error={exc})"
            )
            return None
        if cached is not None:
            logger.debug(f"Reusing cached summary (file_path={unit.relative_path})")
        return cached

    def _store(self, summary: FileSummary) -> None:
        if self._cache is None:
            return
        try:
            self._cache.store(summary)
        except CacheError as exc:
            logger.warning(
                f"Cache store failed; continuing without caching "
                f"(file_path={summary.file_path} error={exc})"
            )

    def _diagnostic(
        self,
        relative_path: str,
        content_hash: str,
        kind: FileErrorKind,
        exc: Exception,
    ) -> _FileOutcome:
        label = "Read error" if kind == "read" else "Parse error"
        message = " ".join(str(exc).split())
        summary = FileSummary(
            file_path=relative_path,
            members=(
                MemberSummary(
                    kind="other",
                    identifier=relative_path,
                    text=f"{label}: {message}",
                ),
            ),
            content_hash=content_hash,
            status="parse_failed",
        )
        self._writer.write_file_summary(summary)
        return _FileOutcome(
            summary=summary,
            error=FileError(file_path=relative_path, kind=kind, message=str(exc)),
        )

    def _pack_units(self, summaries: list[FileSummary]) -> list[str]:
        if self._pack_by == "file":
            return [summary.render(indent=self._indent) for summary in summaries]
        units: list[str] = []
        for summary in summaries:
            units.append(summary.header)
            units.extend(summary.lines(indent=self._indent))
        return units

    def _build_result(
        self, outcomes: list[_FileOutcome], chunks: list[Chunk], aborted: bool
    ) -> DigestResult:
        return DigestResult(
            summaries=[o.summary for o in outcomes if o.summary is not None],
            chunks=chunks,
            errors=[o.error for o in outcomes if o.error is not None],
            cached_count=sum(1 for o in outcomes if o.cached),
            aborted=aborted,
        )

    def _record_progress(self, progress: _Progress, outcome: _FileOutcome) -> None:
        progress.completed += 1
        if outcome.error is not None:
            progress.failed += 1
        if outcome.cached:
            progress.cached += 1
        should_emit = (
            progress.completed % self._progress_batch_size == 0
            or progress.completed == progress.total
        )
        if should_emit:
            self._log_progress(progress)

    def _log_progress(self, progress: _Progress) -> None:
        """Emit structured progress log line.

        Args:
            progress: Counters for the current run.
        """
        percent = (
            100.0
            if progress.total == 0
            else (progress.completed / progress.total) * 100.0
        )
        elapsed = time.monotonic() - progress.started_at
        logger.info(
            "digest_progress completed=%s total=%s failed=%s cached=%s percent=%.2f elapsed_seconds=%.1f",
            progress.completed,
            progress.total,
            progress.failed,
            progress.cached,
            percent,
            elapsed,
        )


def build_pipeline(
    config: DigestConfig,
    summarizer_config: SummarizerConfig,
    llm_client: LLMClient,
    writer: SummaryWriter | None = None,
) -> DigestPipeline:
    """Wire a pipeline from run configuration.

    Args:
        config: Digest run configuration.
        summarizer_config: Method summarization configuration.
        llm_client: Provider client used for method descriptions.
        writer: Output sink; derived from ``config.output_format`` when ``None``.

    Returns:
        Ready-to-run pipeline. With ``cache_mode="reset"`` the cache is
        cleared before returning.
    """
    cache: SummaryCache | None = None
    if config.cache_mode != "off":
        cache = SQLiteSummaryCache(
            db_path=config.resolved_cache_path, validation=config.cache_validation
        )
        if config.cache_mode == "reset":
            try:
                cache.reset()
            except CacheError as exc:
                logger.warning(f"Cache reset failed; continuing (error={exc})")
    if writer is None:
        if config.output_format == "json":
            writer = JsonWriter(
                output_path=config.output_dir / JSON_OUTPUT_NAME, indent=config.indent
            )
        else:
            writer = DirectoryWriter(output_dir=config.output_dir, indent=config.indent)
    summarizer = MethodSummarizer(llm_client=llm_client, config=summarizer_config)
    return DigestPipeline(
        parser=build_parser(config.language),
        visitor=DeclarationVisitor(
            summarizer=summarizer, on_method_error=config.on_method_error
        ),
        writer=writer,
        cache=cache,
        chunk_limit=config.chunk_limit,
        measure=approximate_tokens if config.chunk_unit == "tokens" else len,
        pack_by=config.pack_by,
        on_method_error=config.on_method_error,
        max_workers=config.max_workers,
        progress_batch_size=config.progress_batch_size,
        indent=config.indent,
    )
