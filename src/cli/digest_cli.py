# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line entry point for the source digest."""

import argparse
import logging
import os
import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from srcdigest.config import (
    CACHE_MODES,
    CACHE_VALIDATIONS,
    CHUNK_UNITS,
    DEFAULT_API_KEY_ENV,
    DEFAULT_CHUNK_LIMIT,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_OUTPUT_DIR,
    METHOD_ERROR_POLICIES,
    OUTPUT_FORMATS,
    PACK_BY,
    PROVIDERS,
    ConfigurationError,
    DigestConfig,
    SummarizerConfig,
    resolve_api_key,
    validate_root_path,
)
from srcdigest.discovery import IgnoreMatcher, discover_sources
from srcdigest.llm import (
    OLLAMA_DEFAULT_MODEL,
    OLLAMA_DEFAULT_URL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    build_llm_client,
)
from srcdigest.llm_client import LLMClient
from srcdigest.output import OutputError
from srcdigest.parsers import LANGUAGES, build_parser as build_declaration_parser
from srcdigest.pipeline import (
    DigestAbortedError,
    DigestResult,
    FileError,
    build_pipeline,
)

logger = logging.getLogger(__name__)

LLMClientFactory = Callable[[SummarizerConfig], LLMClient]


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="srcdigest",
        description="Summarize a source tree into size-bounded text chunks.",
    )
    parser.add_argument("path", nargs="?", help="Root folder of the source tree.")
    parser.add_argument(
        "--language", choices=LANGUAGES, default="csharp", help="Source language."
    )
    parser.add_argument(
        "--provider", choices=PROVIDERS, default="openai", help="LLM provider."
    )
    parser.add_argument(
        "--provider-url",
        required=False,
        help="Provider API endpoint URL (provider default when omitted).",
    )
    parser.add_argument(
        "--model", required=False, help="Provider model name (provider default)."
    )
    parser.add_argument(
        "--max-output-tokens",
        type=int,
        default=DEFAULT_MAX_OUTPUT_TOKENS,
        help="Cap on each method summary reply.",
    )
    parser.add_argument(
        "--api-key-env",
        default=DEFAULT_API_KEY_ENV,
        help="Environment variable holding the OpenAI API key.",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="Remote call timeout in seconds."
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=0,
        help="Additional attempts for a failed summarization call.",
    )
    parser.add_argument(
        "--output-dir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Directory receiving summaries and chunks.",
    )
    parser.add_argument(
        "--format", choices=OUTPUT_FORMATS, default="text", help="Output format."
    )
    parser.add_argument(
        "--cache-path",
        required=False,
        help="SQLite cache file (defaults to <output-dir>/summaries.sqlite).",
    )
    parser.add_argument(
        "--cache", choices=CACHE_MODES, default="reuse", help="Summary cache mode."
    )
    parser.add_argument(
        "--cache-validation",
        choices=CACHE_VALIDATIONS,
        default="hash",
        help="Reuse cached summaries by content hash or by mere existence.",
    )
    parser.add_argument(
        "--chunk-limit",
        type=int,
        default=DEFAULT_CHUNK_LIMIT,
        help="Maximum chunk size in --chunk-unit units.",
    )
    parser.add_argument(
        "--chunk-unit", choices=CHUNK_UNITS, default="chars", help="Chunk size unit."
    )
    parser.add_argument(
        "--pack-by",
        choices=PACK_BY,
        default="file",
        help="Pack whole file summaries or single member lines.",
    )
    parser.add_argument(
        "--on-method-error",
        choices=METHOD_ERROR_POLICIES,
        default="file",
        help="Fail the file, use a placeholder for the method, or abort the run.",
    )
    parser.add_argument(
        "--max-workers", type=int, default=1, help="Files processed concurrently."
    )
    parser.add_argument(
        "--progress-batch-size",
        type=int,
        default=10,
        help="Emit progress line every N processed files.",
    )
    parser.add_argument(
        "--indent", action="store_true", help="Indent member lines by nesting depth."
    )
    parser.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Do not skip files matched by .gitignore patterns.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
    llm_client_factory: LLMClientFactory = build_llm_client,
) -> int:
    """Run the digest command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        environ: Environment used for credential lookup; ``os.environ`` when
            ``None``.
        llm_client_factory: Builds the provider client from configuration.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if not args.path:
        logger.warning("No source folder path provided")
        stderr.write("Please provide a source code folder path.\n")
        return 2

    try:
        root_path = validate_root_path(Path(args.path))
        summarizer_config = _build_summarizer_config(
            args=args, environ=os.environ if environ is None else environ
        )
        config = _build_digest_config(args=args, root_path=root_path)
    except ConfigurationError as exc:
        logger.warning(f"Invalid configuration (path={args.path} error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    try:
        ignore_matcher = (
            IgnoreMatcher.from_project_root(root_path)
            if config.respect_gitignore
            else None
        )
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read .gitignore files (error={exc})")
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2

    files = discover_sources(
        root_path=root_path,
        suffixes=build_declaration_parser(config.language).suffixes,
        ignore_matcher=ignore_matcher,
    )
    logger.info(f"Discovered source files (path={root_path} count={len(files)})")

    pipeline = build_pipeline(
        config=config,
        summarizer_config=summarizer_config,
        llm_client=llm_client_factory(summarizer_config),
    )
    try:
        result = pipeline.run(root_path=root_path, files=files)
    except DigestAbortedError as exc:
        _write_errors(errors=exc.result.errors, stderr=stderr)
        stderr.write(f"Run aborted: {exc}\n")
        return 1
    except OutputError as exc:
        stderr.write(f"{exc}\n")
        return 1

    _write_errors(errors=result.errors, stderr=stderr)
    _write_table(result=result, config=config, stdout=stdout)
    return 1 if result.errors else 0


def _build_summarizer_config(
    args: argparse.Namespace, environ: Mapping[str, str]
) -> SummarizerConfig:
    """Build summarizer configuration from arguments and environment.

    Raises:
        ConfigurationError: If the credential is missing or a value is invalid.
    """
    api_key = resolve_api_key(
        provider=args.provider, environ=environ, api_key_env=args.api_key_env
    )
    if args.provider == "ollama":
        provider_url = args.provider_url or OLLAMA_DEFAULT_URL
        model = args.model or OLLAMA_DEFAULT_MODEL
    else:
        provider_url = args.provider_url or OPENAI_DEFAULT_BASE_URL
        model = args.model or OPENAI_DEFAULT_MODEL
    return SummarizerConfig(
        provider=args.provider,
        provider_url=provider_url,
        model=model,
        max_output_tokens=args.max_output_tokens,
        api_key=api_key,
        timeout_seconds=args.timeout,
        max_retries=args.max_retries,
    )


def _build_digest_config(args: argparse.Namespace, root_path: Path) -> DigestConfig:
    """Build digest run configuration from arguments.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    return DigestConfig(
        root_path=root_path,
        language=args.language,
        output_dir=Path(args.output_dir),
        output_format=args.format,
        cache_path=Path(args.cache_path) if args.cache_path else None,
        cache_mode=args.cache,
        cache_validation=args.cache_validation,
        chunk_limit=args.chunk_limit,
        chunk_unit=args.chunk_unit,
        pack_by=args.pack_by,
        on_method_error=args.on_method_error,
        max_workers=args.max_workers,
        progress_batch_size=args.progress_batch_size,
        indent=args.indent,
        respect_gitignore=not args.no_gitignore,
    )


def _write_errors(errors: list[FileError], stderr: TextIO) -> None:
    """Write one diagnostic line per failed file.

    Args:
        errors: Per-file errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"file_error: {error.file_path}: {error.kind}: {error.message}\n")


def _write_table(result: DigestResult, config: DigestConfig, stdout: TextIO) -> None:
    """Write a per-file overview and chunk totals.

    Args:
        result: Completed run result.
        config: Run configuration.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    table = Table(show_header=True, expand=True)
    table.add_column("file_path", ratio=4, overflow="fold")
    table.add_column("status", ratio=1)
    table.add_column("lines", ratio=1, justify="right")
    for summary in result.summaries:
        table.add_row(summary.file_path, summary.status, str(len(summary.members)))
    console.print(table)
    console.print(
        f"chunks={len(result.chunks)} cached={result.cached_count} "
        f"errors={len(result.errors)} output={config.output_dir}",
        markup=False,
        highlight=False,
    )


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
