# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run configuration for the source digest."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from srcdigest.parsers import LANGUAGES, Language

logger = logging.getLogger(__name__)

Provider = Literal["openai", "ollama"]
CacheMode = Literal["reuse", "reset", "off"]
CacheValidation = Literal["hash", "existence"]
ChunkUnit = Literal["chars", "tokens"]
PackBy = Literal["file", "member"]
MethodErrorPolicy = Literal["file", "method", "run"]
OutputFormat = Literal["text", "json"]

PROVIDERS: tuple[Provider, ...] = ("openai", "ollama")
CACHE_MODES: tuple[CacheMode, ...] = ("reuse", "reset", "off")
CACHE_VALIDATIONS: tuple[CacheValidation, ...] = ("hash", "existence")
CHUNK_UNITS: tuple[ChunkUnit, ...] = ("chars", "tokens")
PACK_BY: tuple[PackBy, ...] = ("file", "member")
METHOD_ERROR_POLICIES: tuple[MethodErrorPolicy, ...] = ("file", "method", "run")
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("text", "json")

DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_OUTPUT_DIR = Path("SummariesOutput")
DEFAULT_CACHE_FILE = "summaries.sqlite"
DEFAULT_CHUNK_LIMIT = 4000
DEFAULT_MAX_OUTPUT_TOKENS = 20


class ConfigurationError(RuntimeError):
    """Represent invalid or incomplete run configuration."""


@dataclass(frozen=True)
class SummarizerConfig:
    """Describe how method bodies are summarized.

    Attributes:
        provider: LLM provider backend.
        provider_url: Provider endpoint URL.
        model: Remote model identifier.
        max_output_tokens: Cap on the remote reply length.
        api_key: Credential for providers that require one.
        timeout_seconds: Remote call timeout; provider default when ``None``.
        max_retries: Additional attempts after a failed call.
        retry_backoff_seconds: Base delay doubled after every failed attempt.
    """

    provider: Provider
    provider_url: str
    model: str
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    api_key: str | None = field(default=None, repr=False)
    timeout_seconds: float | None = None
    max_retries: int = 0
    retry_backoff_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.provider not in PROVIDERS:
            raise ConfigurationError(f"Unsupported provider: {self.provider}")
        if self.max_output_tokens <= 0:
            raise ConfigurationError("max_output_tokens must be > 0")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.retry_backoff_seconds < 0:
            raise ConfigurationError("retry_backoff_seconds must be >= 0")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be > 0")
        if self.provider == "openai" and not self.api_key:
            raise ConfigurationError("OpenAI provider requires an API key")


@dataclass(frozen=True)
class DigestConfig:
    """Describe one digest run.

    Attributes:
        root_path: Root folder to summarize.
        language: Source language selecting parser and file suffixes.
        output_dir: Directory receiving per-file summaries and chunks.
        output_format: ``text`` files or a single ``json`` document.
        cache_path: SQLite file backing the summary cache.
        cache_mode: ``reuse``, ``reset`` or ``off``.
        cache_validation: ``hash`` or ``existence`` reuse check.
        chunk_limit: Maximum chunk size in ``chunk_unit``.
        chunk_unit: ``chars`` or approximate ``tokens``.
        pack_by: Pack whole file summaries or single member lines.
        on_method_error: Method summarization failure policy.
        max_workers: Files processed concurrently.
        progress_batch_size: Emit a progress line every N files.
        indent: Indent member lines by nesting depth.
        respect_gitignore: Skip files matched by ``.gitignore`` patterns.
    """

    root_path: Path
    language: Language = "csharp"
    output_dir: Path = DEFAULT_OUTPUT_DIR
    output_format: OutputFormat = "text"
    cache_path: Path | None = None
    cache_mode: CacheMode = "reuse"
    cache_validation: CacheValidation = "hash"
    chunk_limit: int = DEFAULT_CHUNK_LIMIT
    chunk_unit: ChunkUnit = "chars"
    pack_by: PackBy = "file"
    on_method_error: MethodErrorPolicy = "file"
    max_workers: int = 1
    progress_batch_size: int = 10
    indent: bool = False
    respect_gitignore: bool = True

    def __post_init__(self) -> None:
        _require_choice("language", self.language, LANGUAGES)
        _require_choice("output_format", self.output_format, OUTPUT_FORMATS)
        _require_choice("cache_mode", self.cache_mode, CACHE_MODES)
        _require_choice("cache_validation", self.cache_validation, CACHE_VALIDATIONS)
        _require_choice("chunk_unit", self.chunk_unit, CHUNK_UNITS)
        _require_choice("pack_by", self.pack_by, PACK_BY)
        _require_choice("on_method_error", self.on_method_error, METHOD_ERROR_POLICIES)
        if self.chunk_limit <= 0:
            raise ConfigurationError("chunk_limit must be > 0")
        if self.max_workers <= 0:
            raise ConfigurationError("max_workers must be > 0")
        if self.progress_batch_size <= 0:
            raise ConfigurationError("progress_batch_size must be > 0")

    @property
    def resolved_cache_path(self) -> Path:
        """Return the cache file, defaulting to one inside ``output_dir``."""
        if self.cache_path is not None:
            return self.cache_path
        return self.output_dir / DEFAULT_CACHE_FILE


def validate_root_path(root_path: Path) -> Path:
    """Check that the digest root exists and is a directory.

    Raises:
        ConfigurationError: If the path is missing or not a directory.
    """
    if not root_path.exists():
        raise ConfigurationError(f"The specified folder does not exist: {root_path}")
    if not root_path.is_dir():
        raise ConfigurationError(f"The specified path is not a folder: {root_path}")
    return root_path


def resolve_api_key(
    provider: Provider, environ: Mapping[str, str], api_key_env: str
) -> str | None:
    """Look up the provider credential in an explicit environment mapping.

    Raises:
        ConfigurationError: If the provider needs a key and none is set.
    """
    if provider != "openai":
        return None
    api_key = environ.get(api_key_env, "").strip()
    if not api_key:
        logger.warning(f"API key not found in environment (variable={api_key_env})")
        raise ConfigurationError(
            f"API key not found in environment variable {api_key_env}"
        )
    return api_key


def _require_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ConfigurationError(
            f"Invalid {name}: {value!r} (expected one of {', '.join(choices)})"
        )
