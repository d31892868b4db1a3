# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client implementations for the source digest."""

from srcdigest.config import SummarizerConfig
from srcdigest.llm.ollama_client import (
    OLLAMA_DEFAULT_MODEL,
    OLLAMA_DEFAULT_URL,
    OllamaClient,
)
from srcdigest.llm.openai_client import (
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OpenAIClient,
)
from srcdigest.llm_client import LLMClient


def build_llm_client(config: SummarizerConfig) -> LLMClient:
    """Create the configured LLM client.

    Args:
        config: Summarizer configuration.

    Returns:
        Provider client bound to the configured model and budget.
    """
    if config.provider == "ollama":
        return OllamaClient(
            provider_url=config.provider_url,
            model=config.model,
            max_output_tokens=config.max_output_tokens,
            timeout_seconds=config.timeout_seconds,
        )
    return OpenAIClient(
        provider_url=config.provider_url,
        api_key=config.api_key or "",
        model=config.model,
        max_output_tokens=config.max_output_tokens,
        timeout_seconds=config.timeout_seconds,
    )


__all__ = [
    "OLLAMA_DEFAULT_MODEL",
    "OLLAMA_DEFAULT_URL",
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "OllamaClient",
    "OpenAIClient",
    "build_llm_client",
]
