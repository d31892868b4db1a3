# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client OpenAI implementation."""

import logging
from urllib.parse import urlparse

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    OpenAI,
    OpenAIError,
    PermissionDeniedError,
    RateLimitError,
)

from srcdigest.llm_client import SummarizationError

logger = logging.getLogger(__name__)

OPENAI_DEFAULT_MODEL: str = "gpt-4o-mini"
OPENAI_DEFAULT_BASE_URL: str = "https://api.openai.com/v1"
# The Responses API rejects smaller output budgets.
OPENAI_MIN_OUTPUT_TOKENS: int = 16


class OpenAIClient:
    """Generate replies using OpenAI's Responses API."""

    def __init__(
        self,
        provider_url: str,
        api_key: str,
        model: str = OPENAI_DEFAULT_MODEL,
        max_output_tokens: int = 20,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize client configuration.

        Args:
            provider_url: OpenAI-compatible endpoint base URL.
            api_key: API key sent as bearer credential.
            model: Model identifier used for generation.
            max_output_tokens: Upper bound on reply length.
            timeout_seconds: Request timeout; SDK default when ``None``.
        """
        self._provider_url = provider_url
        self._api_key = api_key
        self._model = model
        self._max_output_tokens = max(max_output_tokens, OPENAI_MIN_OUTPUT_TOKENS)
        self._timeout_seconds = timeout_seconds
        self._client: OpenAI | None = None

    def complete(self, instructions: str, prompt: str) -> str:
        """Generate a reply with the OpenAI Responses API.

        Args:
            instructions: System-role instruction text.
            prompt: User-role prompt text.

        Returns:
            Generated reply text.

        Raises:
            SummarizationError: If request fails or response has no content.
        """
        client = self._get_client()
        try:
            response = client.responses.create(
                model=self._model,
                instructions=instructions,
                input=prompt,
                max_output_tokens=self._max_output_tokens,
            )
        except (
            APIConnectionError,
            APIError,
            APITimeoutError,
            AuthenticationError,
            BadRequestError,
            InternalServerError,
            NotFoundError,
            PermissionDeniedError,
            RateLimitError,
            AttributeError,
            OSError,
            ValueError,
        ) as exc:
            logger.warning(
                f"OpenAI request failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise SummarizationError(str(exc)) from exc

        content = _extract_response_content(response)
        if not content:
            logger.warning(
                f"OpenAI response did not contain reply content "
                f"(provider_url={self._provider_url} model={self._model} response={response!r})"
            )
            raise SummarizationError(
                "OpenAI response does not contain generation content."
            )
        return content

    def _get_client(self) -> OpenAI:
        """Get or initialize OpenAI SDK client.

        Returns:
            Initialized OpenAI SDK client.

        Raises:
            SummarizationError: If client initialization fails.
        """
        if self._client is not None:
            return self._client
        try:
            self._client = OpenAI(
                api_key=self._api_key,
                base_url=_normalize_provider_url(self._provider_url),
                timeout=self._timeout_seconds,
                max_retries=0,
            )
        except (OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"OpenAI client initialization failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise SummarizationError(str(exc)) from exc
        return self._client


def _normalize_provider_url(provider_url: str) -> str:
    """Normalize OpenAI provider URL to a valid base URL.

    Args:
        provider_url: User-provided provider URL or alias.

    Returns:
        Normalized base URL suitable for OpenAI Python client.

    Raises:
        ValueError: If provider URL is invalid.
    """
    normalized_raw = provider_url.strip()
    if not normalized_raw:
        raise ValueError("Invalid OpenAI provider URL: value is empty.")

    lowered_raw = normalized_raw.lower().rstrip("/")
    if lowered_raw in {"openai", "openai.com", "www.openai.com", "api.openai.com"}:
        return OPENAI_DEFAULT_BASE_URL

    candidate = normalized_raw
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(
            f"Invalid OpenAI provider URL: expected host URL, got '{provider_url}'."
        )

    host = parsed.netloc.lower()
    if host in {"openai.com", "www.openai.com", "api.openai.com"}:
        return OPENAI_DEFAULT_BASE_URL

    return candidate.rstrip("/")


def _extract_response_content(response: object) -> str:
    """Extract reply content from OpenAI response object.

    Args:
        response: OpenAI response object.

    Returns:
        Response content string, or empty string if unavailable.
    """
    if isinstance(response, dict):
        content = response.get("output_text")
        if isinstance(content, str):
            return content.strip()
    output_text = getattr(response, "output_text", None)
    if isinstance(output_text, str):
        return output_text.strip()
    return ""
