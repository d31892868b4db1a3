# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client Ollama implementation."""

import logging

import ollama

from srcdigest.llm_client import SummarizationError

logger = logging.getLogger(__name__)

OLLAMA_DEFAULT_URL: str = "http://localhost:11434"
OLLAMA_DEFAULT_MODEL: str = "qwen3-coder:latest"


class OllamaClient:
    """Generate replies using an Ollama provider endpoint."""

    def __init__(
        self,
        provider_url: str,
        model: str,
        max_output_tokens: int = 20,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize client configuration.

        Args:
            provider_url: Ollama endpoint base URL.
            model: Model identifier passed to Ollama.
            max_output_tokens: Upper bound on generated tokens (``num_predict``).
            timeout_seconds: Request timeout; no timeout when ``None``.
        """
        self._provider_url = provider_url
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._client = ollama.Client(host=provider_url, timeout=timeout_seconds)

    def complete(self, instructions: str, prompt: str) -> str:
        """Generate a reply with the Ollama generate API.

        Args:
            instructions: System-role instruction text.
            prompt: User-role prompt text.

        Returns:
            Generated reply text.

        Raises:
            SummarizationError: If request fails or response has no content.
        """
        try:
            response = self._client.generate(
                model=self._model,
                system=instructions,
                prompt=prompt,
                stream=False,
                options={"num_predict": self._max_output_tokens},
            )
        except (ollama.RequestError, ollama.ResponseError, OSError, ValueError) as exc:
            logger.warning(
                f"Ollama request failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise SummarizationError(str(exc)) from exc

        content = _extract_response_content(response)
        if not content:
            logger.warning(
                f"Ollama response did not contain reply content "
                f"(provider_url={self._provider_url} model={self._model} response={response!r})"
            )
            raise SummarizationError(
                "Ollama response does not contain generation content."
            )
        return content


def _extract_response_content(response: object) -> str:
    """Extract reply content from Ollama response object.

    Args:
        response: Ollama response object, typically mapping-like.

    Returns:
        Response content string, or empty string if unavailable.
    """
    if isinstance(response, dict):
        content = response.get("response")
        if isinstance(content, str):
            return content.strip()
    content_obj = getattr(response, "response", None)
    if isinstance(content_obj, str):
        return content_obj.strip()
    return ""
