# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Method summarization adapter over an LLM client."""

import logging
import time
from collections.abc import Callable

from srcdigest.config import SummarizerConfig
from srcdigest.llm_client import LLMClient, SummarizationError
from srcdigest.normalizer import normalize_summary
from srcdigest.packer import CHARS_PER_TOKEN

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS = (
    "You are a code summarizer. The less tokens you can use the better, "
    "but accuracy is far more important than brevity."
)
PROMPT_TEMPLATE = (
    "Summarize the following method optimising for the smallest number of "
    "tokens possible and clarity.:\n\n{method}\n\nSummary:"
)


class MethodSummarizer:
    """Produce short, normalized descriptions of method bodies."""

    def __init__(
        self,
        llm_client: LLMClient,
        config: SummarizerConfig,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the adapter.

        Args:
            llm_client: Provider client used for generation.
            config: Summarizer configuration (budget and retry policy).
            sleep: Delay function used between retries.
        """
        self._llm_client = llm_client
        self._config = config
        self._sleep = sleep

    @property
    def budget(self) -> int:
        """Return the normalization budget in characters."""
        return self._config.max_output_tokens * CHARS_PER_TOKEN

    def summarize(self, method_source: str) -> str:
        """Summarize one method.

        Args:
            method_source: Full method text, rendered verbatim into the prompt.

        Returns:
            Normalized single-line description.

        Raises:
            SummarizationError: If every attempt fails or the reply is empty.
        """
        prompt = PROMPT_TEMPLATE.format(method=method_source)
        attempts = self._config.max_retries + 1
        for attempt in range(attempts):
            try:
                reply = self._llm_client.complete(SYSTEM_INSTRUCTIONS, prompt)
                break
            except SummarizationError as exc:
                if attempt + 1 >= attempts:
                    raise
                delay = self._config.retry_backoff_seconds * (2**attempt)
                logger.info(
                    f"Retrying summarization (attempt={attempt + 2}/{attempts} "
                    f"delay_seconds={delay:.2f} error={exc})"
                )
                self._sleep(delay)

        summary = normalize_summary(reply, budget=self.budget)
        if not summary:
            raise SummarizationError(f"Reply is empty after normalization: {reply!r}")
        return summary
