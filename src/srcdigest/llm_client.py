# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM client abstractions."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class SummarizationError(RuntimeError):
    """Represent a failed or malformed summarization call."""


class LLMClient(Protocol):
    """Define text completion behavior for a provider client."""

    def complete(self, instructions: str, prompt: str) -> str:
        """Generate a reply for one instruction/prompt pair.

        Args:
            instructions: System-role instruction text.
            prompt: User-role prompt text.

        Returns:
            Stripped reply text.

        Raises:
            SummarizationError: If generation fails or the response is malformed.
        """
