"""Anthropic Claude text-generation service."""

import logging
from typing import Optional

import anthropic
from domain.exceptions import GenerationThrottled

from .base import BaseGenerationService

logger = logging.getLogger("AnthropicGeneration")

# 429: per-key quota exhausted, 529: provider overloaded
THROTTLING_STATUS_CODES = frozenset({429, 529})


class AnthropicGenerationService(BaseGenerationService):
    """Anthropic Messages API client used for conversation summaries."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 1024,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key (falls back to ANTHROPIC_API_KEY env var)
            model: Model to use
            max_tokens: Maximum tokens per summary
            client: Pre-built client (tests)
        """
        self.model = model or self.DEFAULT_MODEL
        self.max_tokens = max_tokens
        # max_retries=0: throttling backoff is owned by GenerationClient
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        logger.info(f"Anthropic generation service initialized with model: {self.model}")

    async def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the concatenated text blocks."""
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.RateLimitError as e:
            raise GenerationThrottled(str(e)) from e
        except anthropic.APIStatusError as e:
            if e.status_code in THROTTLING_STATUS_CODES:
                raise GenerationThrottled(str(e)) from e
            logger.error(f"Anthropic API error ({e.status_code}): {e}")
            raise

        text = "".join(block.text for block in response.content if block.type == "text")
        return text.strip()

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model

    async def aclose(self) -> None:
        await self.client.close()
