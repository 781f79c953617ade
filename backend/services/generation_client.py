"""
Generation client with rate limiting and throttle-aware retries.

Every attempt first takes a slot from the process-wide RateLimiter. When the
provider reports throttling the client backs off for 2**attempt seconds and
tries again; any other failure is final.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from domain.exceptions import GenerationError, GenerationThrottled
from domain.value_objects.enums import GenerationErrorKind
from infrastructure.generation import BaseGenerationService
from infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger("GenerationClient")


class GenerationClient:
    """Calls the generation service on behalf of the digest pipeline."""

    def __init__(
        self,
        service: BaseGenerationService,
        rate_limiter: RateLimiter,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.service = service
        self.rate_limiter = rate_limiter
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    async def generate(self, prompt: str, max_retries: Optional[int] = None) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Prompt text
            max_retries: Attempt budget for this call (defaults to the configured one)

        Returns:
            Generated text

        Raises:
            GenerationError: RATE_LIMIT_EXCEEDED once the attempts are used up on
                throttling, UPSTREAM for any other failure
        """
        attempts = self.max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise ValueError("max_retries must be at least 1")

        for attempt in range(1, attempts + 1):
            await self.rate_limiter.acquire()
            try:
                return await self.service.generate(prompt)
            except GenerationThrottled as e:
                if attempt >= attempts:
                    logger.error(f"❌ Still throttled after {attempts} attempt(s), giving up")
                    raise GenerationError(GenerationErrorKind.RATE_LIMIT_EXCEEDED, e) from e
                delay = self.backoff_base**attempt
                logger.warning(
                    f"⏳ Throttled by {self.service.get_model_name()} "
                    f"(attempt {attempt}/{attempts}), retrying in {delay:.0f}s"
                )
                await self._sleep(delay)
            except Exception as e:
                logger.error(f"❌ Generation failed: {e}")
                raise GenerationError(GenerationErrorKind.UPSTREAM, e) from e

        # Unreachable: the loop either returns or raises
        raise GenerationError(GenerationErrorKind.UPSTREAM)
