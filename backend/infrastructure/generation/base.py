"""Base text-generation service interface."""

from abc import ABC, abstractmethod


class BaseGenerationService(ABC):
    """Abstract base class for prompt -> text providers."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate text for a single prompt.

        Args:
            prompt: Fully rendered prompt

        Returns:
            Generated text

        Raises:
            GenerationThrottled: The provider rejected the call for quota/throttling
            Exception: Any other provider failure
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Get the name of the model being used."""
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None
