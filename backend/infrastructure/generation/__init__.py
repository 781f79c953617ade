"""Text-generation providers."""

from .anthropic_service import AnthropicGenerationService
from .base import BaseGenerationService

__all__ = ["BaseGenerationService", "AnthropicGenerationService"]
