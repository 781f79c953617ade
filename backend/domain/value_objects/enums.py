"""
Domain enums for type-safe constants.
"""

from enum import Enum


class ConversationKind(str, Enum):
    """Kind of conversation a message arrived in."""

    DIRECT = "direct"  # One-to-one chat with the bot
    GROUP = "group"  # Group or multi-person room

    def __str__(self) -> str:
        return self.value


class PromptTemplate(str, Enum):
    """Template family used to build summarization prompts."""

    CONCISE = "concise"  # Short neutral summary (same wording for every kind)
    HIGHLIGHTS = "highlights"  # Decisions and action items, worded per conversation kind

    def __str__(self) -> str:
        return self.value


class GenerationErrorKind(str, Enum):
    """Why a generation call ultimately failed."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"  # Throttled on every attempt
    UPSTREAM = "upstream"  # Any non-throttling failure

    def __str__(self) -> str:
        return self.value


class DeliveryMode(str, Enum):
    """How a batch of digest segments reached the user."""

    REPLY = "reply"  # Bound to the triggering event
    PUSH = "push"  # Sent to the originating conversation

    def __str__(self) -> str:
        return self.value
