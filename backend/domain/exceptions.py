"""
Custom exception classes for the chat digest application.

These exceptions provide more specific error handling and better error messages
for common failure scenarios in the application.
"""

from typing import Optional

from fastapi import HTTPException, status

from domain.value_objects.enums import GenerationErrorKind


class InvalidSignatureError(HTTPException):
    """Raised when a webhook request body doesn't match its signature header."""

    def __init__(self):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature")


class CodeTableUnavailableError(HTTPException):
    """Raised when the code lookup table is not configured."""

    def __init__(self, reason: str):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Code table unavailable: {reason}")


class ConfigurationError(ValueError):
    """Raised when there's an error in configuration parsing or validation."""

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}")


class SelectionError(Exception):
    """Raised when messages for a conversation cannot be read from the store."""

    def __init__(self, conversation_id: str, cause: Optional[BaseException] = None):
        self.conversation_id = conversation_id
        self.cause = cause
        super().__init__(f"Failed to select messages for conversation {conversation_id}: {cause}")


class GenerationThrottled(Exception):
    """Raised by a generation provider when the request was rejected for quota/throttling."""


class GenerationError(Exception):
    """Raised when the generation client gives up on a prompt."""

    def __init__(self, kind: GenerationErrorKind, cause: Optional[BaseException] = None):
        self.kind = kind
        self.cause = cause
        super().__init__(f"Generation failed ({kind}): {cause}")

    @property
    def is_rate_limited(self) -> bool:
        return self.kind == GenerationErrorKind.RATE_LIMIT_EXCEEDED


class DeliveryError(Exception):
    """Raised when the messaging platform rejects an outbound message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ReplyExpiredError(DeliveryError):
    """Raised when a reply token is stale or has already been used."""
