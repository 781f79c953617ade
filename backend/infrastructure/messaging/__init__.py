"""Messaging platform integration."""

from .line_client import (
    MAX_MESSAGES_PER_REQUEST,
    LineMessagingClient,
    compute_signature,
    verify_signature,
)

__all__ = [
    "LineMessagingClient",
    "MAX_MESSAGES_PER_REQUEST",
    "compute_signature",
    "verify_signature",
]
