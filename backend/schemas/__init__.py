"""
Pydantic schemas for API request/response models.

This package organizes schemas by resource type:
- webhook.py: Inbound messaging platform events
- status.py: Status page and code table responses
"""

from schemas.status import CodeRowOut, CodeTableResponse, StatusResponse, StoredMessage
from schemas.webhook import EventMessage, EventSource, WebhookEvent, WebhookPayload

__all__ = [
    # Webhook
    "EventSource",
    "EventMessage",
    "WebhookEvent",
    "WebhookPayload",
    # Status
    "StoredMessage",
    "StatusResponse",
    "CodeRowOut",
    "CodeTableResponse",
]
