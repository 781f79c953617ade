"""
Domain layer for internal business logic data structures.

This package contains dataclasses used for clean parameter passing
between functions in the business logic layer.

Structure:
- entities/: Digest pipeline results (entries, batch outcomes, run summary)
- value_objects/: Immutable types and enums (ConversationKind, contexts, etc.)
- exceptions.py: Error taxonomy shared by services and routers
"""

from .entities import BatchOutcome, DigestEntry, DigestRunResult
from .value_objects import (
    AuthorProfile,
    ConversationKind,
    ConversationRef,
    DeliveryMode,
    GenerationErrorKind,
    InboundTextEvent,
    MessageSnapshot,
    ParsedCommand,
    PromptTemplate,
    SlashCommandType,
    TriggerRecordData,
    is_trigger_command,
    parse_slash_command,
)

__all__ = [
    # Entities
    "DigestEntry",
    "BatchOutcome",
    "DigestRunResult",
    # Value objects - contexts
    "InboundTextEvent",
    "AuthorProfile",
    "ConversationRef",
    "MessageSnapshot",
    "TriggerRecordData",
    # Value objects - enums
    "ConversationKind",
    "PromptTemplate",
    "GenerationErrorKind",
    "DeliveryMode",
    # Value objects - slash commands
    "SlashCommandType",
    "ParsedCommand",
    "parse_slash_command",
    "is_trigger_command",
]
