"""
Domain value objects - immutable types and enums.
"""

from .contexts import (
    AuthorProfile,
    ConversationRef,
    InboundTextEvent,
    MessageSnapshot,
    TriggerRecordData,
)
from .enums import ConversationKind, DeliveryMode, GenerationErrorKind, PromptTemplate
from .slash_commands import ParsedCommand, SlashCommandType, is_trigger_command, parse_slash_command

__all__ = [
    # contexts.py
    "InboundTextEvent",
    "AuthorProfile",
    "ConversationRef",
    "MessageSnapshot",
    "TriggerRecordData",
    # enums.py
    "ConversationKind",
    "PromptTemplate",
    "GenerationErrorKind",
    "DeliveryMode",
    # slash_commands.py
    "SlashCommandType",
    "ParsedCommand",
    "parse_slash_command",
    "is_trigger_command",
]
