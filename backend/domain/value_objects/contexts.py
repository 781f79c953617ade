"""
Consolidated context data structures.

Contains the context dataclasses passed between the webhook layer, the
ingestion services and the digest pipeline.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import ConversationKind


@dataclass(frozen=True)
class InboundTextEvent:
    """
    A text message event received from the messaging platform.

    Attributes:
        reply_token: Single-use token for replying to this event
        user_id: Platform id of the author
        conversation_id: Group/room id for group chats, user id for direct chats
        kind: Conversation kind derived from the event source
        text: Message text
        message_id: Platform message id
        group_id: Group/room id when the event came from a group
    """

    reply_token: str
    user_id: Optional[str]
    conversation_id: str
    kind: ConversationKind
    text: str
    message_id: Optional[str] = None
    group_id: Optional[str] = None


@dataclass(frozen=True)
class AuthorProfile:
    """
    Display information resolved for the author of an inbound message.

    A field is None when the platform lookup failed.
    """

    display_name: Optional[str] = None
    group_name: Optional[str] = None


@dataclass(frozen=True)
class ConversationRef:
    """
    A conversation as seen by the digest pipeline.

    Attributes:
        id: Conversation id
        kind: Conversation kind
        label: Group name or participant name, if known
    """

    id: str
    kind: ConversationKind
    label: Optional[str] = None


@dataclass(frozen=True)
class MessageSnapshot:
    """Read-only view of a stored message used for selection and prompting."""

    id: int
    text: str
    author_name: Optional[str]
    timestamp: Optional[datetime]
    kind: ConversationKind
    group_name: Optional[str] = None


@dataclass(frozen=True)
class TriggerRecordData:
    """Fields of a trigger record to append to the store."""

    command_text: str
    user_id: Optional[str]
    display_name: str
    conversation_id: str
    conversation_kind: ConversationKind
