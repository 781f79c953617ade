"""Inbound webhook payload schemas."""

from typing import List, Optional

from domain.value_objects.contexts import InboundTextEvent
from domain.value_objects.enums import ConversationKind
from pydantic import BaseModel, ConfigDict, Field


class EventSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str  # "user", "group" or "room"
    user_id: Optional[str] = Field(default=None, alias="userId")
    group_id: Optional[str] = Field(default=None, alias="groupId")
    room_id: Optional[str] = Field(default=None, alias="roomId")

    @property
    def kind(self) -> ConversationKind:
        # Multi-person rooms behave like groups
        return ConversationKind.GROUP if self.type in ("group", "room") else ConversationKind.DIRECT

    @property
    def conversation_id(self) -> Optional[str]:
        if self.type == "group":
            return self.group_id
        if self.type == "room":
            return self.room_id
        return self.user_id


class EventMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str
    text: Optional[str] = None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    reply_token: Optional[str] = Field(default=None, alias="replyToken")
    source: Optional[EventSource] = None
    message: Optional[EventMessage] = None
    timestamp: Optional[int] = None  # Milliseconds since epoch

    def as_text_event(self) -> Optional[InboundTextEvent]:
        """The event as an InboundTextEvent, or None if it is not a text message."""
        if self.type != "message" or self.message is None or self.message.type != "text":
            return None
        if self.source is None or not self.reply_token or self.message.text is None:
            return None

        conversation_id = self.source.conversation_id
        if not conversation_id:
            return None

        kind = self.source.kind
        return InboundTextEvent(
            reply_token=self.reply_token,
            user_id=self.source.user_id,
            conversation_id=conversation_id,
            kind=kind,
            text=self.message.text,
            message_id=self.message.id,
            group_id=conversation_id if kind == ConversationKind.GROUP else None,
        )


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    destination: Optional[str] = None
    events: List[WebhookEvent] = []


__all__ = [
    "EventSource",
    "EventMessage",
    "WebhookEvent",
    "WebhookPayload",
]
