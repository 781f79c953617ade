"""Status page and code table schemas."""

from datetime import datetime
from typing import List, Optional

from domain.value_objects.enums import ConversationKind
from pydantic import BaseModel, ConfigDict, field_serializer
from utils.serializers import serialize_utc_datetime as _serialize_utc_datetime


class StoredMessage(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: str
    conversation_kind: ConversationKind
    author_name: Optional[str] = None
    group_name: Optional[str] = None
    text: str
    timestamp: Optional[datetime] = None

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: Optional[datetime], _info):
        return _serialize_utc_datetime(dt)


class StatusResponse(BaseModel):
    """Health/status document served at the root path."""

    status: str = "ok"
    message_count: int
    messages: List[StoredMessage] = []


class CodeRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row: int
    status: str
    code: str
    link: str


class CodeTableResponse(BaseModel):
    configured: bool
    loaded: bool
    last_refreshed_at: Optional[datetime] = None
    rows: List[CodeRowOut] = []


__all__ = [
    "StoredMessage",
    "StatusResponse",
    "CodeRowOut",
    "CodeTableResponse",
]
