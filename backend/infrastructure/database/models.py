from datetime import datetime, timezone

from domain.value_objects.enums import ConversationKind
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_conversation_kind = Enum(ConversationKind, values_callable=lambda x: [e.value for e in x])


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String, primary_key=True)  # Group/room id or user id
    kind = Column(_conversation_kind, nullable=False)
    label = Column(String, nullable=True)  # Group name (group) or participant name (direct)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    last_activity_at = Column(DateTime(timezone=True), default=_utcnow, index=True)

    messages = relationship("Message", back_populates="conversation", cascade="all, delete-orphan")


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_conversation_timestamp", "conversation_id", "timestamp"),)

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(String, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    platform_message_id = Column(String, nullable=True)
    text = Column(Text, nullable=False)
    author_name = Column(String, nullable=True)
    user_id = Column(String, nullable=True)
    conversation_kind = Column(_conversation_kind, nullable=False)  # Snapshot at write time
    group_name = Column(String, nullable=True)  # Snapshot at write time
    timestamp = Column(DateTime(timezone=True), default=_utcnow, nullable=True)

    conversation = relationship("Conversation", back_populates="messages")


class TriggerRecord(Base):
    __tablename__ = "trigger_records"

    id = Column(Integer, primary_key=True, index=True)
    command_text = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    user_id = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    conversation_id = Column(String, nullable=False)  # Where the command was sent (not a FK: may be unseen)
    conversation_kind = Column(_conversation_kind, nullable=False)
