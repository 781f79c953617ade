"""
Services layer for business logic.

This package contains the building blocks of the digest pipeline and of
inbound message persistence.
"""

from .conversation_source import list_digest_conversations
from .delivery_dispatcher import DeliveryDispatcher
from .digest_formatter import DigestFormatter, conversation_label, load_prompt_templates, split_digest
from .generation_client import GenerationClient
from .message_ingestion import MessageIngestionService
from .message_selector import MessageSelector
from .profile_service import UNKNOWN_GROUP, UNKNOWN_USER, ProfileService

__all__ = [
    "DeliveryDispatcher",
    "DigestFormatter",
    "GenerationClient",
    "MessageIngestionService",
    "MessageSelector",
    "ProfileService",
    "UNKNOWN_GROUP",
    "UNKNOWN_USER",
    "conversation_label",
    "list_digest_conversations",
    "load_prompt_templates",
    "split_digest",
]
