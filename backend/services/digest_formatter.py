"""
Digest formatting.

Turns selected messages into a generation prompt, renders the summaries of a
batch into one digest text and splits that text into platform-sized segments.

Prompt text comes from services/templates/digest_prompts.yaml. The file is
cached and reloaded only when its modification time changes.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from domain.entities import DigestEntry
from domain.exceptions import ConfigurationError
from domain.value_objects.contexts import ConversationRef, MessageSnapshot
from domain.value_objects.enums import ConversationKind, PromptTemplate
from ruamel.yaml import YAML

yaml = YAML(typ="safe", pure=True)
logger = logging.getLogger("DigestFormatter")

DEFAULT_AUTHOR = "User"
DIGEST_HEADER = "📋 **Conversation Summaries**"
ENTRY_SEPARATOR = "\n---\n\n"

# Cache for loaded templates: path -> (mtime, templates)
_template_cache: Dict[str, tuple[float, Dict[str, Any]]] = {}


def load_prompt_templates(file_path: Path, force_reload: bool = False) -> Dict[str, Any]:
    """
    Load the prompt template families, reusing the cached copy while the file is unchanged.

    Raises:
        ConfigurationError: The file is missing or is not a mapping
    """
    cache_key = str(file_path)
    try:
        current_mtime = file_path.stat().st_mtime
    except FileNotFoundError as e:
        raise ConfigurationError(f"prompt template file not found: {file_path}") from e

    if not force_reload and cache_key in _template_cache:
        cached_mtime, cached = _template_cache[cache_key]
        if cached_mtime == current_mtime:
            return cached

    with open(file_path, "r", encoding="utf-8") as f:
        templates = yaml.load(f)
    if not isinstance(templates, dict):
        raise ConfigurationError(f"prompt template file must contain a mapping: {file_path}")

    _template_cache[cache_key] = (current_mtime, templates)
    logger.debug(f"Loaded prompt templates from {file_path}")
    return templates


def clear_template_cache():
    _template_cache.clear()


def conversation_label(conversation: ConversationRef, messages: Sequence[MessageSnapshot]) -> str:
    """
    Name shown for a conversation in prompts and digests.

    Uses the stored label, then the snapshot on the first message (group name
    for groups, author for direct chats).
    """
    if conversation.label:
        return conversation.label
    first = messages[0] if messages else None
    if conversation.kind == ConversationKind.GROUP:
        return (first.group_name if first else None) or "Unknown Group"
    return (first.author_name if first else None) or "Direct Chat"


def split_digest(text: str, max_length: int = 4000) -> list[str]:
    """
    Split text into segments of at most max_length characters on line boundaries.

    Lines are accumulated greedily. A line that is longer than max_length on
    its own becomes a single oversized segment; lines are never cut. Each
    segment is stripped and empty segments are dropped.
    """
    if not text or not text.strip():
        return []

    segments: list[str] = []
    current: list[str] = []
    current_length = 0

    for line in text.split("\n"):
        candidate_length = current_length + 1 + len(line) if current else len(line)
        if current and candidate_length > max_length:
            segments.append("\n".join(current))
            current = [line]
            current_length = len(line)
        else:
            current.append(line)
            current_length = candidate_length

    if current:
        segments.append("\n".join(current))

    return [segment.strip() for segment in segments if segment.strip()]


class DigestFormatter:
    """Builds prompts and digest texts using one prompt template family."""

    def __init__(self, templates_path: Path, template: PromptTemplate = PromptTemplate.CONCISE):
        self.templates_path = templates_path
        self.template = template

    def _template_for(self, kind: ConversationKind, template: Optional[PromptTemplate] = None) -> str:
        family_name = str(template or self.template)
        family = load_prompt_templates(self.templates_path).get(family_name)
        if not isinstance(family, dict):
            raise ConfigurationError(f"unknown prompt template family '{family_name}'")

        text = family.get(str(kind)) or family.get("default")
        if not text:
            raise ConfigurationError(f"prompt template '{family_name}' has no entry for '{kind}' and no default")
        return text

    def format_prompt(
        self,
        label: str,
        messages: Sequence[MessageSnapshot],
        kind: ConversationKind,
        template: Optional[PromptTemplate] = None,
    ) -> str:
        """
        Build the generation prompt for one conversation.

        Args:
            label: Conversation label named in the instruction
            messages: Messages in chronological order
            kind: Conversation kind (selects the template variant)
            template: Template family override (defaults to the configured one)

        Returns:
            Prompt text
        """
        conversation = "\n".join(f"{message.author_name or DEFAULT_AUTHOR}: {message.text}" for message in messages)
        return self._template_for(kind, template).format(label=label, conversation=conversation)

    @staticmethod
    def render_digest(entries: Sequence[DigestEntry], batch_index: int = 1) -> str:
        """Render the summaries of one batch into a single digest text."""
        header = DIGEST_HEADER if batch_index <= 1 else f"{DIGEST_HEADER} (part {batch_index})"
        body = ENTRY_SEPARATOR.join(f"📝 **{entry.label}**\n{entry.summary}\n" for entry in entries)
        return f"{header}\n\n{body}"
