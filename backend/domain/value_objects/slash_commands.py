"""
Slash command parser for inbound chat text.

Recognizes the digest trigger so the webhook layer can route it before the
text is stored as an ordinary message.
"""

from dataclasses import dataclass
from enum import Enum


class SlashCommandType(Enum):
    """Types of slash commands supported."""

    SUMMARIZE = "summarize"  # Produce a digest of unsummarized activity
    NONE = "none"  # Not a slash command


@dataclass
class ParsedCommand:
    """Result of parsing a slash command."""

    command_type: SlashCommandType


def is_trigger_command(text: str | None, command: str) -> bool:
    """Case-insensitive exact match against the trigger command."""
    if not text:
        return False
    return text.lower() == command.lower()


def parse_slash_command(text: str, summarize_command: str = "/summarize") -> ParsedCommand:
    """
    Parse message text for slash commands.

    Args:
        text: The inbound message text
        summarize_command: Configured digest trigger

    Returns:
        ParsedCommand with the command type

    Examples:
        >>> parse_slash_command("/SUMMARIZE")
        ParsedCommand(command_type=<SlashCommandType.SUMMARIZE: 'summarize'>)
        >>> parse_slash_command("hello world")
        ParsedCommand(command_type=<SlashCommandType.NONE: 'none'>)
    """
    if is_trigger_command(text, summarize_command):
        return ParsedCommand(SlashCommandType.SUMMARIZE)

    return ParsedCommand(SlashCommandType.NONE)
