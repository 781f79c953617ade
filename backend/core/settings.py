"""
Centralized application settings using Pydantic BaseSettings.

This module provides type-safe access to environment variables with validation.
All settings are loaded once at application startup.
"""

import re
from pathlib import Path
from typing import Optional

from domain.value_objects.enums import PromptTemplate
from pydantic import field_validator
from pydantic_settings import BaseSettings


def _get_base_path() -> Path:
    """Get the project root (parent of backend/)."""
    return Path(__file__).parent.parent.parent


# ============================================================================
# Application Constants
# ============================================================================

# Text that triggers a digest run (matched case-insensitively)
SUMMARIZE_COMMAND = "/summarize"

# Messaging API limits
LINE_MAX_MESSAGES_PER_REQUEST = 5

# User-facing notices
NO_UPDATES_TEXT = "No more updates"
NO_MESSAGES_TEXT = "No messages found in database. Try sending some messages first!"
RATE_LIMITED_TEXT = "The summary service is busy right now. Please try again in a few minutes."
GENERATION_FAILED_TEXT = "Sorry, I encountered an error while generating the summary."

SPREADSHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults and are validated on startup.
    """

    # Storage
    database_url: str = "sqlite+aiosqlite:///./chat_digest.db"

    # Messaging platform
    channel_secret: Optional[str] = None
    channel_access_token: Optional[str] = None
    line_api_base: str = "https://api.line.me"
    line_request_timeout: float = 10.0

    # Text generation
    anthropic_api_key: Optional[str] = None
    generation_model: str = "claude-sonnet-4-20250514"
    generation_max_tokens: int = 1024
    generation_max_retries: int = 3

    # Rate limiting (requests per sliding window)
    rate_limit_max_requests: int = 15
    rate_limit_window_seconds: float = 60.0

    # Digest scheduling
    summarize_command: str = SUMMARIZE_COMMAND
    batch_size: int = 15
    inter_batch_delay_seconds: float = 60.0
    max_segment_length: int = 4000
    first_run_message_limit: int = 30
    selection_superset_limit: int = 100
    prompt_template: PromptTemplate = PromptTemplate.CONCISE

    # Code lookup table
    code_table_url: Optional[str] = None
    google_api_key: Optional[str] = None
    code_table_range: str = "A:C"
    code_table_refresh_minutes: int = 30

    # Debug configuration
    debug: bool = False

    @field_validator("debug", mode="before")
    @classmethod
    def validate_debug(cls, v: Optional[str]) -> bool:
        """Parse debug from string to bool."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() == "true"
        return False

    @field_validator("batch_size", "rate_limit_max_requests", "generation_max_retries")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Reject zero or negative counts."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return _get_base_path()

    @property
    def backend_dir(self) -> Path:
        """Get the backend directory."""
        return Path(__file__).parent.parent

    @property
    def prompts_config_path(self) -> Path:
        """
        Get the path to the digest prompt templates.

        Returns:
            Path to services/templates/digest_prompts.yaml
        """
        return self.backend_dir / "services" / "templates" / "digest_prompts.yaml"

    @property
    def spreadsheet_id(self) -> Optional[str]:
        """
        Extract the spreadsheet id from the configured code table URL.

        Returns:
            Spreadsheet id, or None if no URL is set or it doesn't match
        """
        if not self.code_table_url:
            return None
        match = SPREADSHEET_ID_PATTERN.search(self.code_table_url)
        return match.group(1) if match else None

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        # Allow extra fields for forward compatibility
        extra = "ignore"


# Singleton instance - load settings once at module import
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()

        # Find .env file in project root using settings path properties
        env_path = _settings.project_root / ".env"

        # Reload settings with explicit env file path if it exists
        if env_path.exists():
            _settings = Settings(_env_file=str(env_path))

    return _settings


def reset_settings() -> None:
    """
    Reset the settings singleton (useful for testing).
    """
    global _settings
    _settings = None
