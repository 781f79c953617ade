"""Test fixtures package."""

from tests.fixtures.digest_fixtures import (
    PROMPTS_PATH,
    TEST_CHANNEL_SECRET,
    FakeClock,
    fake_clock,
    mock_code_table,
    mock_generation_service,
    mock_messaging_client,
    mock_summarize_orchestrator,
    sign,
    utc,
)

__all__ = [
    "PROMPTS_PATH",
    "TEST_CHANNEL_SECRET",
    "FakeClock",
    "fake_clock",
    "mock_code_table",
    "mock_generation_service",
    "mock_messaging_client",
    "mock_summarize_orchestrator",
    "sign",
    "utc",
]
