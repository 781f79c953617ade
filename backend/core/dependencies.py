"""Shared dependencies for FastAPI endpoints."""

from fastapi import Request
from infrastructure.sheets import SheetsCodeTable
from orchestration import SummarizeOrchestrator, WebhookEventHandler


def get_event_handler(request: Request) -> WebhookEventHandler:
    """
    Dependency to get the webhook event handler from app state.

    The instance is created during application startup in the lifespan context.
    """
    return request.app.state.event_handler


def get_code_table(request: Request) -> SheetsCodeTable:
    """Dependency to get the shared code table from app state."""
    return request.app.state.code_table


def get_summarize_orchestrator(request: Request) -> SummarizeOrchestrator:
    """Dependency to get the summarize orchestrator from app state."""
    return request.app.state.summarize_orchestrator
