"""
Application factory for creating FastAPI app instances.

This module provides functions for creating and configuring the FastAPI application
with all necessary middleware, routers, and dependencies.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from infrastructure.database import get_db, init_db
from infrastructure.generation import AnthropicGenerationService
from infrastructure.messaging import LineMessagingClient
from infrastructure.rate_limiter import RateLimiter
from infrastructure.scheduler import BackgroundScheduler
from infrastructure.sheets import SheetsCodeTable
from orchestration import BatchScheduler, SummarizeOrchestrator, WebhookEventHandler
from services import (
    DeliveryDispatcher,
    DigestFormatter,
    GenerationClient,
    MessageIngestionService,
    MessageSelector,
    ProfileService,
)

from core import get_logger, get_settings

logger = get_logger("AppFactory")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    from routers import status, webhook
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    settings = get_settings()

    # Create lifespan context manager
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for application startup and shutdown."""
        # Startup
        logger.info("🚀 Application startup...")

        # Initialize database
        await init_db()

        if not settings.anthropic_api_key:
            logger.warning("⚠️ ANTHROPIC_API_KEY is not set - summarize commands will fail")

        # Create singleton instances
        rate_limiter = RateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)
        generation_service = AnthropicGenerationService(
            api_key=settings.anthropic_api_key,
            model=settings.generation_model,
            max_tokens=settings.generation_max_tokens,
        )
        messaging_client = LineMessagingClient(
            settings.channel_access_token,
            api_base=settings.line_api_base,
            timeout=settings.line_request_timeout,
        )
        code_table = SheetsCodeTable(settings.spreadsheet_id, settings.google_api_key, settings.code_table_range)

        profile_service = ProfileService(messaging_client)
        dispatcher = DeliveryDispatcher(messaging_client)
        selector = MessageSelector(
            get_db,
            trigger_command=settings.summarize_command,
            first_run_limit=settings.first_run_message_limit,
            superset_limit=settings.selection_superset_limit,
        )
        batch_scheduler = BatchScheduler(
            selector=selector,
            formatter=DigestFormatter(settings.prompts_config_path, settings.prompt_template),
            generation_client=GenerationClient(
                generation_service, rate_limiter, max_retries=settings.generation_max_retries
            ),
            dispatcher=dispatcher,
            batch_size=settings.batch_size,
            inter_batch_delay_seconds=settings.inter_batch_delay_seconds,
            max_segment_length=settings.max_segment_length,
        )
        summarize_orchestrator = SummarizeOrchestrator(
            get_db_session=get_db,
            selector=selector,
            batch_scheduler=batch_scheduler,
            dispatcher=dispatcher,
            profile_service=profile_service,
        )
        event_handler = WebhookEventHandler(
            get_db_session=get_db,
            summarize_orchestrator=summarize_orchestrator,
            ingestion_service=MessageIngestionService(profile_service),
            code_table=code_table,
            messaging_client=messaging_client,
            summarize_command=settings.summarize_command,
        )
        background_scheduler = BackgroundScheduler(
            code_table=code_table,
            summarize_orchestrator=summarize_orchestrator,
            code_table_refresh_minutes=settings.code_table_refresh_minutes,
        )

        logger.info(
            f"📚 Digest settings: batch size {settings.batch_size}, "
            f"{settings.rate_limit_max_requests} requests / {settings.rate_limit_window_seconds:.0f}s, "
            f"template '{settings.prompt_template}'"
        )

        # Store in app state for dependency injection
        app.state.rate_limiter = rate_limiter
        app.state.code_table = code_table
        app.state.summarize_orchestrator = summarize_orchestrator
        app.state.event_handler = event_handler
        app.state.background_scheduler = background_scheduler

        # Load the code table up front so the first lookup doesn't pay for it
        await code_table.ensure_loaded()

        # Start background scheduler
        background_scheduler.start()

        logger.info("✅ Application startup complete")

        yield

        # Shutdown
        logger.info("🛑 Application shutdown...")
        background_scheduler.stop()
        await summarize_orchestrator.shutdown()
        await code_table.aclose()
        await messaging_client.aclose()
        await generation_service.aclose()
        logger.info("✅ Application shutdown complete")

    # Create app with lifespan
    app = FastAPI(title="Chat Digest Relay", lifespan=lifespan)
    app.state.limiter = status.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Register routers
    app.include_router(webhook.router, tags=["Webhook"])
    app.include_router(status.router, tags=["Status"])

    return app
