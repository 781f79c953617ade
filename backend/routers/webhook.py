"""Messaging platform webhook endpoint."""

import asyncio
import logging
from typing import Optional

import schemas
from core import Settings, get_settings
from core.dependencies import get_event_handler
from domain.exceptions import InvalidSignatureError
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from infrastructure.messaging import verify_signature
from orchestration import WebhookEventHandler
from pydantic import ValidationError

router = APIRouter()
logger = logging.getLogger("WebhookRouter")


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    x_line_signature: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    handler: WebhookEventHandler = Depends(get_event_handler),
):
    """
    Receive a batch of events from the messaging platform.

    The body must carry a valid X-Line-Signature. Events are handled
    concurrently; summarize commands only start a background run, so the
    platform gets its answer quickly.
    """
    body = await request.body()

    if not settings.channel_secret:
        logger.error("CHANNEL_SECRET is not configured - rejecting webhook")
        raise InvalidSignatureError()
    if not verify_signature(settings.channel_secret, body, x_line_signature):
        logger.warning("Rejected webhook with invalid signature")
        raise InvalidSignatureError()

    try:
        payload = schemas.WebhookPayload.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Malformed webhook payload: {e.error_count()} error(s)")

    results = await asyncio.gather(*(handler.handle(event) for event in payload.events), return_exceptions=True)
    errors = [r for r in results if isinstance(r, Exception)]
    for error in errors:
        logger.error(f"💥 Error handling webhook event: {error!r}", exc_info=error)
    if errors:
        raise HTTPException(status_code=500, detail="Failed to handle webhook events")

    return {"status": "ok"}
