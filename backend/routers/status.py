"""Status page and code table routes."""

import logging

import crud
import httpx
import schemas
from core.dependencies import get_code_table
from domain.exceptions import CodeTableUnavailableError
from fastapi import APIRouter, Depends, HTTPException, Request
from infrastructure.database import get_db
from infrastructure.sheets import SheetsCodeTable
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter()
logger = logging.getLogger("StatusRouter")

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)


def _code_table_response(code_table: SheetsCodeTable) -> schemas.CodeTableResponse:
    return schemas.CodeTableResponse(
        configured=code_table.configured,
        loaded=code_table.is_loaded,
        last_refreshed_at=code_table.last_refreshed_at,
        rows=[schemas.CodeRowOut.model_validate(row) for row in code_table.rows],
    )


@router.get("/", response_model=schemas.StatusResponse)
@limiter.limit("30/minute")
async def status(request: Request, db: AsyncSession = Depends(get_db)):
    """Service status with the most recent stored messages."""
    messages = await crud.get_recent_messages(db, per_conversation=10, total=20)
    return schemas.StatusResponse(
        message_count=len(messages),
        messages=[schemas.StoredMessage.model_validate(m) for m in messages],
    )


@router.get("/sheets", response_model=schemas.CodeTableResponse)
async def get_sheets(code_table: SheetsCodeTable = Depends(get_code_table)):
    """Current contents of the code table (loaded on first access)."""
    if not code_table.configured:
        raise CodeTableUnavailableError("not configured")
    await code_table.ensure_loaded()
    return _code_table_response(code_table)


@router.post("/sheets/refresh", response_model=schemas.CodeTableResponse)
@limiter.limit("10/minute")
async def refresh_sheets(request: Request, code_table: SheetsCodeTable = Depends(get_code_table)):
    """Reload the code table from the spreadsheet."""
    if not code_table.configured:
        raise CodeTableUnavailableError("not configured")
    try:
        await code_table.refresh()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Code table refresh failed: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to load spreadsheet: {e}")
    return _code_table_response(code_table)
