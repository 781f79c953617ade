"""
CRUD operations for TriggerRecord entities.

Trigger records are append-only. The newest one, across all conversations,
is the watermark for the next digest run.
"""

from typing import Optional

from domain.value_objects.contexts import TriggerRecordData
from infrastructure.database import models
from infrastructure.database.connection import retry_on_db_lock, serialized_commit
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select


@retry_on_db_lock(max_retries=5, initial_delay=0.1, backoff_factor=2)
async def append_trigger_record(db: AsyncSession, record: TriggerRecordData) -> int:
    """
    Append a trigger record.

    Returns:
        Id of the stored record
    """
    db_record = models.TriggerRecord(
        command_text=record.command_text,
        user_id=record.user_id,
        display_name=record.display_name,
        conversation_id=record.conversation_id,
        conversation_kind=record.conversation_kind,
    )
    db.add(db_record)

    await serialized_commit(db)
    await db.refresh(db_record)
    return db_record.id


async def last_trigger_record(db: AsyncSession) -> Optional[models.TriggerRecord]:
    """Get the most recent trigger record system-wide, or None if there has never been one."""
    result = await db.execute(
        select(models.TriggerRecord)
        .order_by(models.TriggerRecord.timestamp.desc(), models.TriggerRecord.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
