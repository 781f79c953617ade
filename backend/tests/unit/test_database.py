"""
Unit tests for database module.

Tests URL detection, SQLite write serialization, retry logic and session helpers.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from infrastructure.database.connection import (
    DATABASE_TYPE,
    _commit_lock,
    get_database_type,
    get_db,
    retry_on_db_lock,
    serialized_commit,
    session_scope,
)
from sqlalchemy.ext.asyncio import AsyncSession


class TestGetDatabaseType:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("sqlite+aiosqlite:///./chat_digest.db", "sqlite"),
            ("postgresql+asyncpg://user:pw@localhost:5432/digest", "postgresql"),
            ("mysql://localhost/db", "unknown"),
        ],
    )
    def test_detects_backend(self, url, expected):
        assert get_database_type(url) == expected


class TestRetryOnDbLock:
    """Tests for retry_on_db_lock decorator."""

    @pytest.mark.unit
    async def test_returns_result_without_retry(self):
        calls = []

        @retry_on_db_lock(max_retries=3)
        async def operation():
            calls.append(1)
            return "stored"

        assert await operation() == "stored"
        assert len(calls) == 1

    @pytest.mark.unit
    async def test_other_errors_are_not_retried(self):
        calls = []

        @retry_on_db_lock(max_retries=3)
        async def operation():
            calls.append(1)
            raise ValueError("constraint failed")

        with pytest.raises(ValueError):
            await operation()
        assert len(calls) == 1

    @pytest.mark.unit
    async def test_locked_database_is_retried(self):
        if DATABASE_TYPE != "sqlite":
            pytest.skip("retry logic only active for SQLite")

        calls = []

        @retry_on_db_lock(max_retries=3, initial_delay=0.01)
        async def operation():
            calls.append(1)
            if len(calls) < 3:
                raise Exception("database is locked")
            return "stored"

        assert await operation() == "stored"
        assert len(calls) == 3

    @pytest.mark.unit
    async def test_gives_up_after_max_retries(self):
        if DATABASE_TYPE != "sqlite":
            pytest.skip("retry logic only active for SQLite")

        @retry_on_db_lock(max_retries=2, initial_delay=0.01)
        async def operation():
            raise Exception("database is locked")

        with pytest.raises(Exception, match="database is locked"):
            await operation()


class TestSerializedCommit:
    @pytest.mark.unit
    async def test_commits_do_not_interleave(self):
        if DATABASE_TYPE != "sqlite":
            pytest.skip("serialization only active for SQLite")

        events = []

        def session(n: int):
            async def commit():
                events.append(("start", n))
                await asyncio.sleep(0.01)
                events.append(("end", n))

            db = MagicMock()
            db.commit = commit
            return db

        await asyncio.gather(*(serialized_commit(session(i)) for i in range(3)))

        for i in range(0, len(events), 2):
            assert events[i][0] == "start"
            assert events[i + 1] == ("end", events[i][1])

    @pytest.mark.unit
    async def test_each_event_loop_gets_its_own_lock(self):
        async def current_lock():
            return _commit_lock()

        def lock_on_new_loop():
            loop = asyncio.new_event_loop()
            try:
                return loop.run_until_complete(current_lock())
            finally:
                loop.close()

        other = await asyncio.to_thread(lock_on_new_loop)

        assert _commit_lock() is _commit_lock()
        assert other is not _commit_lock()


class TestSessionHelpers:
    @pytest.mark.unit
    async def test_get_db_yields_session(self):
        session_gen = get_db()
        session = await anext(session_gen)
        assert isinstance(session, AsyncSession)
        await session_gen.aclose()

    @pytest.mark.unit
    async def test_session_scope_closes_generator(self):
        closed = []

        async def fake_get_db():
            try:
                yield "session"
            finally:
                closed.append(True)

        async with session_scope(fake_get_db) as db:
            assert db == "session"
            assert closed == []

        assert closed == [True]

    @pytest.mark.unit
    async def test_session_scope_closes_on_error(self):
        closed = []

        async def fake_get_db():
            try:
                yield "session"
            finally:
                closed.append(True)

        with pytest.raises(RuntimeError):
            async with session_scope(fake_get_db):
                raise RuntimeError("boom")

        assert closed == [True]
