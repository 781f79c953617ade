"""
Unit tests for the background maintenance scheduler.
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from infrastructure.scheduler import BackgroundScheduler


@pytest.fixture
def scheduler(mock_code_table, mock_summarize_orchestrator):
    background = BackgroundScheduler(mock_code_table, mock_summarize_orchestrator, code_table_refresh_minutes=30)
    background.scheduler = MagicMock()
    return background


class TestStartStop:
    @pytest.mark.unit
    def test_start_registers_both_jobs(self, scheduler):
        scheduler.start()

        job_ids = [c.kwargs["id"] for c in scheduler.scheduler.add_job.call_args_list]
        assert job_ids == ["refresh_code_table", "cleanup"]
        scheduler.scheduler.start.assert_called_once()
        assert scheduler.is_running

    @pytest.mark.unit
    def test_unconfigured_table_skips_refresh_job(self, scheduler, mock_code_table):
        mock_code_table.configured = False

        scheduler.start()

        job_ids = [c.kwargs["id"] for c in scheduler.scheduler.add_job.call_args_list]
        assert job_ids == ["cleanup"]

    @pytest.mark.unit
    def test_start_is_idempotent(self, scheduler):
        scheduler.start()
        scheduler.start()

        scheduler.scheduler.start.assert_called_once()

    @pytest.mark.unit
    def test_stop(self, scheduler):
        scheduler.stop()
        scheduler.scheduler.shutdown.assert_not_called()

        scheduler.start()
        scheduler.stop()

        scheduler.scheduler.shutdown.assert_called_once()
        assert not scheduler.is_running


class TestJobs:
    @pytest.mark.unit
    async def test_refresh_job_reloads_table(self, scheduler, mock_code_table):
        await scheduler._refresh_code_table()

        mock_code_table.refresh.assert_awaited_once()

    @pytest.mark.unit
    async def test_refresh_job_logs_http_errors(self, scheduler, mock_code_table, caplog):
        mock_code_table.refresh.side_effect = httpx.ConnectError("unreachable")

        await scheduler._refresh_code_table()

        assert "Scheduled code table refresh failed" in caplog.text

    @pytest.mark.unit
    async def test_cleanup_job(self, scheduler, mock_summarize_orchestrator):
        cache = MagicMock()
        with patch("infrastructure.scheduler.get_cache", return_value=cache):
            await scheduler._cleanup()

        cache.cleanup_expired.assert_called_once()
        mock_summarize_orchestrator.cleanup_finished_tasks.assert_called_once()

    @pytest.mark.unit
    async def test_refresh_job_logs_malformed_sheet(self, scheduler, mock_code_table, caplog):
        mock_code_table.refresh.side_effect = ValueError("Unexpected Sheets response")

        await scheduler._refresh_code_table()

        assert "Scheduled code table refresh failed" in caplog.text
