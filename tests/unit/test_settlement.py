"""
tests/unit/test_settlement.py - Settlement status classification and polling.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from config import ExecutionSettings
from core.constants import ExecutionStatus
from core.exceptions import StatusError
from core.models import StatusRecord
from execution.settlement import classify_settlement_status, poll_settlement


def _record(status):
    return StatusRecord(request_id="0xreq", status=status, raw={"status": status})


@pytest.fixture
def no_sleep():
    with patch("execution.settlement.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestClassifySettlementStatus:

    @pytest.mark.parametrize("raw", ["success", "complete", "filled"])
    def test_success(self, raw):
        assert classify_settlement_status(raw) == ExecutionStatus.COMPLETE

    @pytest.mark.parametrize("raw", ["failed", "refunded"])
    def test_failure(self, raw):
        assert classify_settlement_status(raw) == ExecutionStatus.FAILED

    @pytest.mark.parametrize("raw", ["SUCCESS", " Filled ", "Refunded", "FAILED", "complete "])
    def test_case_and_whitespace_variants_keep_polling(self, raw):
        assert classify_settlement_status(raw) == ExecutionStatus.EXECUTING

    @pytest.mark.parametrize("raw", [{"status": "success"}, ["filled"], 1])
    def test_non_string_keeps_polling(self, raw):
        assert classify_settlement_status(raw) == ExecutionStatus.EXECUTING

    @pytest.mark.parametrize("raw", ["pending", "waiting", "delayed", "", None, "something-new"])
    def test_everything_else_keeps_polling(self, raw):
        assert classify_settlement_status(raw) == ExecutionStatus.EXECUTING


class TestPollSettlement:

    @pytest.mark.asyncio
    async def test_returns_on_success(self, no_sleep):
        client = MagicMock()
        client.get_status = AsyncMock(side_effect=[_record("pending"), _record("success")])
        pending = []

        result = await poll_settlement(client, "0xreq", on_pending=pending.append)

        assert result.status == ExecutionStatus.COMPLETE
        assert result.attempts == 2
        assert result.raw_status == "success"
        assert pending == ["pending"]
        client.get_status.assert_awaited_with("0xreq")

    @pytest.mark.asyncio
    async def test_refunded_is_failed(self, no_sleep):
        client = MagicMock()
        client.get_status = AsyncMock(return_value=_record("refunded"))

        result = await poll_settlement(client, "0xreq")

        assert result.status == ExecutionStatus.FAILED
        assert result.attempts == 1

    @pytest.mark.asyncio
    async def test_sleeps_before_each_query(self, no_sleep):
        client = MagicMock()
        client.get_status = AsyncMock(return_value=_record("filled"))

        await poll_settlement(client, "0xreq", settings=ExecutionSettings(poll_interval_seconds=3.0))

        no_sleep.assert_awaited_once_with(3.0)

    @pytest.mark.asyncio
    async def test_times_out_after_max_attempts(self, no_sleep):
        """60 pending responses: exactly 60 queries, then timeout."""
        client = MagicMock()
        client.get_status = AsyncMock(return_value=_record("pending"))
        pending = []

        result = await poll_settlement(client, "0xreq", on_pending=pending.append)

        assert result.status == ExecutionStatus.TIMEOUT
        assert result.attempts == 60
        assert client.get_status.await_count == 60
        assert no_sleep.await_count == 60
        assert len(pending) == 60

    @pytest.mark.asyncio
    async def test_transient_errors_do_not_abort(self, no_sleep):
        client = MagicMock()
        client.get_status = AsyncMock(side_effect=[
            StatusError("Failed to get status: 502"),
            RuntimeError("connection reset"),
            _record("success"),
        ])

        result = await poll_settlement(client, "0xreq")

        assert result.status == ExecutionStatus.COMPLETE
        assert result.attempts == 3

    @pytest.mark.asyncio
    async def test_all_errors_time_out(self, no_sleep):
        client = MagicMock()
        client.get_status = AsyncMock(side_effect=StatusError("down"))

        result = await poll_settlement(client, "0xreq", settings=ExecutionSettings(max_poll_attempts=3))

        assert result.status == ExecutionStatus.TIMEOUT
        assert result.attempts == 3
        assert result.raw_status is None
