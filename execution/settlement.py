# PATH: execution/settlement.py
"""
Settlement status polling.

STATUS CLASSIFICATION TABLE:
============================
  raw status                      → ExecutionStatus
  success | complete | filled     → complete
  failed | refunded               → failed
  anything else (incl. missing)   → executing (keep polling)

Matching is exact. Case or whitespace variants and unknown strings
are never treated as terminal.
============================
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from config import ExecutionSettings
from core.constants import (
    ExecutionStatus,
    SETTLEMENT_FAILURE_STATUSES,
    SETTLEMENT_SUCCESS_STATUSES,
)
from core.exceptions import ErrorCode
from core.logging import get_logger
from core.models import StatusRecord


logger = get_logger("xleg.execution.settlement")


class StatusSource(Protocol):
    async def get_status(self, request_id: str) -> StatusRecord:
        ...


def classify_settlement_status(raw_status: Optional[str]) -> ExecutionStatus:
    """Map a raw settlement status string to complete / failed / executing."""
    if not isinstance(raw_status, str):
        return ExecutionStatus.EXECUTING
    if raw_status in SETTLEMENT_SUCCESS_STATUSES:
        return ExecutionStatus.COMPLETE
    if raw_status in SETTLEMENT_FAILURE_STATUSES:
        return ExecutionStatus.FAILED
    return ExecutionStatus.EXECUTING


@dataclass
class PollResult:
    """Outcome of the poll loop."""
    status: ExecutionStatus
    attempts: int
    raw_status: Optional[str] = None
    record: Optional[Dict[str, Any]] = None


async def poll_settlement(
    client: StatusSource,
    request_id: str,
    on_pending: Optional[Callable[[Optional[str]], None]] = None,
    settings: Optional[ExecutionSettings] = None,
) -> PollResult:
    """
    Poll settlement status until it is terminal or attempts run out.

    Each attempt sleeps poll_interval_seconds first, then queries.
    A failed status call is logged and counts as an attempt; it never
    aborts the loop.

    Returns:
        PollResult with COMPLETE, FAILED or TIMEOUT
    """
    settings = settings or ExecutionSettings()
    last_raw: Optional[str] = None
    last_record: Optional[Dict[str, Any]] = None

    for attempt in range(1, settings.max_poll_attempts + 1):
        await asyncio.sleep(settings.poll_interval_seconds)

        try:
            record = await client.get_status(request_id)
        except Exception as e:
            logger.warning(
                f"Status poll error: {e}",
                extra={"context": {
                    "request_id": request_id,
                    "attempt": attempt,
                    "error_code": ErrorCode.STATUS_POLL_TRANSIENT.value,
                }},
            )
            continue

        last_raw = record.status
        last_record = record.raw
        classified = classify_settlement_status(record.status)

        if classified.is_terminal:
            return PollResult(
                status=classified,
                attempts=attempt,
                raw_status=last_raw,
                record=last_record,
            )

        if on_pending:
            on_pending(record.status)

    logger.warning(
        "Settlement status polling timed out",
        extra={"context": {
            "request_id": request_id,
            "attempts": settings.max_poll_attempts,
            "last_status": last_raw,
            "error_code": ErrorCode.STATUS_POLL_TIMEOUT.value,
        }},
    )
    return PollResult(
        status=ExecutionStatus.TIMEOUT,
        attempts=settings.max_poll_attempts,
        raw_status=last_raw,
        record=last_record,
    )
