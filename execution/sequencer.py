# PATH: execution/sequencer.py
"""
Multi-leg sequencer.

SEQUENCING CONTRACT:
====================
- Legs run one at a time, in the given order. The signer is a single
  human approving prompts, so legs never overlap even when they touch
  unrelated chains.
- Before each leg: `starting` event ("Executing leg i of n").
- Leg events are forwarded re-tagged with leg_index / total_legs.
- complete → `complete` event for the leg, continue.
- failed / error / timeout / unexpected exception → terminal event
  "Leg i <status>, stopping execution", record the outcome, stop.
  Settled legs are never rolled back.
- run() never raises for leg failures; it returns one LegResult per
  attempted leg.
====================
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from config import ExecutionSettings
from core.constants import ExecutionStatus
from core.exceptions import ErrorCode, ExecutionError
from core.logging import get_logger
from core.models import LegOutcome, LegResult, ProgressEvent, Quote, TradeIntent
from execution.leg import LegExecutor, ProgressCallback, QuoteSource
from execution.signer import Signer
from relay.client import RelayClient

logger = get_logger("xleg.execution.sequencer")


class MultiLegSequencer:
    """
    Runs legs strictly sequentially against one signer.

    A second run() on the same sequencer while one is in flight is
    rejected with SEQUENCER_BUSY before any leg starts.
    """

    def __init__(
        self,
        client: QuoteSource,
        settings: Optional[ExecutionSettings] = None,
    ):
        self.executor = LegExecutor(client, settings)
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(
        self,
        intents: Sequence[TradeIntent],
        signer: Signer,
        on_update: Optional[ProgressCallback] = None,
    ) -> List[LegResult]:
        if self._lock.locked():
            raise ExecutionError(
                "A multi-leg run is already in progress",
                code=ErrorCode.SEQUENCER_BUSY,
            )

        async with self._lock:
            return await self._run_locked(list(intents), signer, on_update)

    async def _run_locked(
        self,
        intents: List[TradeIntent],
        signer: Signer,
        on_update: Optional[ProgressCallback],
    ) -> List[LegResult]:
        total = len(intents)
        results: List[LegResult] = []

        def emit(event: ProgressEvent) -> None:
            if not on_update:
                return
            try:
                on_update(event)
            except Exception as e:
                logger.warning(
                    f"Progress callback failed: {e}",
                    extra={"context": {"leg_id": event.leg_id, "status": event.status.value}},
                )

        logger.info("Starting multi-leg run", extra={"context": {"total_legs": total}})

        for index, intent in enumerate(intents):
            number = index + 1
            emit(ProgressEvent(
                leg_id=intent.id,
                status=ExecutionStatus.STARTING,
                message=f"Executing leg {number} of {total}",
                leg_index=index,
                total_legs=total,
            ))

            def forward(event: ProgressEvent, _index: int = index) -> None:
                emit(event.with_position(_index, total))

            try:
                outcome = await self.executor.execute(intent, signer, forward)
            except Exception as e:
                logger.error(
                    f"Leg {number} raised: {e}",
                    exc_info=True,
                    extra={"context": {"leg_id": intent.id, "leg_index": index}},
                )
                outcome = LegOutcome(
                    leg_id=intent.id,
                    status=ExecutionStatus.ERROR,
                    message=str(e) or type(e).__name__,
                    error_code=e.code if isinstance(getattr(e, "code", None), ErrorCode) else ErrorCode.UNKNOWN,
                )

            results.append(LegResult(leg=intent, outcome=outcome))

            if outcome.is_success:
                emit(ProgressEvent(
                    leg_id=intent.id,
                    status=ExecutionStatus.COMPLETE,
                    message=f"Leg {number} complete",
                    leg_index=index,
                    total_legs=total,
                    request_id=outcome.request_id,
                ))
                continue

            emit(ProgressEvent(
                leg_id=intent.id,
                status=outcome.status,
                message=f"Leg {number} {outcome.status.value}, stopping execution: {outcome.message}",
                leg_index=index,
                total_legs=total,
                request_id=outcome.request_id,
            ))
            logger.warning(
                f"Stopping after leg {number} of {total}",
                extra={"context": {
                    "leg_id": intent.id,
                    "status": outcome.status.value,
                    "error_code": outcome.error_code.value if outcome.error_code else None,
                    "skipped_legs": total - number,
                }},
            )
            break

        logger.info(
            "Multi-leg run finished",
            extra={"context": {
                "total_legs": total,
                "attempted": len(results),
                "completed": sum(1 for r in results if r.outcome.is_success),
            }},
        )
        return results


async def execute_multi_leg(
    intents: Sequence[TradeIntent],
    signer: Signer,
    on_update: Optional[ProgressCallback] = None,
    client: Optional[QuoteSource] = None,
    settings: Optional[ExecutionSettings] = None,
) -> List[LegResult]:
    """
    Execute legs sequentially, stopping on the first unsuccessful leg.

    When no client is given a RelayClient with default settings is
    created for this call and closed afterwards.
    """
    if client is not None:
        return await MultiLegSequencer(client, settings).run(intents, signer, on_update)

    async with RelayClient() as relay_client:
        return await MultiLegSequencer(relay_client, settings).run(intents, signer, on_update)


# =============================================================================
# PREVIEW
# =============================================================================

@dataclass
class LegPreview:
    """Display-only quote for one leg. Never reused for execution."""
    leg: TradeIntent
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.quote is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leg": self.leg.to_dict(),
            "ok": self.ok,
            "valuation": self.quote.valuation.to_dict() if self.quote else None,
            "steps": len(self.quote.steps) if self.quote else 0,
            "error": self.error,
        }


async def preview_legs(
    intents: Sequence[TradeIntent],
    client: QuoteSource,
    user: Optional[str] = None,
) -> List[LegPreview]:
    """
    Quote every leg concurrently for display.

    Quote failures are captured per leg; this never raises for them.
    """
    async def _one(intent: TradeIntent) -> LegPreview:
        try:
            quote = await client.get_quote(intent, user=user, recipient=user)
        except Exception as e:
            logger.debug(
                f"Preview quote failed: {e}",
                extra={"context": {"leg_id": intent.id, "route": intent.route}},
            )
            return LegPreview(leg=intent, error=getattr(e, "message", None) or str(e))
        return LegPreview(leg=intent, quote=quote)

    return list(await asyncio.gather(*(_one(intent) for intent in intents)))


def summarize_previews(previews: Sequence[LegPreview]) -> Dict[str, Any]:
    """Totals across quoted legs (USD strings)."""
    quoted = [p for p in previews if p.quote is not None]
    total_in = sum((p.quote.valuation.input_usd for p in quoted), Decimal("0"))
    total_out = sum((p.quote.valuation.output_usd for p in quoted), Decimal("0"))
    total_fee = sum((p.quote.valuation.fee_usd for p in quoted), Decimal("0"))
    return {
        "legs": len(previews),
        "quoted": len(quoted),
        "failed": len(previews) - len(quoted),
        "total_input_usd": str(total_in),
        "total_output_usd": str(total_out),
        "total_fee_usd": str(total_fee),
        "max_eta_seconds": max((p.quote.valuation.eta_seconds for p in quoted), default=0),
    }
