# PATH: execution/leg.py
"""
Single-leg executor.

Drives one TradeIntent through:

  quoting → signing → executing (per step, then per status poll)
          → complete | failed | error | timeout

Every status change goes through LegStateMachine and emits exactly one
ProgressEvent. The terminal event is always the last one emitted.

Failure policy:
- Quote failure: error, no retry.
- Wallet failure on any step: error, remaining steps are skipped.
  User rejections get a friendly message (USER_CANCELLED), other
  failures keep the raw wallet message (SIGNER_FAILURE).
- Network switch failure: ignored; the transaction is submitted anyway
  and fails on its own if the wallet is on the wrong chain.
"""

from typing import Callable, Optional, Protocol

from config import ExecutionSettings
from core.constants import ExecutionStatus
from core.exceptions import ErrorCode, QuoteError
from core.logging import get_logger, log_leg_event
from core.models import (
    LegOutcome,
    ProgressEvent,
    Quote,
    StatusRecord,
    TradeIntent,
    TransactionStep,
)
from execution.settlement import poll_settlement
from execution.signer import Signer, TransactionRequest, classify_signer_error
from execution.state_machine import LegStateMachine
from relay.client import RelayClient

logger = get_logger("xleg.execution.leg")

ProgressCallback = Callable[[ProgressEvent], None]


class QuoteSource(Protocol):
    """Quote client operations the executor needs."""

    async def get_quote(
        self,
        intent: TradeIntent,
        user: Optional[str] = None,
        recipient: Optional[str] = None,
    ) -> Quote:
        ...

    async def get_status(self, request_id: str) -> StatusRecord:
        ...


class _LegRun:
    """Per-run bookkeeping: state machine, emitted events, collected hashes."""

    def __init__(self, intent: TradeIntent, on_update: Optional[ProgressCallback]):
        self.intent = intent
        self.on_update = on_update
        self.sm = LegStateMachine(leg_id=intent.id)
        self.tx_hashes: list[str] = []
        self.request_id: Optional[str] = None
        self.quote: Optional[Quote] = None
        self.polls = 0

    def advance(
        self,
        status: ExecutionStatus,
        message: str,
        tx_hash: Optional[str] = None,
    ) -> None:
        self.sm.transition_to(status, reason=message)
        event = ProgressEvent(
            leg_id=self.intent.id,
            status=status,
            message=message,
            tx_hash=tx_hash,
            request_id=self.request_id,
        )
        log_leg_event(
            logger,
            leg_id=self.intent.id,
            status=status.value,
            message=message,
            tx_hash=tx_hash,
            request_id=self.request_id,
        )
        if self.on_update:
            self.on_update(event)

    def finish(
        self,
        status: ExecutionStatus,
        message: str,
        error_code: Optional[ErrorCode] = None,
        settlement: Optional[dict] = None,
    ) -> LegOutcome:
        self.advance(status, message)
        return LegOutcome(
            leg_id=self.intent.id,
            status=status,
            message=message,
            tx_hashes=list(self.tx_hashes),
            request_id=self.request_id,
            error_code=error_code,
            settlement=settlement,
            quote=self.quote,
            polls=self.polls,
        )


class LegExecutor:
    """
    Executes one leg against a quote client and a signer.

    The signer must not be shared with another in-flight leg; the
    sequencer guarantees that for multi-leg runs.
    """

    def __init__(
        self,
        client: QuoteSource,
        settings: Optional[ExecutionSettings] = None,
    ):
        self.client = client
        self.settings = settings or ExecutionSettings()

    async def execute(
        self,
        intent: TradeIntent,
        signer: Signer,
        on_update: Optional[ProgressCallback] = None,
    ) -> LegOutcome:
        """
        Run one leg to a terminal state.

        Never raises for quote, wallet or settlement failures; those
        are reported in the returned LegOutcome.
        """
        run = _LegRun(intent, on_update)

        # 1. Fresh quote, valued for the signer as trader and recipient
        run.advance(ExecutionStatus.QUOTING, "Getting quote...")
        try:
            run.quote = await self.client.get_quote(
                intent, user=signer.address, recipient=signer.address
            )
        except QuoteError as e:
            return run.finish(ExecutionStatus.ERROR, e.message, error_code=e.code)
        except Exception as e:
            return run.finish(
                ExecutionStatus.ERROR,
                str(e) or type(e).__name__,
                error_code=ErrorCode.QUOTE_UNAVAILABLE,
            )

        # 2. Wallet prompts, strictly in quote order
        run.advance(ExecutionStatus.SIGNING, "Confirm in wallet...")
        for step in run.quote.steps:
            if step.request_id:
                run.request_id = step.request_id

            tx_hash = None
            try:
                if isinstance(step, TransactionStep):
                    await self._ensure_network(signer, step.chain_id)
                    tx_hash = await signer.send_transaction(TransactionRequest(
                        to=step.to,
                        data=step.data,
                        value=step.value,
                        chain_id=step.chain_id,
                    ))
                else:
                    await signer.sign_message(step.message)
            except Exception as e:
                error = classify_signer_error(e, step_id=step.step_id)
                logger.warning(
                    f"Wallet step failed: {error.message}",
                    extra={"context": {
                        "leg_id": intent.id,
                        "step_id": step.step_id,
                        "error_code": error.code.value,
                    }},
                )
                return run.finish(ExecutionStatus.ERROR, error.message, error_code=error.code)

            if isinstance(step, TransactionStep):
                run.tx_hashes.append(tx_hash)
                run.advance(ExecutionStatus.EXECUTING, "Transaction submitted", tx_hash=tx_hash)
            else:
                run.advance(ExecutionStatus.EXECUTING, "Signature submitted")

        # 3. Nothing to track: done
        if not run.request_id:
            run.request_id = run.quote.request_id
        if not run.request_id:
            return run.finish(ExecutionStatus.COMPLETE, "Leg complete")
        if run.sm.state == ExecutionStatus.SIGNING:
            run.advance(ExecutionStatus.EXECUTING, "Awaiting settlement")

        # 4. Settlement polling
        result = await poll_settlement(
            self.client,
            run.request_id,
            on_pending=lambda raw: run.advance(ExecutionStatus.EXECUTING, f"Status: {raw}"),
            settings=self.settings,
        )
        run.polls = result.attempts

        if result.status == ExecutionStatus.COMPLETE:
            return run.finish(ExecutionStatus.COMPLETE, "Settlement complete", settlement=result.record)
        if result.status == ExecutionStatus.FAILED:
            return run.finish(
                ExecutionStatus.FAILED,
                f"Settlement {result.raw_status}",
                settlement=result.record,
            )
        return run.finish(
            ExecutionStatus.TIMEOUT,
            f"Settlement status not final after {result.attempts} checks",
            error_code=ErrorCode.STATUS_POLL_TIMEOUT,
            settlement=result.record,
        )

    async def _ensure_network(self, signer: Signer, chain_id: int) -> None:
        """Best-effort switch of the wallet's active network."""
        if getattr(signer, "chain_id", None) == chain_id:
            return

        switch_network = getattr(signer, "switch_network", None)
        if switch_network is None:
            logger.debug(
                "Signer cannot switch networks, submitting anyway",
                extra={"context": {"chain_id": chain_id}},
            )
            return

        try:
            await switch_network(chain_id)
        except Exception as e:
            logger.debug(
                f"Network switch failed, submitting anyway: {e}",
                extra={"context": {"chain_id": chain_id}},
            )


async def execute_leg(
    intent: TradeIntent,
    signer: Signer,
    on_update: Optional[ProgressCallback] = None,
    client: Optional[QuoteSource] = None,
    settings: Optional[ExecutionSettings] = None,
) -> LegOutcome:
    """
    Execute one leg.

    When no client is given a RelayClient with default settings is
    created for this call and closed afterwards.
    """
    if client is not None:
        return await LegExecutor(client, settings).execute(intent, signer, on_update)

    async with RelayClient() as relay_client:
        return await LegExecutor(relay_client, settings).execute(intent, signer, on_update)
