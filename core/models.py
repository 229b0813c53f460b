# PATH: core/models.py
"""
Core data models for XLEG.

STEP CONTRACT
=============
A Relay quote lists steps, each with one or more items. Every item is
flattened into one Step, in order, inheriting its parent's requestId:

  TransactionStep(to, data, value, chain_id)   value: int wei
  SignatureStep(message)

The last non-null request_id across the flattened steps is the one used
to poll settlement status.

AMOUNT CONTRACT
===============
TradeIntent.amount is an integer string in origin-token base units.
USD valuations are Decimal, never float.
"""

import itertools
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from core.constants import ExecutionStatus, StepKind
from core.exceptions import ErrorCode, QuoteError, ValidationError
from core.math import parse_base_units, safe_decimal
from core.time import now_iso


# ============================================================================
# TRADE INTENT
# ============================================================================

_intent_counter = itertools.count(1)


@dataclass(frozen=True)
class TradeIntent:
    """One leg: move `amount` of origin currency to destination currency."""
    id: str
    origin_chain_id: int
    origin_currency: str
    destination_chain_id: int
    destination_currency: str
    amount: str

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Intent id is required")
        for name in ("origin_chain_id", "destination_chain_id"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError(
                    f"{name} must be a positive integer",
                    details={"intent_id": self.id, name: value},
                )
        for name in ("origin_currency", "destination_currency"):
            if not getattr(self, name):
                raise ValidationError(
                    f"{name} is required",
                    details={"intent_id": self.id},
                )
        if not isinstance(self.amount, str) or not self.amount.isdigit() or int(self.amount) <= 0:
            raise ValidationError(
                "amount must be a positive integer string in base units",
                details={"intent_id": self.id, "amount": self.amount},
            )

    @property
    def route(self) -> str:
        return f"{self.origin_chain_id}->{self.destination_chain_id}"

    def to_request(self) -> Dict[str, Any]:
        """Relay quote request fields for this intent."""
        return {
            "originChainId": self.origin_chain_id,
            "originCurrency": self.origin_currency,
            "destinationChainId": self.destination_chain_id,
            "destinationCurrency": self.destination_currency,
            "amount": self.amount,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "origin_chain_id": self.origin_chain_id,
            "origin_currency": self.origin_currency,
            "destination_chain_id": self.destination_chain_id,
            "destination_currency": self.destination_currency,
            "amount": self.amount,
        }


def make_intent(
    origin_chain_id: int,
    origin_currency: str,
    destination_chain_id: int,
    destination_currency: str,
    amount: Union[str, int],
    intent_id: Optional[str] = None,
) -> TradeIntent:
    """Build a TradeIntent, assigning 'leg-N' ids from a process-wide counter."""
    return TradeIntent(
        id=intent_id or f"leg-{next(_intent_counter)}",
        origin_chain_id=origin_chain_id,
        origin_currency=origin_currency,
        destination_chain_id=destination_chain_id,
        destination_currency=destination_currency,
        amount=str(amount),
    )


# ============================================================================
# QUOTE
# ============================================================================

@dataclass(frozen=True)
class TransactionStep:
    """On-chain transaction the signer must submit."""
    to: str
    data: str
    value: int
    chain_id: int
    request_id: Optional[str] = None
    step_id: str = ""

    kind = StepKind.TRANSACTION


@dataclass(frozen=True)
class SignatureStep:
    """Off-chain message the signer must sign."""
    message: str
    request_id: Optional[str] = None
    step_id: str = ""

    kind = StepKind.SIGNATURE


Step = Union[TransactionStep, SignatureStep]


@dataclass(frozen=True)
class QuoteValuation:
    """USD valuation of a quote."""
    input_usd: Decimal = Decimal("0")
    output_usd: Decimal = Decimal("0")
    fee_usd: Decimal = Decimal("0")
    rate: Decimal = Decimal("0")
    eta_seconds: int = 0

    @property
    def is_priced(self) -> bool:
        return self.input_usd > 0 and self.output_usd > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_usd": str(self.input_usd),
            "output_usd": str(self.output_usd),
            "fee_usd": str(self.fee_usd),
            "rate": str(self.rate),
            "eta_seconds": self.eta_seconds,
        }


def _parse_step_item(step: Dict[str, Any], item: Dict[str, Any], index: int) -> Step:
    kind = step.get("kind")
    request_id = step.get("requestId")
    step_id = f"{step.get('id', 'step')}:{index}"
    data = item.get("data") or {}

    if kind == StepKind.TRANSACTION.value:
        try:
            return TransactionStep(
                to=data["to"],
                data=data.get("data") or "0x",
                value=parse_base_units(data.get("value") or 0),
                chain_id=int(data["chainId"]),
                request_id=request_id,
                step_id=step_id,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteError(
                f"Malformed transaction step: {e}",
                details={"step_id": step_id},
            ) from e

    if kind == StepKind.SIGNATURE.value:
        sign = data.get("sign") or {}
        message = sign.get("message") or data.get("message")
        if message is None:
            raise QuoteError(
                "Malformed signature step: missing message",
                details={"step_id": step_id},
            )
        return SignatureStep(message=message, request_id=request_id, step_id=step_id)

    raise QuoteError(
        f"Unsupported step kind: {kind}",
        details={"step_id": step_id},
    )


@dataclass
class Quote:
    """Priced execution plan for one intent."""
    steps: List[Step] = field(default_factory=list)
    valuation: QuoteValuation = field(default_factory=QuoteValuation)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)
    # last requestId on the raw steps, including steps with no items
    raw_request_id: Optional[str] = None

    @property
    def request_id(self) -> Optional[str]:
        """Last non-null request id across the response, else across parsed steps."""
        if self.raw_request_id:
            return self.raw_request_id
        request_id = None
        for step in self.steps:
            if step.request_id:
                request_id = step.request_id
        return request_id

    @classmethod
    def from_api(cls, payload: Any) -> "Quote":
        """
        Parse a Relay /quote/v2 response.

        Raises:
            QuoteError: If the payload is not a quote
        """
        if not isinstance(payload, dict):
            raise QuoteError("Malformed quote response: expected object")

        raw_steps = payload.get("steps", [])
        if not isinstance(raw_steps, list):
            raise QuoteError("Malformed quote response: steps is not a list")

        steps: List[Step] = []
        raw_request_id = None
        for step in raw_steps:
            if not isinstance(step, dict):
                raise QuoteError("Malformed quote response: step is not an object")
            if step.get("requestId"):
                raw_request_id = step["requestId"]
            for index, item in enumerate(step.get("items") or []):
                steps.append(_parse_step_item(step, item, index))

        details = payload.get("details") or {}
        fees = payload.get("fees") or {}
        try:
            eta_seconds = int(details.get("timeEstimate") or 0)
        except (TypeError, ValueError):
            eta_seconds = 0

        valuation = QuoteValuation(
            input_usd=safe_decimal((details.get("currencyIn") or {}).get("amountUsd")),
            output_usd=safe_decimal((details.get("currencyOut") or {}).get("amountUsd")),
            fee_usd=safe_decimal((fees.get("relayer") or {}).get("amountUsd")),
            rate=safe_decimal(details.get("rate")),
            eta_seconds=eta_seconds,
        )
        return cls(steps=steps, valuation=valuation, raw=payload, raw_request_id=raw_request_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps": [
                {"kind": step.kind.value, "step_id": step.step_id, "request_id": step.request_id}
                for step in self.steps
            ],
            "valuation": self.valuation.to_dict(),
            "request_id": self.request_id,
        }


@dataclass
class StatusRecord:
    """Settlement status returned by the status endpoint."""
    request_id: str
    status: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, request_id: str, payload: Any) -> "StatusRecord":
        payload = payload if isinstance(payload, dict) else {}
        return cls(
            request_id=request_id,
            status=payload.get("status") or payload.get("state"),
            raw=payload,
        )


# ============================================================================
# EXECUTION
# ============================================================================

@dataclass(frozen=True)
class ProgressEvent:
    """Informational status update for display collaborators."""
    leg_id: str
    status: ExecutionStatus
    message: str
    leg_index: Optional[int] = None
    total_legs: Optional[int] = None
    tx_hash: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: str = field(default_factory=now_iso)

    def with_position(self, leg_index: int, total_legs: int) -> "ProgressEvent":
        return replace(self, leg_index=leg_index, total_legs=total_legs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leg_id": self.leg_id,
            "leg_index": self.leg_index,
            "total_legs": self.total_legs,
            "status": self.status.value,
            "message": self.message,
            "tx_hash": self.tx_hash,
            "request_id": self.request_id,
            "timestamp": self.timestamp,
        }


@dataclass
class LegOutcome:
    """Terminal result of one leg."""
    leg_id: str
    status: ExecutionStatus
    message: str = ""
    tx_hashes: List[str] = field(default_factory=list)
    request_id: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    settlement: Optional[Dict[str, Any]] = None
    quote: Optional[Quote] = field(default=None, repr=False)
    polls: int = 0

    @property
    def is_success(self) -> bool:
        return self.status == ExecutionStatus.COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leg_id": self.leg_id,
            "status": self.status.value,
            "is_success": self.is_success,
            "message": self.message,
            "tx_hashes": list(self.tx_hashes),
            "request_id": self.request_id,
            "error_code": self.error_code.value if self.error_code else None,
            "settlement": self.settlement,
            "polls": self.polls,
            "quote": self.quote.to_dict() if self.quote else None,
        }


@dataclass
class LegResult:
    """One entry of a multi-leg run: the intent and what happened to it."""
    leg: TradeIntent
    outcome: LegOutcome

    def to_dict(self) -> Dict[str, Any]:
        return {"leg": self.leg.to_dict(), "outcome": self.outcome.to_dict()}


# ============================================================================
# SCANNER
# ============================================================================

@dataclass(frozen=True)
class ScanCandidate:
    """One chain pair for one reference asset."""
    token: str
    origin_chain_id: int
    origin_chain_name: str
    origin_currency: str
    destination_chain_id: int
    destination_chain_name: str
    destination_currency: str
    amount: str
    decimals: int

    @property
    def route(self) -> str:
        return f"{self.origin_chain_name}->{self.destination_chain_name}"

    def to_intent(self) -> TradeIntent:
        return TradeIntent(
            id=f"scan-{self.token}-{self.origin_chain_id}-{self.destination_chain_id}",
            origin_chain_id=self.origin_chain_id,
            origin_currency=self.origin_currency,
            destination_chain_id=self.destination_chain_id,
            destination_currency=self.destination_currency,
            amount=self.amount,
        )


@dataclass(frozen=True)
class ScanResult:
    """A priced candidate with spread metrics. Lives for one scan session."""
    candidate: ScanCandidate
    input_usd: Decimal
    output_usd: Decimal
    fee_usd: Decimal
    spread_percent: Decimal
    net_profit_usd: Decimal
    net_profit_percent: Decimal
    rate: Decimal
    eta_seconds: int
    arrival: int = 0

    @property
    def token(self) -> str:
        return self.candidate.token

    @property
    def origin_chain_id(self) -> int:
        return self.candidate.origin_chain_id

    @property
    def destination_chain_id(self) -> int:
        return self.candidate.destination_chain_id

    @property
    def amount(self) -> str:
        return self.candidate.amount

    @property
    def is_profitable(self) -> bool:
        return self.net_profit_usd > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.candidate.token,
            "origin_chain_id": self.candidate.origin_chain_id,
            "origin_chain_name": self.candidate.origin_chain_name,
            "destination_chain_id": self.candidate.destination_chain_id,
            "destination_chain_name": self.candidate.destination_chain_name,
            "amount": self.candidate.amount,
            "decimals": self.candidate.decimals,
            "input_usd": str(self.input_usd),
            "output_usd": str(self.output_usd),
            "fee_usd": str(self.fee_usd),
            "spread_percent": str(self.spread_percent),
            "net_profit_usd": str(self.net_profit_usd),
            "net_profit_percent": str(self.net_profit_percent),
            "rate": str(self.rate),
            "eta_seconds": self.eta_seconds,
        }
