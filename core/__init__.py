"""
core - Core utilities and models for XLEG.

This package contains:
- models.py: Data models (TradeIntent, Quote, Step, ProgressEvent, LegOutcome, ScanResult)
- constants.py: Enums, defaults and scan baskets
- exceptions.py: Typed exceptions with error codes
- math.py: Decimal spread/profit maths (no float money)
- format_money.py: Display formatting for money and token amounts
- time.py: Timestamps
- logging.py: Structured JSON logging
"""

from core.constants import (
    ExecutionStatus,
    StepKind,
    NATIVE_TOKEN,
    TERMINAL_STATUSES,
)
from core.exceptions import (
    ErrorCode,
    ExecutionError,
    QuoteError,
    RelayError,
    SignerError,
    StatusError,
    UserRejectedError,
    ValidationError,
    XlegError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    LegOutcome,
    LegResult,
    ProgressEvent,
    Quote,
    QuoteValuation,
    ScanCandidate,
    ScanResult,
    SignatureStep,
    StatusRecord,
    TradeIntent,
    TransactionStep,
    make_intent,
)

__all__ = [
    # Constants
    "ExecutionStatus",
    "StepKind",
    "NATIVE_TOKEN",
    "TERMINAL_STATUSES",
    # Exceptions
    "ErrorCode",
    "ExecutionError",
    "QuoteError",
    "RelayError",
    "SignerError",
    "StatusError",
    "UserRejectedError",
    "ValidationError",
    "XlegError",
    # Models
    "LegOutcome",
    "LegResult",
    "ProgressEvent",
    "Quote",
    "QuoteValuation",
    "ScanCandidate",
    "ScanResult",
    "SignatureStep",
    "StatusRecord",
    "TradeIntent",
    "TransactionStep",
    "make_intent",
    # Logging
    "get_logger",
    "setup_logging",
]
