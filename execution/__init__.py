# PATH: execution/__init__.py
"""
XLEG Execution Layer.

This module contains the execution layer components:
- state_machine: Leg state machine with transitions
- settlement: Settlement status classification and polling
- signer: Wallet signer contract and error classification
- leg: Single-leg executor
- sequencer: Sequential multi-leg runs and display-only previews
"""

from execution.state_machine import (
    LegStateMachine,
    StateTransition,
    InvalidTransitionError,
    VALID_TRANSITIONS,
)
from execution.settlement import (
    PollResult,
    classify_settlement_status,
    poll_settlement,
)
from execution.signer import (
    Signer,
    TransactionRequest,
    classify_signer_error,
    is_user_rejection,
)
from execution.leg import (
    LegExecutor,
    ProgressCallback,
    execute_leg,
)
from execution.sequencer import (
    LegPreview,
    MultiLegSequencer,
    execute_multi_leg,
    preview_legs,
    summarize_previews,
)

__all__ = [
    # State machine
    "LegStateMachine",
    "StateTransition",
    "InvalidTransitionError",
    "VALID_TRANSITIONS",
    # Settlement
    "PollResult",
    "classify_settlement_status",
    "poll_settlement",
    # Signer
    "Signer",
    "TransactionRequest",
    "classify_signer_error",
    "is_user_rejection",
    # Executors
    "LegExecutor",
    "ProgressCallback",
    "execute_leg",
    "MultiLegSequencer",
    "execute_multi_leg",
    # Preview
    "LegPreview",
    "preview_legs",
    "summarize_previews",
]
