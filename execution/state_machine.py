# PATH: execution/state_machine.py
"""
Leg execution state machine.

LEG STATE CONTRACT:
===================

States (ExecutionStatus):
  pending    → leg created, nothing requested yet
  quoting    → fetching a fresh quote
  signing    → waiting for the wallet
  executing  → steps submitted / settlement in progress
  complete   → settled
  failed     → settlement failed or refunded
  error      → quote or wallet failure
  timeout    → settlement status never became terminal

Transitions:
  pending    → quoting
  quoting    → signing | error
  signing    → executing | complete | error
  executing  → executing | complete | failed | error | timeout

Terminal states have no outgoing transitions.
===================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.constants import ExecutionStatus
from core.time import now_iso

S = ExecutionStatus

VALID_TRANSITIONS: Dict[ExecutionStatus, List[ExecutionStatus]] = {
    S.PENDING: [S.QUOTING],
    S.QUOTING: [S.SIGNING, S.ERROR],
    S.SIGNING: [S.EXECUTING, S.COMPLETE, S.ERROR],
    S.EXECUTING: [S.EXECUTING, S.COMPLETE, S.FAILED, S.ERROR, S.TIMEOUT],
    S.COMPLETE: [],
    S.FAILED: [],
    S.ERROR: [],
    S.TIMEOUT: [],
}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: ExecutionStatus
    to_state: ExecutionStatus
    timestamp: str = ""
    reason: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = now_iso()


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


@dataclass
class LegStateMachine:
    """
    State machine for one leg.

    Tracks current state and transition history.
    """
    leg_id: str
    state: ExecutionStatus = ExecutionStatus.PENDING
    history: List[StateTransition] = field(default_factory=list)
    created_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()

    def can_transition_to(self, new_state: ExecutionStatus) -> bool:
        return new_state in VALID_TRANSITIONS.get(self.state, [])

    def transition_to(
        self,
        new_state: ExecutionStatus,
        reason: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StateTransition:
        """
        Transition to a new state.

        Raises InvalidTransitionError if transition is not valid.
        """
        if not self.can_transition_to(new_state):
            raise InvalidTransitionError(
                f"Leg {self.leg_id}: cannot transition from {self.state.value} to {new_state.value}. "
                f"Valid transitions: {[s.value for s in VALID_TRANSITIONS.get(self.state, [])]}"
            )

        transition = StateTransition(
            from_state=self.state,
            to_state=new_state,
            reason=reason,
            metadata=metadata or {},
        )
        self.history.append(transition)
        self.state = new_state
        return transition

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leg_id": self.leg_id,
            "state": self.state.value,
            "is_terminal": self.is_terminal,
            "created_at": self.created_at,
            "history": [
                {
                    "from_state": t.from_state.value,
                    "to_state": t.to_state.value,
                    "timestamp": t.timestamp,
                    "reason": t.reason,
                    "metadata": t.metadata,
                }
                for t in self.history
            ],
        }
