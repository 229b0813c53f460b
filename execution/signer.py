# PATH: execution/signer.py
"""
Signing interface contract and wallet error classification.

A signer is the user's wallet. Every call may be rejected by the user or
fail; the leg executor turns any exception into a SignerError via
classify_signer_error().
"""

import re
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from core.exceptions import SignerError, UserRejectedError

USER_CANCELLED_MESSAGE = "Transaction cancelled in wallet"

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001

CANCELLATION_PATTERN = re.compile(
    r"user (rejected|denied|cancell?ed)"
    r"|rejected the request"
    r"|request rejected"
    r"|action_rejected"
    r"|denied transaction signature",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class TransactionRequest:
    """Transaction handed to the signer. value is in wei."""
    to: str
    data: str
    value: int
    chain_id: int


@runtime_checkable
class Signer(Protocol):
    """
    Wallet abstraction.

    Implementations may also expose `chain_id` (active network) and
    `async switch_network(chain_id)`; both are optional.
    """

    @property
    def address(self) -> str:
        ...

    async def send_transaction(self, tx: TransactionRequest) -> str:
        """Submit a transaction and return its hash."""
        ...

    async def sign_message(self, message: str) -> str:
        """Sign a message and return the signature."""
        ...


def is_user_rejection(exc: BaseException) -> bool:
    """True if the wallet error means the user declined the prompt."""
    if isinstance(exc, UserRejectedError):
        return True
    if getattr(exc, "code", None) in (USER_REJECTED_CODE, "ACTION_REJECTED"):
        return True
    return bool(CANCELLATION_PATTERN.search(str(exc)))


def classify_signer_error(exc: BaseException, step_id: Optional[str] = None) -> SignerError:
    """
    Map any wallet exception to UserRejectedError or SignerError.

    User rejections get a friendly message; anything else keeps the raw
    signer message.
    """
    details = {"step_id": step_id, "error_type": type(exc).__name__}
    if is_user_rejection(exc):
        return UserRejectedError(USER_CANCELLED_MESSAGE, details=details)
    if isinstance(exc, SignerError):
        return exc
    return SignerError(str(exc) or type(exc).__name__, details=details)
