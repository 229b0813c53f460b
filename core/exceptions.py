# PATH: core/exceptions.py
"""
Typed exceptions for XLEG.

Every error carries an ErrorCode so leg outcomes and reports can be
bucketed without parsing messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for leg outcomes and reports."""
    # Quoting
    QUOTE_UNAVAILABLE = "QUOTE_UNAVAILABLE"

    # Wallet
    USER_CANCELLED = "USER_CANCELLED"
    SIGNER_FAILURE = "SIGNER_FAILURE"

    # Settlement status
    STATUS_POLL_TIMEOUT = "STATUS_POLL_TIMEOUT"
    STATUS_POLL_TRANSIENT = "STATUS_POLL_TRANSIENT"

    # Infrastructure
    INFRA_HTTP_ERROR = "INFRA_HTTP_ERROR"

    # Input / orchestration
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SEQUENCER_BUSY = "SEQUENCER_BUSY"

    UNKNOWN = "UNKNOWN"


class XlegError(Exception):
    """Base exception for XLEG."""

    default_code = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str = "",
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class QuoteError(XlegError):
    """No route or price could be obtained for an intent."""
    default_code = ErrorCode.QUOTE_UNAVAILABLE


class StatusError(XlegError):
    """A single settlement status lookup failed."""
    default_code = ErrorCode.STATUS_POLL_TRANSIENT


class RelayError(XlegError):
    """Relay API call failed (non-quote, non-status endpoints)."""
    default_code = ErrorCode.INFRA_HTTP_ERROR


class SignerError(XlegError):
    """Wallet refused or failed to submit a transaction or signature."""
    default_code = ErrorCode.SIGNER_FAILURE


class UserRejectedError(SignerError):
    """The user declined the wallet prompt."""
    default_code = ErrorCode.USER_CANCELLED


class ValidationError(XlegError):
    """Invalid input data."""
    default_code = ErrorCode.VALIDATION_ERROR


class ExecutionError(XlegError):
    """Orchestration error outside a single leg."""
    pass
