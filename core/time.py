# PATH: core/time.py
"""
Time utilities for XLEG.
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return now_utc().isoformat()


def session_stamp() -> str:
    """Filesystem-safe UTC stamp used to name report files."""
    return now_utc().strftime("%Y%m%d_%H%M%S")
