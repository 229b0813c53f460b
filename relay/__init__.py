"""
relay/ - Relay settlement network API layer.

Modules:
- client: HTTP client for quotes, settlement status and lookups
"""

from relay.client import (
    ClientStats,
    RelayClient,
)

__all__ = [
    "ClientStats",
    "RelayClient",
]
