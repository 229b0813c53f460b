# PATH: core/constants.py
"""
Constants for XLEG.

Contains enums, defaults, and the fixed chain/token baskets used by
the opportunity scanner.
"""

from enum import Enum
from typing import Dict, Final, FrozenSet, List


# =============================================================================
# RELAY API
# =============================================================================

DEFAULT_RELAY_API_BASE: Final[str] = "https://api.relay.link"
DEFAULT_HTTP_TIMEOUT_SECONDS = 15

NATIVE_TOKEN: Final[str] = "0x0000000000000000000000000000000000000000"
ZERO_ADDRESS: Final[str] = NATIVE_TOKEN

DEFAULT_TRADE_TYPE = "EXACT_INPUT"

# App fee in basis points (30 = 0.3%), only sent when a recipient is set
DEFAULT_APP_FEE_BPS = "30"


# =============================================================================
# EXECUTION
# =============================================================================

DEFAULT_POLL_INTERVAL_SECONDS = 3.0
DEFAULT_MAX_POLL_ATTEMPTS = 60  # ~3 minutes


class ExecutionStatus(str, Enum):
    """
    Leg execution status.

    STARTING is a sequence-level marker emitted by the sequencer before
    a leg runs; it is never a state of the leg itself.
    """
    PENDING = "pending"
    QUOTING = "quoting"
    SIGNING = "signing"
    EXECUTING = "executing"
    COMPLETE = "complete"
    FAILED = "failed"
    ERROR = "error"
    TIMEOUT = "timeout"
    STARTING = "starting"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: Final[FrozenSet[ExecutionStatus]] = frozenset([
    ExecutionStatus.COMPLETE,
    ExecutionStatus.FAILED,
    ExecutionStatus.ERROR,
    ExecutionStatus.TIMEOUT,
])

# Raw settlement status strings reported by the status endpoint
SETTLEMENT_SUCCESS_STATUSES: Final[FrozenSet[str]] = frozenset(["success", "complete", "filled"])
SETTLEMENT_FAILURE_STATUSES: Final[FrozenSet[str]] = frozenset(["failed", "refunded"])


class StepKind(str, Enum):
    """Kinds of executable quote steps."""
    TRANSACTION = "transaction"
    SIGNATURE = "signature"


# =============================================================================
# SCANNER
# =============================================================================

DEFAULT_SCAN_BATCH_SIZE = 4
DEFAULT_SCAN_BATCH_DELAY_MS = 500

SCAN_AMOUNT_ETH: Final[str] = "100000000000000000"  # 0.1 ETH
SCAN_AMOUNT_STABLE: Final[str] = "100000000"  # 100 USDC/USDT

POPULAR_CHAINS: Final[List[Dict[str, object]]] = [
    {"id": 1, "name": "Ethereum"},
    {"id": 8453, "name": "Base"},
    {"id": 42161, "name": "Arbitrum"},
    {"id": 10, "name": "Optimism"},
    {"id": 137, "name": "Polygon"},
    {"id": 324, "name": "zkSync"},
    {"id": 59144, "name": "Linea"},
    {"id": 534352, "name": "Scroll"},
]

# Chains where native ETH is scanned
ETH_SCAN_CHAINS: Final[List[int]] = [1, 8453, 42161, 10]

# Reference assets for the scanner. Insertion order of `addresses`
# defines the order in which chain pairs are generated.
SCAN_TOKENS: Final[List[Dict[str, object]]] = [
    {
        "symbol": "ETH",
        "decimals": 18,
        "addresses": {chain_id: NATIVE_TOKEN for chain_id in ETH_SCAN_CHAINS},
    },
    {
        "symbol": "USDC",
        "decimals": 6,
        "addresses": {
            1: "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            8453: "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
            42161: "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            10: "0x0b2c639c533813f4aa9d7837caf62653d097ff85",
            137: "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359",
        },
    },
    {
        "symbol": "USDT",
        "decimals": 6,
        "addresses": {
            1: "0xdac17f958d2ee523a2206206994597c13d831ec7",
            42161: "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",
            10: "0x94b008aa00579c1307b0ef2c499ad98a8ce58e58",
            137: "0xc2132d05d31c914a87c6611c10748aeb04b58e8f",
        },
    },
]


def get_chain_name(chain_id: int) -> str:
    """Display name for a chain id, falling back to 'Chain <id>'."""
    for chain in POPULAR_CHAINS:
        if chain["id"] == chain_id:
            return str(chain["name"])
    return f"Chain {chain_id}"
