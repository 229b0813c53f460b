"""Strategy package for XLEG."""

from strategy.scanner import (
    OpportunityScanner,
    build_scan_result,
    generate_scan_candidates,
    rank_results,
    scan_arbitrage,
)

__all__ = [
    "OpportunityScanner",
    "build_scan_result",
    "generate_scan_candidates",
    "rank_results",
    "scan_arbitrage",
]
