# PATH: monitoring/session_report.py
"""
Session reports for XLEG.

Two report kinds:
- ExecutionReport: what happened to each leg of a multi-leg run
- ScanReport: ranked spread opportunities from one scan session

SCHEMA CONTRACT:
- All money values are strings (Decimal-formatted, never floats).
- schema_version is bumped on any field addition/removal/rename.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from core.constants import ExecutionStatus
from core.format_money import format_amount, format_money, format_pct, format_usd
from core.models import LegResult, ScanResult
from core.time import now_iso

logger = logging.getLogger("monitoring.session_report")

SCHEMA_VERSION = "1.0.0"

DEFAULT_TOP_N = 10


class _JsonReport:
    """to_json / save shared by both report kinds."""

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, path: Path) -> None:
        """Save report to file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())
        logger.info(f"Report saved: {path}")


# =============================================================================
# EXECUTION
# =============================================================================

@dataclass
class ExecutionReport(_JsonReport):
    """
    Outcome of one multi-leg run.

    stopped_early is True when fewer legs were attempted than requested,
    or the last attempted leg did not complete.
    """
    timestamp: str = ""
    total_legs: int = 0
    attempted_legs: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    stopped_early: bool = False
    legs: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = now_iso()

    @property
    def completed_legs(self) -> int:
        return self.status_counts.get(ExecutionStatus.COMPLETE.value, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "kind": "execution",
            "timestamp": self.timestamp,
            "total_legs": self.total_legs,
            "attempted_legs": self.attempted_legs,
            "completed_legs": self.completed_legs,
            "status_counts": self.status_counts,
            "stopped_early": self.stopped_early,
            "legs": self.legs,
        }


def build_execution_report(
    results: Sequence[LegResult],
    total_legs: Optional[int] = None,
) -> ExecutionReport:
    """
    Build an execution report from sequencer results.

    Args:
        results: LegResult per attempted leg, in run order
        total_legs: Number of legs requested (default: len(results))
    """
    total = total_legs if total_legs is not None else len(results)
    counts = Counter(r.outcome.status.value for r in results)

    rows = []
    for index, result in enumerate(results):
        outcome = result.outcome
        rows.append({
            "index": index,
            "leg_id": result.leg.id,
            "route": result.leg.route,
            "amount": result.leg.amount,
            "status": outcome.status.value,
            "message": outcome.message,
            "error_code": outcome.error_code.value if outcome.error_code else None,
            "request_id": outcome.request_id,
            "tx_hashes": list(outcome.tx_hashes),
            "polls": outcome.polls,
        })

    last_failed = bool(results) and not results[-1].outcome.is_success
    return ExecutionReport(
        total_legs=total,
        attempted_legs=len(results),
        status_counts=dict(counts),
        stopped_early=len(results) < total or last_failed,
        legs=rows,
    )


def print_execution_report(report: ExecutionReport) -> None:
    """Print execution report to console."""
    print("\n" + "=" * 60)
    print("EXECUTION REPORT")
    print("=" * 60)
    print(f"Timestamp: {report.timestamp}")
    print(f"Legs: {report.completed_legs}/{report.total_legs} complete "
          f"({report.attempted_legs} attempted)")
    if report.stopped_early:
        print("Stopped early: yes")

    print("\n--- LEGS ---")
    for row in report.legs:
        line = f"  {row['index'] + 1}. {row['route']} [{row['status']}] {row['message']}"
        if row["error_code"]:
            line += f" ({row['error_code']})"
        print(line)
        for tx_hash in row["tx_hashes"]:
            print(f"       tx: {tx_hash}")
    print("=" * 60 + "\n")


# =============================================================================
# SCAN
# =============================================================================

@dataclass
class ScanReport(_JsonReport):
    """Ranked opportunities of one scan session."""
    timestamp: str = ""
    stats: Dict[str, Any] = field(default_factory=dict)
    top_opportunities: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "kind": "scan",
            "timestamp": self.timestamp,
            "stats": self.stats,
            "top_opportunities": self.top_opportunities,
        }


def _opportunity_row(rank: int, result: ScanResult) -> Dict[str, Any]:
    candidate = result.candidate
    return {
        "rank": rank,
        "token": candidate.token,
        "route": candidate.route,
        "origin_chain_id": candidate.origin_chain_id,
        "destination_chain_id": candidate.destination_chain_id,
        "amount": candidate.amount,
        "amount_display": format_amount(candidate.amount, candidate.decimals),
        "input_usd": format_money(result.input_usd),
        "output_usd": format_money(result.output_usd),
        "fee_usd": format_money(result.fee_usd),
        "spread_percent": format_pct(result.spread_percent),
        "net_profit_usd": format_money(result.net_profit_usd),
        "net_profit_percent": format_pct(result.net_profit_percent),
        "eta_seconds": result.eta_seconds,
    }


def build_scan_report(
    results: Sequence[ScanResult],
    top_n: int = DEFAULT_TOP_N,
    scan_stats: Optional[Dict[str, int]] = None,
) -> ScanReport:
    """
    Build a scan report.

    Args:
        results: Ranked scan results (best first)
        top_n: Number of opportunities to keep
        scan_stats: Scanner counters (candidates, quote_errors, unpriced)
    """
    scan_stats = scan_stats or {}
    stats = {
        "candidates": scan_stats.get("candidates", len(results)),
        "results": len(results),
        "profitable": sum(1 for r in results if r.is_profitable),
        "quote_errors": scan_stats.get("quote_errors", 0),
        "unpriced": scan_stats.get("unpriced", 0),
    }
    top = [_opportunity_row(rank, r) for rank, r in enumerate(results[:top_n], 1)]
    return ScanReport(stats=stats, top_opportunities=top)


def print_scan_report(report: ScanReport) -> None:
    """Print scan report to console."""
    stats = report.stats
    print("\n" + "=" * 60)
    print("SCAN REPORT")
    print("=" * 60)
    print(f"Timestamp: {report.timestamp}")
    print(f"Routes: {stats.get('results', 0)}/{stats.get('candidates', 0)} priced, "
          f"{stats.get('profitable', 0)} profitable")
    print(f"Dropped: {stats.get('quote_errors', 0)} quote errors, "
          f"{stats.get('unpriced', 0)} unpriced")

    print("\n--- TOP OPPORTUNITIES ---")
    if not report.top_opportunities:
        print("  (none)")
    for opp in report.top_opportunities:
        print(f"  {opp['rank']}. {opp['amount_display']} {opp['token']} {opp['route']}: "
              f"net ${format_money(opp['net_profit_usd'], 2)} "
              f"({opp['net_profit_percent']}%, fee {format_usd(opp['fee_usd'])}, "
              f"~{opp['eta_seconds']}s)")
    print("=" * 60 + "\n")
