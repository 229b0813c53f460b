#!/usr/bin/env python3
"""
strategy/jobs/run_scan.py - CLI entrypoint for cross-chain spread scanning.

Features:
- One scan session over the reference chain/token basket
- Bounded concurrent quoting (batches + inter-batch delay from config)
- Ranked table on stdout, JSON report under --output-dir

Usage:
    python -m strategy.jobs.run_scan
    python -m strategy.jobs.run_scan --token USDC --top 5 --no-json-logs
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import click

from config import XlegConfig, load_config
from core.constants import SCAN_TOKENS
from core.exceptions import XlegError
from core.format_money import format_pct
from core.logging import get_logger, setup_logging, set_global_context
from core.models import ScanResult
from core.time import session_stamp
from monitoring.session_report import build_scan_report, print_scan_report
from relay.client import RelayClient
from strategy.scanner import OpportunityScanner, generate_scan_candidates

logger = get_logger("xleg.scan")


def select_tokens(symbols: Sequence[str]) -> List[dict]:
    """Reference tokens filtered by symbol (case-insensitive); empty means all."""
    if not symbols:
        return list(SCAN_TOKENS)
    wanted = {s.upper() for s in symbols}
    return [t for t in SCAN_TOKENS if t["symbol"].upper() in wanted]


async def run_scan(config: XlegConfig, symbols: Sequence[str]) -> tuple[List[ScanResult], dict]:
    """Run one scan session and return (ranked results, scanner stats)."""
    candidates = generate_scan_candidates(config.scan, select_tokens(symbols))

    def on_result(result: ScanResult) -> None:
        click.echo(
            f"  + {result.token} {result.candidate.route}: "
            f"{format_pct(result.net_profit_percent)}%",
            err=True,
        )

    async with RelayClient(settings=config.relay) as client:
        scanner = OpportunityScanner(client, config.scan, candidates=candidates)
        results = await scanner.scan(on_result=on_result)
        logger.info("Relay client stats", extra={"context": client.stats.to_dict()})
        return results, dict(scanner.stats)


@click.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="YAML config file (default: config/xleg.yaml)")
@click.option("--token", "-t", "tokens", multiple=True, help="Only scan these token symbols")
@click.option("--top", default=10, show_default=True, help="Opportunities to keep in the report")
@click.option("--output-dir", "-o", default="data/reports")
@click.option("--log-level", "-l", default="INFO", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]))
@click.option("--json-logs/--no-json-logs", default=True)
def main(
    config_path: Optional[Path],
    tokens: tuple,
    top: int,
    output_dir: str,
    log_level: str,
    json_logs: bool,
) -> None:
    """XLEG Spread Scanner - Ranks cross-chain moves by net profit after fees."""
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="xleg-scan", version="0.1.0")

    try:
        config = load_config(config_path)
    except XlegError as e:
        logger.error(f"Config error: {e}")
        sys.exit(1)

    if tokens and not select_tokens(tokens):
        logger.error(f"Unknown tokens: {list(tokens)}")
        sys.exit(1)

    logger.info(
        "Starting XLEG Scanner",
        extra={"context": {
            "tokens": list(tokens) or "all",
            "batch_size": config.scan.batch_size,
            "batch_delay_ms": config.scan.batch_delay_ms,
        }},
    )

    try:
        results, stats = asyncio.run(run_scan(config, tokens))
    except KeyboardInterrupt:
        logger.info("Scanner interrupted")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Scanner error: {e}", exc_info=True)
        sys.exit(1)

    report = build_scan_report(results, top_n=top, scan_stats=stats)
    report.save(Path(output_dir) / f"scan_{session_stamp()}.json")
    print_scan_report(report)

    logger.info("Scanner stopped", extra={"context": report.stats})


if __name__ == "__main__":
    main()
