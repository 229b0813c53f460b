#!/usr/bin/env python3
"""
strategy/jobs/run_quote.py - Quote one cross-chain move and print its route.

Read-only: nothing is signed or submitted.

Usage:
    python -m strategy.jobs.run_quote --origin-chain 8453 \\
        --origin-currency 0x0000000000000000000000000000000000000000 \\
        --destination-chain 42161 \\
        --destination-currency 0x0000000000000000000000000000000000000000 \\
        --amount 100000000000000000
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from config import RelaySettings, load_config
from core.constants import get_chain_name
from core.exceptions import XlegError
from core.format_money import format_usd
from core.logging import get_logger, setup_logging, set_global_context
from core.models import Quote, TradeIntent, TransactionStep, make_intent
from relay.client import RelayClient

logger = get_logger("xleg.quote")


async def fetch_quote(settings: RelaySettings, intent: TradeIntent, user: Optional[str]) -> Quote:
    async with RelayClient(settings=settings) as client:
        return await client.get_quote(intent, user=user, recipient=user)


def print_quote(intent: TradeIntent, quote: Quote) -> None:
    """Print route, valuation and steps."""
    valuation = quote.valuation
    print("\n" + "=" * 60)
    print("QUOTE")
    print("=" * 60)
    print(f"Route: {get_chain_name(intent.origin_chain_id)} -> "
          f"{get_chain_name(intent.destination_chain_id)}")
    print(f"Amount: {intent.amount}")
    print(f"Input: {format_usd(valuation.input_usd)} | Output: {format_usd(valuation.output_usd)} | "
          f"Fee: {format_usd(valuation.fee_usd)}")
    print(f"Rate: {valuation.rate} | ETA: ~{valuation.eta_seconds}s")
    print(f"Request id: {quote.request_id or '-'}")

    print("\n--- STEPS ---")
    for i, step in enumerate(quote.steps, 1):
        if isinstance(step, TransactionStep):
            print(f"  {i}. transaction on {get_chain_name(step.chain_id)} to {step.to} value={step.value}")
        else:
            print(f"  {i}. signature")
    print("=" * 60 + "\n")


@click.command()
@click.option("--origin-chain", type=int, required=True, help="Origin chain id")
@click.option("--origin-currency", required=True, help="Origin token address")
@click.option("--destination-chain", type=int, required=True, help="Destination chain id")
@click.option("--destination-currency", required=True, help="Destination token address")
@click.option("--amount", required=True, help="Amount in origin base units")
@click.option("--user", default=None, help="Quoting address (default: zero address)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--json", "as_json", is_flag=True, help="Print the quote as JSON")
@click.option("--log-level", "-l", default="WARNING", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]))
def main(
    origin_chain: int,
    origin_currency: str,
    destination_chain: int,
    destination_currency: str,
    amount: str,
    user: Optional[str],
    config_path: Optional[Path],
    as_json: bool,
    log_level: str,
) -> None:
    """XLEG Quote - Price one cross-chain move without executing it."""
    setup_logging(level=log_level, json_output=False)
    set_global_context(service="xleg-quote", version="0.1.0")

    try:
        config = load_config(config_path)
        intent = make_intent(
            origin_chain, origin_currency, destination_chain, destination_currency, amount,
            intent_id="quote",
        )
        quote = asyncio.run(fetch_quote(config.relay, intent, user))
    except XlegError as e:
        logger.error(f"Quote failed: {e}", extra={"context": e.to_dict()})
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"intent": intent.to_dict(), "quote": quote.to_dict()}, indent=2))
    else:
        print_quote(intent, quote)


if __name__ == "__main__":
    main()
