"""
strategy/scanner.py - Cross-chain spread scanner.

Quotes the same asset between pairs of chains and ranks the moves by
net profit after the relayer fee.

Execution policy:
- Candidates are quoted in batches of `batch_size` (default 4); a batch
  runs concurrently and fully settles before the next one starts.
- `batch_delay_ms` (default 500) is awaited between batches.
- Failed quotes and quotes without a positive input/output USD value
  are dropped (logged, not errors).

Ranking: net_profit_percent descending, ties in arrival order.
"""

import asyncio
from collections import Counter
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from config import ScanSettings
from core.constants import SCAN_TOKENS, ZERO_ADDRESS, get_chain_name
from core.format_money import format_money, format_pct
from core.logging import get_logger, log_scan_result
from core.math import compute_spread_metrics
from core.models import Quote, ScanCandidate, ScanResult, TradeIntent
from relay.client import RelayClient

logger = get_logger("xleg.scanner")

ResultCallback = Callable[[ScanResult], None]


class QuoteProvider(Protocol):
    async def get_quote(
        self,
        intent: TradeIntent,
        user: Optional[str] = None,
        recipient: Optional[str] = None,
    ) -> Quote:
        ...


def _scan_amount(token: Dict[str, Any], settings: ScanSettings) -> str:
    """Notional amount for a reference asset, in base units."""
    if token["symbol"] == "ETH":
        return settings.eth_amount_wei
    return settings.stable_amount


def generate_scan_candidates(
    settings: Optional[ScanSettings] = None,
    tokens: Sequence[Dict[str, Any]] = SCAN_TOKENS,
) -> List[ScanCandidate]:
    """
    Every unordered chain pair for every reference asset.

    Pairs follow the order of each token's address table (i < j).
    """
    settings = settings or ScanSettings()
    candidates: List[ScanCandidate] = []

    for token in tokens:
        addresses: Dict[int, str] = token["addresses"]
        chains = list(addresses.keys())
        amount = _scan_amount(token, settings)

        for i, origin in enumerate(chains):
            for destination in chains[i + 1:]:
                candidates.append(ScanCandidate(
                    token=token["symbol"],
                    origin_chain_id=origin,
                    origin_chain_name=get_chain_name(origin),
                    origin_currency=addresses[origin],
                    destination_chain_id=destination,
                    destination_chain_name=get_chain_name(destination),
                    destination_currency=addresses[destination],
                    amount=amount,
                    decimals=token["decimals"],
                ))

    return candidates


def rank_results(results: Sequence[ScanResult]) -> List[ScanResult]:
    """Sort by net_profit_percent descending; equal values keep arrival order."""
    return sorted(results, key=lambda r: r.net_profit_percent, reverse=True)


def build_scan_result(candidate: ScanCandidate, quote: Quote) -> Optional[ScanResult]:
    """Price a candidate from its quote, or None if the quote has no USD value."""
    valuation = quote.valuation
    if not valuation.is_priced:
        return None

    metrics = compute_spread_metrics(valuation.input_usd, valuation.output_usd, valuation.fee_usd)
    return ScanResult(
        candidate=candidate,
        input_usd=valuation.input_usd,
        output_usd=valuation.output_usd,
        fee_usd=valuation.fee_usd,
        spread_percent=metrics.spread_percent,
        net_profit_usd=metrics.net_profit_usd,
        net_profit_percent=metrics.net_profit_percent,
        rate=valuation.rate,
        eta_seconds=valuation.eta_seconds,
    )


class OpportunityScanner:
    """
    Scans candidates in bounded concurrent batches.

    `ranked` is re-sorted after every accepted result so a display can
    re-render from it inside the on_result callback.
    """

    def __init__(
        self,
        client: QuoteProvider,
        settings: Optional[ScanSettings] = None,
        candidates: Optional[Sequence[ScanCandidate]] = None,
    ):
        self.client = client
        self.settings = settings or ScanSettings()
        self.candidates = list(candidates) if candidates is not None else generate_scan_candidates(self.settings)
        self.ranked: List[ScanResult] = []
        self.stats: Counter = Counter()

    async def _price(self, candidate: ScanCandidate) -> Optional[ScanResult]:
        quote = await self.client.get_quote(candidate.to_intent(), user=ZERO_ADDRESS)
        return build_scan_result(candidate, quote)

    async def scan(self, on_result: Optional[ResultCallback] = None) -> List[ScanResult]:
        """
        Run one scan session.

        Returns:
            All accepted results, ranked
        """
        self.ranked = []
        self.stats = Counter(candidates=len(self.candidates))
        accepted: List[ScanResult] = []
        batch_size = self.settings.batch_size

        for start in range(0, len(self.candidates), batch_size):
            batch = self.candidates[start:start + batch_size]
            outcomes = await asyncio.gather(
                *(self._price(candidate) for candidate in batch),
                return_exceptions=True,
            )

            for candidate, outcome in zip(batch, outcomes):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                if isinstance(outcome, Exception):
                    self.stats["quote_errors"] += 1
                    logger.debug(
                        f"Scan quote failed: {outcome}",
                        extra={"context": {"token": candidate.token, "route": candidate.route}},
                    )
                    continue
                if outcome is None:
                    self.stats["unpriced"] += 1
                    logger.debug(
                        "Scan quote has no USD valuation",
                        extra={"context": {"token": candidate.token, "route": candidate.route}},
                    )
                    continue

                result = replace(outcome, arrival=len(accepted))
                accepted.append(result)
                self.stats["results"] += 1
                self.ranked = rank_results(accepted)
                log_scan_result(
                    logger,
                    token=result.token,
                    route=candidate.route,
                    net_profit_usd=format_money(result.net_profit_usd),
                    net_profit_percent=format_pct(result.net_profit_percent),
                )
                if on_result:
                    on_result(result)

            if start + batch_size < len(self.candidates):
                await asyncio.sleep(self.settings.batch_delay_seconds)

        logger.info("Scan finished", extra={"context": dict(self.stats)})
        return rank_results(accepted)


async def scan_arbitrage(
    on_result: Optional[ResultCallback] = None,
    client: Optional[QuoteProvider] = None,
    settings: Optional[ScanSettings] = None,
) -> List[ScanResult]:
    """
    Scan the default chain/token basket and return ranked results.

    When no client is given a RelayClient with default settings is
    created for this call and closed afterwards.
    """
    if client is not None:
        return await OpportunityScanner(client, settings).scan(on_result)

    async with RelayClient() as relay_client:
        return await OpportunityScanner(relay_client, settings).scan(on_result)
