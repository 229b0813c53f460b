"""
relay/client.py - Relay API client.

Provides:
- Quotes for trade intents (POST /quote/v2)
- Settlement status by request id (GET /intents/status/v3)
- Chain, currency, token price and request history lookups
- Request statistics for monitoring

The client is safe to share between concurrent tasks on one event loop.
"""

import time
from dataclasses import dataclass
from typing import Any

import httpx

from config import RelaySettings
from core.constants import DEFAULT_TRADE_TYPE, ZERO_ADDRESS
from core.exceptions import QuoteError, RelayError, StatusError
from core.logging import get_logger
from core.models import Quote, StatusRecord, TradeIntent

logger = get_logger("xleg.relay")


@dataclass
class ClientStats:
    """Statistics for Relay API requests."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests

    def to_dict(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "success_rate": round(self.success_rate, 3),
            "avg_latency_ms": self.avg_latency_ms,
            "last_error": self.last_error,
        }


def _error_message(resp: httpx.Response, fallback: str) -> str:
    """Service-supplied error message, or the fallback."""
    try:
        data = resp.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


class RelayClient:
    """
    Async client for the Relay API.

    Usage:
        client = RelayClient(config.relay)
        quote = await client.get_quote(intent, user=address, recipient=address)
        record = await client.get_status(quote.request_id)
        await client.close()
    """

    def __init__(
        self,
        settings: RelaySettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or RelaySettings()
        self.base_url = self.settings.base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.stats = ClientStats()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.settings.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and record statistics.

        Transport errors propagate as httpx.HTTPError; callers map them
        to their own error type.
        """
        client = await self._get_client()
        self.stats.total_requests += 1
        start_ms = int(time.time() * 1000)

        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self.stats.failed_requests += 1
            self.stats.last_error = str(e) or type(e).__name__
            raise

        latency_ms = int(time.time() * 1000) - start_ms
        if resp.is_success:
            self.stats.successful_requests += 1
            self.stats.total_latency_ms += latency_ms
        else:
            self.stats.failed_requests += 1
            self.stats.last_error = f"HTTP {resp.status_code} {path}"
        return resp

    async def _get_json(self, path: str, what: str, **kwargs: Any) -> Any:
        """GET/POST helper for lookup endpoints. Raises RelayError."""
        method = "POST" if "json" in kwargs else "GET"
        try:
            resp = await self._request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RelayError(
                f"Failed to fetch {what}: {e}",
                details={"path": path},
            ) from e
        if not resp.is_success:
            raise RelayError(
                f"Failed to fetch {what}: {resp.status_code}",
                details={"path": path, "status_code": resp.status_code},
            )
        try:
            return resp.json()
        except ValueError as e:
            raise RelayError(f"Malformed {what} response", details={"path": path}) from e

    # ------------------------------------------------------------------
    # Quote / status
    # ------------------------------------------------------------------

    def build_quote_body(
        self,
        intent: TradeIntent,
        user: str | None,
        recipient: str | None = None,
        trade_type: str = DEFAULT_TRADE_TYPE,
    ) -> dict[str, Any]:
        """Relay /quote/v2 request body."""
        body: dict[str, Any] = {
            "user": user or ZERO_ADDRESS,
            **intent.to_request(),
            "tradeType": trade_type,
        }
        if recipient:
            body["recipient"] = recipient
        app_fees = self.settings.app_fees
        if app_fees:
            body["appFees"] = app_fees
        return body

    async def get_quote(
        self,
        intent: TradeIntent,
        user: str | None = None,
        recipient: str | None = None,
        trade_type: str = DEFAULT_TRADE_TYPE,
    ) -> Quote:
        """
        Get a priced route for an intent.

        Raises:
            QuoteError: On transport failure, non-2xx response or malformed payload
        """
        body = self.build_quote_body(intent, user, recipient, trade_type)
        context = {"intent_id": intent.id, "route": intent.route, "amount": intent.amount}

        try:
            resp = await self._request("POST", "/quote/v2", json=body)
        except httpx.HTTPError as e:
            raise QuoteError(f"Failed to get quote: {e}", details=context) from e

        if not resp.is_success:
            message = _error_message(resp, f"Failed to get quote: {resp.status_code}")
            raise QuoteError(message, details={**context, "status_code": resp.status_code})

        try:
            payload = resp.json()
        except ValueError as e:
            raise QuoteError("Malformed quote response", details=context) from e

        quote = Quote.from_api(payload)
        logger.debug(
            f"Quote: {intent.route} steps={len(quote.steps)}",
            extra={"context": {**context, **quote.valuation.to_dict()}},
        )
        return quote

    async def get_status(self, request_id: str) -> StatusRecord:
        """
        Get settlement status for a request id.

        Raises:
            StatusError: On transport failure, non-2xx response or malformed payload
        """
        try:
            resp = await self._request(
                "GET", "/intents/status/v3", params={"requestId": request_id}
            )
        except httpx.HTTPError as e:
            raise StatusError(
                f"Failed to get status: {e}",
                details={"request_id": request_id},
            ) from e

        if not resp.is_success:
            raise StatusError(
                f"Failed to get status: {resp.status_code}",
                details={"request_id": request_id, "status_code": resp.status_code},
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise StatusError(
                "Malformed status response",
                details={"request_id": request_id},
            ) from e

        return StatusRecord.from_api(request_id, payload)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_chains(self) -> list[dict[str, Any]]:
        """Supported chains."""
        data = await self._get_json("/chains", "chains")
        if isinstance(data, dict) and "chains" in data:
            return data["chains"]
        return data

    async def get_currencies(
        self,
        chain_id: int,
        term: str | None = None,
        limit: int | None = None,
        verified: bool | None = None,
        use_external_search: bool = False,
    ) -> list[dict[str, Any]]:
        """Currencies on a chain, flattened from Relay's nested list response."""
        body: dict[str, Any] = {"chainIds": [int(chain_id)], "defaultList": True}
        if term:
            body["term"] = term
        if limit:
            body["limit"] = limit
        if verified is not None:
            body["verified"] = verified
        if use_external_search:
            body["useExternalSearch"] = True

        data = await self._get_json("/currencies/v1", "currencies", json=body)
        if isinstance(data, list):
            if data and isinstance(data[0], list):
                return [token for group in data for token in group]
            return data
        return []

    async def get_token_price(self, chain_id: int, address: str) -> dict[str, Any]:
        """USD price of a token."""
        return await self._get_json(
            "/token-price", "token price", params={"currency": f"{chain_id}:{address}"}
        )

    async def get_requests(self, user: str) -> dict[str, Any]:
        """Past Relay requests made by a user."""
        return await self._get_json("/requests", "requests", params={"user": user})
