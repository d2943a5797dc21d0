"""DexScreener REST API async client.

Fetches trading pairs for a token address and turns the first listed one
into a ``TokenMetrics`` snapshot.
"""

import asyncio
import logging

import httpx

from coinscope.config import Config
from coinscope.market.models import TokenMetrics, metrics_from_pair

logger = logging.getLogger("coinscope")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}


class TokenNotFoundError(LookupError):
    """DexScreener returned no trading pair for the token."""

    def __init__(self, token_address: str) -> None:
        super().__init__(f"No trading pairs found for token {token_address}")
        self.token_address = token_address


class DexScreenerClient:
    """Async client for the public DexScreener API."""

    def __init__(self, config: Config) -> None:
        self._tokens_url = config.tokens_url
        self._timeout = config.http_timeout_seconds
        self._headers = {"Accept": "application/json"}

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _get_json(self, url: str) -> dict:
        """GET *url* and decode the JSON body, retrying transient failures.

        One ``AsyncClient`` is shared across attempts.  Gateway errors
        (502, 503, 504), rate-limits (429) and transport failures are
        retried with exponential backoff; the last failure is re-raised
        once ``_MAX_RETRIES`` attempts are spent.  Other HTTP errors are
        raised immediately.
        """
        attempt = 0
        async with httpx.AsyncClient(headers=self._headers) as client:
            while True:
                attempt += 1
                try:
                    resp = await client.get(url, timeout=self._timeout)
                except httpx.TransportError as exc:
                    if attempt == _MAX_RETRIES:
                        raise
                    await self._backoff(attempt, url, f"transport error ({exc})")
                    continue

                if resp.status_code not in _RETRYABLE_STATUS_CODES:
                    resp.raise_for_status()
                    return resp.json()
                if attempt == _MAX_RETRIES:
                    resp.raise_for_status()
                await self._backoff(attempt, url, f"returned {resp.status_code}")

    @staticmethod
    async def _backoff(attempt: int, url: str, reason: str) -> None:
        delay = _RETRY_BASE_DELAY * (2 ** (attempt - 1))
        logger.warning(
            "DexScreener GET %s %s, retry %d/%d in %.1fs",
            url, reason, attempt, _MAX_RETRIES - 1, delay,
        )
        await asyncio.sleep(delay)

    # ── Pairs ────────────────────────────────────────────────────────────

    async def fetch_pairs(self, token_address: str) -> list[dict]:
        """Return every trading pair DexScreener lists for *token_address*.

        An unknown token yields an empty list.
        """
        url = f"{self._tokens_url}/{token_address}"
        payload = await self._get_json(url)
        return payload.get("pairs") or []

    async def fetch_token_metrics(self, token_address: str) -> TokenMetrics:
        """Fetch the first listed pair for *token_address* as ``TokenMetrics``.

        Raises:
            TokenNotFoundError: If DexScreener lists no pair for the token.
        """
        pairs = await self.fetch_pairs(token_address)
        if not pairs:
            raise TokenNotFoundError(token_address)
        metrics = metrics_from_pair(pairs[0])
        logger.debug(
            "Fetched %s: price=%s volume_24h=%s",
            token_address, metrics.price, metrics.volume_24h,
        )
        return metrics
