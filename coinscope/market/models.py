"""Market data models — typed representations of DexScreener pair objects."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenMetrics:
    """Snapshot of a token's market state, as consumed by the analysis pipeline."""

    price: float
    price_change_24h: float = 0.0
    price_change_1h: float = 0.0
    price_change_5m: float = 0.0
    volume_24h: float = 0.0
    liquidity: float = 0.0
    buys_24h: int = 0
    sells_24h: int = 0
    market_cap: float = 0.0


def _as_float(value) -> float:
    """DexScreener sends numbers as strings, numbers, or nulls."""
    if value is None or value == "":
        return 0.0
    return float(value)


def metrics_from_pair(pair: dict) -> TokenMetrics:
    """Build ``TokenMetrics`` from a single DexScreener pair object.

    Missing sections default to zero, matching how the aggregator treats
    absent activity.
    """
    price_change = pair.get("priceChange") or {}
    txns_24h = (pair.get("txns") or {}).get("h24") or {}
    volume = pair.get("volume") or {}
    liquidity = pair.get("liquidity") or {}

    return TokenMetrics(
        price=_as_float(pair.get("priceUsd")),
        price_change_24h=_as_float(price_change.get("h24")),
        price_change_1h=_as_float(price_change.get("h1")),
        price_change_5m=_as_float(price_change.get("m5")),
        volume_24h=_as_float(volume.get("h24")),
        liquidity=_as_float(liquidity.get("usd")),
        buys_24h=int(txns_24h.get("buys") or 0),
        sells_24h=int(txns_24h.get("sells") or 0),
        market_cap=_as_float(pair.get("fdv")),
    )
