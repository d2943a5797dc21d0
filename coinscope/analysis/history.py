"""Price and volume history providers.

DexScreener only reports summary statistics for a pair, so when no real
candle history is available a provider synthesises one from the snapshot.
The aggregator never draws random numbers itself; callers choose the
provider, and a seeded generator makes the whole pipeline reproducible.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import numpy as np

from coinscope.market.models import TokenMetrics


@runtime_checkable
class HistoryProvider(Protocol):
    """Source of price/volume windows for a token."""

    def price_history(self, metrics: TokenMetrics) -> list[float]:
        """Return a chronological price window, oldest first."""
        ...

    def volume_history(self, metrics: TokenMetrics, length: int) -> list[float]:
        """Return *length* volume samples aligned with a price window."""
        ...


class RandomWalkHistory:
    """Random-walk history scaled by the token's 24h price change.

    Each step moves the price by ``(u - 0.5) × change_24h / 10`` percent
    with ``u ~ U[0, 1)``.  Volumes scatter ±20 % around the hourly average
    of the 24h volume.

    Args:
        rng: NumPy generator to draw from.  Defaults to an unseeded one.
        length: Number of samples to synthesise.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, length: int = 50) -> None:
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        self._rng = rng if rng is not None else np.random.default_rng()
        self._length = length

    @property
    def length(self) -> int:
        return self._length

    def price_history(self, metrics: TokenMetrics) -> list[float]:
        draws = self._rng.random(self._length)
        history: list[float] = []
        price = metrics.price
        for u in draws:
            change = (float(u) - 0.5) * (metrics.price_change_24h / 10)
            price *= 1 + change / 100
            history.append(price)
        return history

    def volume_history(self, metrics: TokenMetrics, length: int) -> list[float]:
        avg_volume = metrics.volume_24h / 24
        draws = self._rng.random(length)
        return [avg_volume * (0.8 + float(u) * 0.4) for u in draws]
