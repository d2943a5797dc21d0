"""Win-rate ledger — bounded in-memory store of signals and their exits.

Records are kept by id.  Once the ledger holds more than ``capacity``
records the oldest one by signal timestamp is evicted.  Eviction order is
tracked in a min-heap of ``(timestamp, seq, id)``; replaced records leave
stale heap entries behind, recognised by their outdated ``seq`` and skipped
on pop.

The ledger is an ordinary object: the application creates one at start-up
and hands it to whoever needs it.  Every public method holds the same lock,
so one instance can be shared between request handlers.
"""

import dataclasses
import heapq
import itertools
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from coinscope.tracking.models import SignalRecord, WinRateAnalysis
from coinscope.tracking.stats import analyze_signals

logger = logging.getLogger("coinscope")

DEFAULT_CAPACITY = 10_000
BREAKEVEN_BAND = 0.01


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WinRateLedger:
    """Thread-safe, capacity-bounded signal ledger.

    Args:
        capacity: Maximum number of records retained.
        clock: Returns the current aware ``datetime``; defaults to UTC now.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._clock = clock or _utc_now
        self._lock = threading.Lock()
        self._records: dict[str, SignalRecord] = {}
        self._live_seq: dict[str, int] = {}
        self._heap: list[tuple[datetime, int, str]] = []
        self._seq = itertools.count()

    # ── Mutation ─────────────────────────────────────────────────────────

    def record(self, signal: SignalRecord) -> None:
        """Insert *signal*, replacing any record with the same id.

        Raises ``ValueError`` if the signal timestamp is naive.
        """
        if signal.timestamp.tzinfo is None:
            raise ValueError(f"signal {signal.id} timestamp must be timezone-aware")

        with self._lock:
            seq = next(self._seq)
            self._records[signal.id] = signal
            self._live_seq[signal.id] = seq
            heapq.heappush(self._heap, (signal.timestamp, seq, signal.id))

            while len(self._records) > self._capacity:
                self._evict_oldest()

            if len(self._heap) > 2 * len(self._records):
                self._compact()

        logger.info(
            "Recorded signal %s (%s %s @ %s)",
            signal.id, signal.symbol, signal.signal_type.value, signal.entry_price,
        )

    def close_out(
        self,
        signal_id: str,
        exit_price: float,
        exit_time: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Optional[SignalRecord]:
        """Attach exit information to a recorded signal.

        P/L is ``exit_price - entry_price``; the outcome is ``"win"`` above
        +0.01, ``"loss"`` below −0.01 and ``"breakeven"`` in between.  Any
        earlier exit fields are overwritten.

        Returns:
            The updated record, or ``None`` when *signal_id* is unknown.
        """
        with self._lock:
            current = self._records.get(signal_id)
            if current is None:
                logger.warning("close_out: unknown signal id %s", signal_id)
                return None

            profit_loss = exit_price - current.entry_price
            if current.entry_price:
                profit_loss_percent = profit_loss / current.entry_price * 100
            else:
                profit_loss_percent = 0.0

            if profit_loss > BREAKEVEN_BAND:
                outcome = "win"
            elif profit_loss < -BREAKEVEN_BAND:
                outcome = "loss"
            else:
                outcome = "breakeven"

            closed = dataclasses.replace(
                current,
                exit_price=exit_price,
                exit_time=exit_time or self._clock(),
                outcome=outcome,
                profit_loss=profit_loss,
                profit_loss_percent=profit_loss_percent,
                notes=notes,
            )
            self._records[signal_id] = closed

        logger.info(
            "Closed signal %s: %s (%.2f%%)", signal_id, outcome, profit_loss_percent,
        )
        return closed

    # ── Queries ──────────────────────────────────────────────────────────

    def query(self, lookback_days: float = 30) -> WinRateAnalysis:
        """Analyse closed signals recorded within the last *lookback_days*."""
        cutoff = self._clock() - timedelta(days=lookback_days)
        with self._lock:
            window = [
                s for s in self._records.values()
                if s.timestamp > cutoff and s.is_closed
            ]
        window.sort(key=lambda s: s.timestamp, reverse=True)
        return analyze_signals(window)

    def get(self, signal_id: str) -> Optional[SignalRecord]:
        with self._lock:
            return self._records.get(signal_id)

    def signals_by_symbol(self, symbol: str) -> list[SignalRecord]:
        """All records for *symbol*, newest first."""
        with self._lock:
            matches = [s for s in self._records.values() if s.symbol == symbol]
        matches.sort(key=lambda s: s.timestamp, reverse=True)
        return matches

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ── Internals (caller holds the lock) ────────────────────────────────

    def _evict_oldest(self) -> None:
        while self._heap:
            _, seq, signal_id = heapq.heappop(self._heap)
            if self._live_seq.get(signal_id) != seq:
                continue  # stale entry
            del self._records[signal_id]
            del self._live_seq[signal_id]
            logger.debug("Evicted oldest signal %s", signal_id)
            return

    def _compact(self) -> None:
        self._heap = [
            entry for entry in self._heap
            if self._live_seq.get(entry[2]) == entry[1]
        ]
        heapq.heapify(self._heap)
