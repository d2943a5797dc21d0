"""Win-rate tracking models — ledger records and their aggregate analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from coinscope.analysis.models import SignalType


@dataclass(frozen=True)
class SignalRecord:
    """A recorded trading signal and, once closed, its exit."""

    id: str
    timestamp: datetime
    symbol: str
    entry_price: float
    take_profit_price: float
    stop_loss_price: float
    signal_type: SignalType
    confidence: float
    confluence_percent: float
    pattern_detected: Optional[str] = None
    adx_value: float = 0.0
    rsi_value: float = 0.0
    macd_signal: str = ""
    # Exit fields, populated by the ledger on close-out
    exit_price: Optional[float] = None
    exit_time: Optional[datetime] = None
    outcome: Optional[str] = None  # "win" / "loss" / "breakeven"
    profit_loss: Optional[float] = None
    profit_loss_percent: Optional[float] = None
    notes: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.outcome is not None


@dataclass(frozen=True)
class PatternStat:
    pattern: str
    win_rate: int
    count: int


@dataclass(frozen=True)
class WinRateAnalysis:
    """Aggregate performance of closed signals inside a lookback window."""

    total_signals: int = 0
    winning_signals: int = 0
    losing_signals: int = 0
    breakeven_signals: int = 0
    win_rate: int = 0  # percent
    average_win: float = 0.0  # percent
    average_loss: float = 0.0  # percent, as a magnitude
    profit_factor: float = 0.0
    expectancy: float = 0.0  # percent per trade
    sharpe_ratio: float = 0.0
    top_patterns: list[PatternStat] = field(default_factory=list)
    confidence_correlation: int = 0  # win% at confidence >= 80 minus win% below


@dataclass(frozen=True)
class TradeOutcome:
    """Minimal trade row for :func:`summarize_trade_history`."""

    entry: float
    exit: float
    won: bool
    pattern: Optional[str] = None


@dataclass(frozen=True)
class TradeHistorySummary:
    total_signals: int = 0
    winning_signals: int = 0
    losing_signals: int = 0
    win_rate: int = 0
    average_win: float = 0.0
    average_loss: float = 0.0  # signed mean, negative for losing trades
    profit_factor: float = 0.0
    best_patterns: list[str] = field(default_factory=list)
