"""Win-rate statistics — pure functions over closed signals."""

import math

from coinscope.analysis.rounding import round_half_up, round_int
from coinscope.tracking.models import (
    PatternStat,
    SignalRecord,
    TradeHistorySummary,
    TradeOutcome,
    WinRateAnalysis,
)

NO_LOSS_PROFIT_FACTOR = 999.0
HIGH_CONFIDENCE = 80
TOP_PATTERN_COUNT = 5


def analyze_signals(signals: list[SignalRecord]) -> WinRateAnalysis:
    """Compute win-rate statistics from closed signals.

    *signals* should already be filtered to closed records and ordered
    newest first; the order decides ties in the pattern ranking.

    Returns:
        ``WinRateAnalysis``.  Averages, profit factor, expectancy and Sharpe
        are rounded half-up to 2 dp; win rate and confidence correlation to
        whole percents.  An empty input gives an all-zero analysis.
    """
    if not signals:
        return WinRateAnalysis()

    total = len(signals)
    wins = [s for s in signals if s.outcome == "win"]
    losses = [s for s in signals if s.outcome == "loss"]
    breakeven = sum(1 for s in signals if s.outcome == "breakeven")

    total_gains = sum(s.profit_loss_percent or 0.0 for s in wins)
    total_losses = sum(abs(s.profit_loss_percent or 0.0) for s in losses)

    average_win = total_gains / len(wins) if wins else 0.0
    average_loss = total_losses / len(losses) if losses else 0.0
    profit_factor = total_gains / total_losses if total_losses > 0 else NO_LOSS_PROFIT_FACTOR
    expectancy = (len(wins) / total) * average_win - (len(losses) / total) * average_loss

    returns = [s.profit_loss_percent or 0.0 for s in signals]

    return WinRateAnalysis(
        total_signals=total,
        winning_signals=len(wins),
        losing_signals=len(losses),
        breakeven_signals=breakeven,
        win_rate=round_int(len(wins) / total * 100),
        average_win=round_half_up(average_win, 2),
        average_loss=round_half_up(average_loss, 2),
        profit_factor=round_half_up(profit_factor, 2),
        expectancy=round_half_up(expectancy, 2),
        sharpe_ratio=round_half_up(_sharpe(returns), 2),
        top_patterns=_top_patterns(signals),
        confidence_correlation=round_int(_confidence_correlation(signals)),
    )


def summarize_trade_history(trades: list[TradeOutcome]) -> TradeHistorySummary:
    """Summarise a plain entry/exit/won trade list.

    Returns are ``(exit - entry) / entry × 100``.  ``average_loss`` keeps its
    sign; ``profit_factor`` is ``|wins / losses|`` with a zero loss total
    treated as 1.  ``best_patterns`` are the three patterns with the most
    wins.
    """
    if not trades:
        return TradeHistorySummary()

    winning = [t for t in trades if t.won]
    losing = [t for t in trades if not t.won]

    total_wins = sum(_return_pct(t) for t in winning)
    total_losses = sum(_return_pct(t) for t in losing)

    pattern_wins: dict[str, int] = {}
    for t in trades:
        if t.pattern:
            pattern_wins[t.pattern] = pattern_wins.get(t.pattern, 0) + (1 if t.won else 0)
    best = sorted(pattern_wins.items(), key=lambda kv: kv[1], reverse=True)[:3]

    return TradeHistorySummary(
        total_signals=len(trades),
        winning_signals=len(winning),
        losing_signals=len(losing),
        win_rate=round_int(len(winning) / len(trades) * 100),
        average_win=total_wins / len(winning) if winning else 0.0,
        average_loss=total_losses / len(losing) if losing else 0.0,
        profit_factor=abs(total_wins / (total_losses or 1)),
        best_patterns=[name for name, _ in best],
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _return_pct(trade: TradeOutcome) -> float:
    return (trade.exit - trade.entry) / trade.entry * 100


def _sharpe(returns: list[float]) -> float:
    """Annualised Sharpe ratio from per-trade percent returns.

    Uses population standard deviation; a zero deviation counts as 1.
    """
    n = len(returns)
    mean = sum(returns) / n
    variance = sum((r - mean) ** 2 for r in returns) / n
    std = math.sqrt(variance) or 1.0
    return (mean / std) * math.sqrt(252)


def _top_patterns(signals: list[SignalRecord]) -> list[PatternStat]:
    stats: dict[str, list[int]] = {}  # pattern -> [wins, count]
    for s in signals:
        if not s.pattern_detected:
            continue
        entry = stats.setdefault(s.pattern_detected, [0, 0])
        entry[1] += 1
        if s.outcome == "win":
            entry[0] += 1

    ranked = [
        PatternStat(pattern=name, win_rate=round_int(wins / count * 100), count=count)
        for name, (wins, count) in stats.items()
    ]
    ranked.sort(key=lambda p: p.win_rate, reverse=True)
    return ranked[:TOP_PATTERN_COUNT]


def _confidence_correlation(signals: list[SignalRecord]) -> float:
    high = [s for s in signals if s.confidence >= HIGH_CONFIDENCE]
    low = [s for s in signals if s.confidence < HIGH_CONFIDENCE]
    return _win_percent(high) - _win_percent(low)


def _win_percent(signals: list[SignalRecord]) -> float:
    if not signals:
        return 0.0
    return sum(1 for s in signals if s.outcome == "win") / len(signals) * 100
