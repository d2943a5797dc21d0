"""Advanced analysis pipeline — composes every analysis stage for one token.

Flow::

    history → indicators → confluence ┐
                         → regime     │
                         → patterns   ├→ smart entry → final signal
                         → divergence │
    support/resistance → risk/reward  ┘
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from coinscope.analysis.aggregator import analyze_indicators
from coinscope.analysis.confluence import calculate_confluence_score
from coinscope.analysis.entry import determine_smart_entry
from coinscope.analysis.final_signal import generate_final_signal
from coinscope.analysis.history import HistoryProvider, RandomWalkHistory
from coinscope.analysis.indicators import calculate_rsi
from coinscope.analysis.models import (
    ConfluenceScore,
    DivergenceSignal,
    FinalSignal,
    IndicatorAnalysis,
    MarketRegime,
    PatternSignal,
    SmartEntry,
    TimeframeData,
)
from coinscope.analysis.patterns import DIVERGENCE_WINDOW, detect_divergence, recognize_patterns
from coinscope.analysis.regime import determine_market_regime
from coinscope.analysis.timeframes import analyze_multi_timeframe
from coinscope.market.models import TokenMetrics
from coinscope.risk.risk_reward import RiskRewardSetup, calculate_risk_reward
from coinscope.tracking.models import WinRateAnalysis

if TYPE_CHECKING:
    from coinscope.tracking.ledger import WinRateLedger

logger = logging.getLogger("coinscope")

FALLBACK_ATR_PCT = 2.0


@dataclass(frozen=True)
class AdvancedAnalysis:
    """Everything the pipeline produced for one token snapshot."""

    metrics: TokenMetrics
    indicators: IndicatorAnalysis
    confluence: ConfluenceScore
    timeframes: list[TimeframeData]
    timeframe_alignment: str
    risk_reward: RiskRewardSetup
    divergence: DivergenceSignal
    market_regime: MarketRegime
    patterns: list[PatternSignal]
    smart_entry: SmartEntry
    final_signal: FinalSignal
    win_rate: Optional[WinRateAnalysis] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable view; enum members serialise as their values."""
        return dataclasses.asdict(self)


def run_advanced_analysis(
    metrics: TokenMetrics,
    price_history: Optional[list[float]] = None,
    volume_history: Optional[list[float]] = None,
    timeframes: Optional[list[TimeframeData]] = None,
    history: Optional[HistoryProvider] = None,
    ledger: Optional["WinRateLedger"] = None,
    lookback_days: float = 30,
    support_pct: float = 3.0,
    resistance_pct: float = 3.0,
    account_risk_pct: float = 2.0,
) -> AdvancedAnalysis:
    """Run the full analysis for *metrics*.

    Missing price/volume windows are filled exactly as
    :func:`analyze_indicators` fills them, and the same window then feeds
    regime, pattern, divergence and entry logic.

    Support and resistance sit *support_pct* / *resistance_pct* percent
    below / above the current price.  The ATR used for stops is the
    indicator ATR, or 2 % of price when that is zero.

    Raises ``ValueError`` when ``metrics.price`` is not positive.
    """
    if not price_history:
        if history is None:
            history = RandomWalkHistory()
        price_history = history.price_history(metrics)
    if not volume_history and history is not None:
        volume_history = history.volume_history(metrics, len(price_history))

    prices = price_history
    indicators = analyze_indicators(metrics, prices, volume_history)
    confluence = calculate_confluence_score(indicators)

    timeframes = list(timeframes or [])
    alignment = analyze_multi_timeframe(timeframes)

    price = metrics.price
    atr_value = indicators.atr.value or price * FALLBACK_ATR_PCT / 100
    risk_reward = calculate_risk_reward(
        price,
        support=price * (1 - support_pct / 100),
        resistance=price * (1 + resistance_pct / 100),
        atr_value=atr_value,
        account_risk_pct=account_risk_pct,
    )

    market_regime = determine_market_regime(
        indicators.adx.value, atr_value / price * 100, prices,
    )
    patterns = recognize_patterns(prices)
    divergence = detect_divergence(prices, _rsi_trail(prices))
    smart_entry = determine_smart_entry(indicators, prices, patterns)

    final_signal = generate_final_signal(
        confluence=confluence,
        timeframe_alignment=alignment,
        risk_reward=risk_reward,
        smart_entry=smart_entry,
        market_regime=market_regime,
    )

    win_rate = ledger.query(lookback_days) if ledger is not None else None

    logger.info(
        "Analysis complete: score=%d confluence=%d%% regime=%s signal=%s",
        indicators.overall.score,
        confluence.confluence_percent,
        market_regime.regime,
        final_signal.signal.value,
    )

    return AdvancedAnalysis(
        metrics=metrics,
        indicators=indicators,
        confluence=confluence,
        timeframes=timeframes,
        timeframe_alignment=alignment,
        risk_reward=risk_reward,
        divergence=divergence,
        market_regime=market_regime,
        patterns=patterns,
        smart_entry=smart_entry,
        final_signal=final_signal,
        win_rate=win_rate,
    )


def _rsi_trail(prices: list[float]) -> list[float]:
    """RSI at each of the last few window endpoints, oldest first."""
    start = max(0, len(prices) - DIVERGENCE_WINDOW)
    return [calculate_rsi(prices[: i + 1]).value for i in range(start, len(prices))]
