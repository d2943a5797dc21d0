"""Confluence scoring — how strongly the directional indicators agree."""

from coinscope.analysis.models import Bias, ConfluenceScore, IndicatorAnalysis
from coinscope.analysis.rounding import round_int

TOTAL_INDICATORS = 8
TRADEABLE_THRESHOLD = 60.0


def calculate_confluence_score(analysis: IndicatorAnalysis) -> ConfluenceScore:
    """Score agreement across the eight directional indicators of *analysis*.

    The indicators are RSI, MACD, EMA 9/21, Bollinger, VWAP, Stochastic,
    Ichimoku and OBV.  ATR and ADX carry no direction and are not counted.
    """
    return score_biases(analysis.directional_biases())


def score_biases(biases: list[Bias]) -> ConfluenceScore:
    """Score a list of directional biases.

    ``confluence = max(bullish, bearish) / (bullish + bearish) × 100``, or
    50 when no indicator leans either way.  Tiers and tradeability use the
    unrounded percentage; the reported percentage is rounded half-up.
    """
    bullish = sum(1 for b in biases if b is Bias.BULLISH)
    bearish = sum(1 for b in biases if b is Bias.BEARISH)
    total = bullish + bearish

    percent = max(bullish, bearish) / total * 100 if total > 0 else 50.0

    if percent >= 90:
        level = "very-high"
    elif percent >= 75:
        level = "high"
    elif percent >= 60:
        level = "moderate"
    elif percent >= 40:
        level = "low"
    else:
        level = "very-low"

    return ConfluenceScore(
        total_indicators=TOTAL_INDICATORS,
        agreeing_indicators=max(bullish, bearish),
        confluence_percent=round_int(percent),
        bullish_count=bullish,
        bearish_count=bearish,
        confidence_level=level,
        tradeable=percent >= TRADEABLE_THRESHOLD,
    )
