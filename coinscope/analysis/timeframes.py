"""Multi-timeframe trend alignment."""

from coinscope.analysis.models import TimeframeData


def analyze_multi_timeframe(timeframes: list[TimeframeData]) -> str:
    """Summarise per-timeframe trend directions into one alignment label.

    Returns ``"strong-bullish"`` / ``"strong-bearish"`` when every timeframe
    agrees, ``"bullish"`` / ``"bearish"`` when one side leads by more than
    one timeframe, and ``"neutral"`` otherwise (including no timeframes).
    """
    if not timeframes:
        return "neutral"

    bullish = sum(1 for tf in timeframes if tf.trend_direction == "up")
    bearish = sum(1 for tf in timeframes if tf.trend_direction == "down")

    if bullish == len(timeframes):
        return "strong-bullish"
    if bearish == len(timeframes):
        return "strong-bearish"
    if bullish > bearish + 1:
        return "bullish"
    if bearish > bullish + 1:
        return "bearish"
    return "neutral"
