"""Market regime classification — trending, ranging, breakout or reversal."""

from coinscope.analysis.models import MarketRegime

ADX_TREND_THRESHOLD = 25.0

_RECOMMENDATIONS = {
    "ranging": "Trade support/resistance bounces, avoid breakouts",
    "breakout": "Enter on breakout with stop behind support/resistance",
    "reversal": "Watch for reversal setup, take divergence signals seriously",
}


def classify_volatility(atr_percent: float) -> str:
    """Grade ATR-as-%-of-price into low / medium / high / extreme."""
    if atr_percent > 3:
        return "extreme"
    if atr_percent > 2:
        return "high"
    if atr_percent > 1:
        return "medium"
    return "low"


def determine_market_regime(
    adx_value: float,
    atr_percent: float,
    price_history: list[float],
) -> MarketRegime:
    """Classify the market from trend strength and recent price range.

    - ADX > 25 → *trending*, or *breakout* when the last 5 prices span more
      than 2 % of their mean.
    - Otherwise → *ranging*, or *reversal* when the last 10 prices span less
      than 1 % of their low (tight consolidation).

    An empty *price_history* leaves the base regime unchanged.
    """
    volatility = classify_volatility(atr_percent)

    if adx_value > ADX_TREND_THRESHOLD:
        regime = "trending"
        recent = price_history[-5:]
        if recent:
            avg_price = sum(recent) / len(recent)
            if avg_price and (max(recent) - min(recent)) / avg_price > 0.02:
                regime = "breakout"
    else:
        regime = "ranging"
        recent = price_history[-10:]
        if recent:
            recent_high = max(recent)
            recent_low = min(recent)
            if recent_low and abs(recent_high - recent_low) / recent_low < 0.01:
                regime = "reversal"

    if regime == "trending":
        recommendation = (
            "Follow the trend, use breakouts" if adx_value > 30
            else "Trade with trend confirmation"
        )
    else:
        recommendation = _RECOMMENDATIONS[regime]

    return MarketRegime(
        regime=regime,
        adx_value=adx_value,
        volatility=volatility,
        recommendation=recommendation,
    )
