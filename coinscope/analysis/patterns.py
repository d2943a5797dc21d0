"""Chart pattern recognition and price/RSI divergence — pure functions."""

from coinscope.analysis.models import DivergenceSignal, PatternSignal

PATTERN_WINDOW = 20
MIN_PATTERN_SAMPLES = 10
DIVERGENCE_WINDOW = 5


def _find_swings(prices: list[float]) -> tuple[list[float], list[float]]:
    """Return ``(swing_highs, swing_lows)`` in chronological order.

    A swing high is strictly above both neighbours, a swing low strictly
    below both.  The first and last samples are never swings.
    """
    highs: list[float] = []
    lows: list[float] = []
    for i in range(1, len(prices) - 1):
        prev_price, price, next_price = prices[i - 1], prices[i], prices[i + 1]
        if price > prev_price and price > next_price:
            highs.append(price)
        elif price < prev_price and price < next_price:
            lows.append(price)
    return highs, lows


def _detect_triangle(recent: list[float]) -> list[PatternSignal]:
    highs, lows = _find_swings(recent)
    if len(highs) < 2 or len(lows) < 2:
        return []

    # Converging: lower highs and higher lows
    if not (highs[-1] < highs[0] and lows[-1] > lows[0]):
        return []

    apex_mid = (highs[-1] + lows[-1]) / 2
    if recent[-1] > apex_mid:
        return [PatternSignal("triangle", 75, "bullish", highs[-1] * 1.01)]
    return [PatternSignal("triangle", 75, "bearish", lows[-1] * 0.99)]


def _detect_cup_handle(recent: list[float]) -> list[PatternSignal]:
    if len(recent) < 8:
        return []

    mid = len(recent) // 2
    left = recent[:mid]
    right = recent[mid:]

    left_low = min(left)
    left_high = max(left)
    right_low = min(right)
    handle = max(right[-3:])

    if left_low < recent[-1] and right_low > left_low and handle < left_high:
        return [PatternSignal("cup_handle", 80, "bullish", left_high * 1.01)]
    return []


def _detect_double_bottom(recent: list[float]) -> list[PatternSignal]:
    if len(recent) < 3:
        return []

    first, second, third = sorted(recent)[:3]
    if second <= first * 1.02 and second < third * 0.98:
        return [PatternSignal("double_bottom", 70, "bullish", third * 1.01)]
    return []


def recognize_patterns(prices: list[float]) -> list[PatternSignal]:
    """Detect triangle, cup-and-handle and double-bottom shapes.

    Scans the last 20 prices; fewer than 10 yields no patterns.  Patterns
    may co-occur and are returned in detection order without ranking.
    """
    if len(prices) < MIN_PATTERN_SAMPLES:
        return []

    recent = prices[-PATTERN_WINDOW:]
    return (
        _detect_triangle(recent)
        + _detect_cup_handle(recent)
        + _detect_double_bottom(recent)
    )


def detect_divergence(prices: list[float], rsi_history: list[float]) -> DivergenceSignal:
    """Compare the last 5 prices with the last 5 RSI readings.

    Bullish: price makes a new low while RSI sits more than 5 points above
    its recent low.  Bearish: price makes a new high while RSI sits more
    than 5 points below its recent high.
    """
    if len(prices) < DIVERGENCE_WINDOW or len(rsi_history) < DIVERGENCE_WINDOW:
        return DivergenceSignal("none", "price", "weak", "Insufficient data")

    recent_price = prices[-DIVERGENCE_WINDOW:]
    recent_rsi = rsi_history[-DIVERGENCE_WINDOW:]

    price_new_low = recent_price[-1] < min(recent_price[:-1])
    rsi_not_low = recent_rsi[-1] > min(recent_rsi[:-1]) + 5
    if price_new_low and rsi_not_low:
        return DivergenceSignal(
            "bullish", "rsi", "strong",
            "Price makes new low but RSI diverges - potential reversal",
        )

    price_new_high = recent_price[-1] > max(recent_price[:-1])
    rsi_not_high = recent_rsi[-1] < max(recent_rsi[:-1]) - 5
    if price_new_high and rsi_not_high:
        return DivergenceSignal(
            "bearish", "rsi", "strong",
            "Price makes new high but RSI diverges - potential reversal",
        )

    return DivergenceSignal("none", "price", "weak", "No divergence detected")
