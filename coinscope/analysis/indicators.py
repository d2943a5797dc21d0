"""Technical indicators — RSI, MACD, EMA, Bollinger, ATR, OBV, Stochastic,
ADX, VWAP, Ichimoku. Pure functions, no I/O.

Every calculator is total: a window shorter than the indicator needs yields
a neutral default labelled ``"Insufficient Data"`` instead of raising.

Several of these are deliberate approximations (ATR without Wilder
smoothing, a change-magnitude ADX, a midpoint %D). They are the scoring
contract the rest of the pipeline is tuned against, not textbook
implementations.
"""

import math

from coinscope.analysis.models import (
    ALIGNMENT_BEARISH,
    ALIGNMENT_BULLISH,
    BAND_LOWER,
    BAND_LOWER_HALF,
    BAND_MIDDLE,
    BAND_UPPER,
    BAND_UPPER_HALF,
    INSUFFICIENT_DATA,
    VWAP_ABOVE,
    VWAP_BELOW,
    VWAP_NEAR,
    ADXResult,
    ATRResult,
    Bias,
    BollingerResult,
    EMACrossResult,
    IchimokuResult,
    MACDResult,
    OBVResult,
    RSIResult,
    StochasticResult,
    VWAPResult,
)


# ── EMA ──────────────────────────────────────────────────────────────────


def calculate_ema(prices: list[float], period: int) -> float:
    """Return the final value of an Exponential Moving Average.

    ``EMA_today = (price - EMA_yesterday) × k + EMA_yesterday`` with
    ``k = 2 / (period + 1)``, seeded with the SMA of the first *period*
    prices.

    With fewer than *period* prices the last price is returned as-is; an
    empty list gives ``0.0``.
    """
    if not prices:
        return 0.0
    if len(prices) < period:
        return prices[-1]

    k = 2.0 / (period + 1)
    ema = sum(prices[:period]) / period
    for price in prices[period:]:
        ema = (price - ema) * k + ema
    return ema


def calculate_ema_cross(prices: list[float]) -> EMACrossResult:
    """EMA 9/21 alignment relative to the current price.

    Requires at least 21 prices.
    """
    if len(prices) < 21:
        return EMACrossResult(0.0, 0.0, INSUFFICIENT_DATA, "Neutral")

    ema9 = calculate_ema(prices, 9)
    ema21 = calculate_ema(prices, 21)
    current = prices[-1]

    if ema9 > ema21 and current > ema21:
        alignment, signal, bias = ALIGNMENT_BULLISH, "Strong Bullish Alignment", Bias.BULLISH
    elif ema9 < ema21 and current < ema21:
        alignment, signal, bias = ALIGNMENT_BEARISH, "Strong Bearish Alignment", Bias.BEARISH
    elif ema9 > ema21:
        alignment, signal, bias = "Bullish (Price Below)", "Weak Bullish", Bias.BULLISH
    elif ema9 < ema21:
        alignment, signal, bias = "Bearish (Price Above)", "Weak Bearish", Bias.BEARISH
    else:
        alignment, signal, bias = "Neutral", "Consolidation Zone", Bias.NEUTRAL

    return EMACrossResult(
        ema9=round(ema9, 8),
        ema21=round(ema21, 8),
        alignment=alignment,
        signal=signal,
        bias=bias,
    )


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(prices: list[float], period: int = 14) -> RSIResult:
    """Relative Strength Index over the first *period* changes of the window.

    Algorithm:
        1. Sum gains and losses of ``prices[1..period]`` vs their predecessor.
        2. avg_gain = gains / period, avg_loss = losses / period.
        3. RSI = 100 - 100 / (1 + avg_gain / avg_loss).

    A window with no losses scores 100, or 50 when it has no gains either.

    Requires at least ``period + 1`` prices; otherwise returns 50.
    """
    if len(prices) < period + 1:
        return RSIResult(50.0, INSUFFICIENT_DATA, "Neutral")

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = prices[i] - prices[i - 1]
        if change > 0:
            gains += change
        else:
            losses += abs(change)

    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        rsi = 100.0 if avg_gain > 0 else 50.0
    else:
        rs = avg_gain / avg_loss
        rsi = 100.0 - 100.0 / (1.0 + rs)

    bias = Bias.NEUTRAL
    if rsi > 70:
        signal = "Overbought"
    elif rsi < 30:
        signal = "Oversold"
    elif rsi > 60:
        signal, bias = "Strong Bullish", Bias.BULLISH
    elif rsi < 40:
        signal, bias = "Strong Bearish", Bias.BEARISH
    else:
        signal = "Neutral"

    if rsi > 75 or rsi < 25:
        strength = "Very Strong"
    elif rsi > 70 or rsi < 30:
        strength = "Strong"
    elif rsi > 65 or rsi < 35:
        strength = "Moderate"
    else:
        strength = "Weak"

    return RSIResult(value=round(rsi, 2), signal=signal, strength=strength, bias=bias)


# ── MACD ─────────────────────────────────────────────────────────────────


def calculate_macd(prices: list[float]) -> MACDResult:
    """MACD histogram from EMA(12) − EMA(26) and a 9-period signal line.

    The signal line is an EMA(9) over a MACD history rebuilt by recomputing
    EMA(12) − EMA(26) on every trailing 26-price sub-window.  When the window
    is exactly 26 prices long that history is empty and the histogram is 0.

    Requires at least 26 prices.
    """
    if len(prices) < 26:
        return MACDResult(0.0, INSUFFICIENT_DATA, "Neutral")

    macd_line = calculate_ema(prices, 12) - calculate_ema(prices, 26)

    macd_history: list[float] = []
    for i in range(len(prices) - 26):
        window = prices[i : i + 26]
        macd_history.append(calculate_ema(window, 12) - calculate_ema(window, 26))

    signal_line = calculate_ema(macd_history, 9) if macd_history else macd_line
    histogram = macd_line - signal_line

    if histogram > 0.5:
        signal, bias = "Bullish Momentum", Bias.BULLISH
    elif histogram < -0.5:
        signal, bias = "Bearish Momentum", Bias.BEARISH
    elif histogram > 0:
        signal, bias = "Weak Bullish", Bias.BULLISH
    else:
        signal, bias = "Weak Bearish", Bias.BEARISH

    magnitude = abs(histogram)
    if magnitude > 2:
        momentum = "Very Strong"
    elif magnitude > 1:
        momentum = "Strong"
    elif magnitude > 0.5:
        momentum = "Moderate"
    else:
        momentum = "Weak"

    return MACDResult(
        histogram=round(histogram, 4),
        signal=signal,
        momentum=momentum,
        bias=bias,
    )


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    prices: list[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerResult:
    """Bollinger Bands over the last *period* prices.

    Middle = SMA, Upper/Lower = middle ± *std_dev* × σ (population σ).

    Position is "Upper Band" once price is within 5 % of the upper band and
    "Lower Band" within 5 % of the lower band.  Zero-width bands are "Middle".
    """
    if len(prices) < period:
        return BollingerResult(0.0, 0.0, 0.0, INSUFFICIENT_DATA)

    recent = prices[-period:]
    middle = sum(recent) / period
    variance = sum((p - middle) ** 2 for p in recent) / period
    sigma = math.sqrt(variance)

    upper = middle + sigma * std_dev
    lower = middle - sigma * std_dev
    current = prices[-1]

    if sigma == 0:
        position, bias = BAND_MIDDLE, Bias.NEUTRAL
    elif current > upper * 0.95:
        position, bias = BAND_UPPER, Bias.BEARISH
    elif current < lower * 1.05:
        position, bias = BAND_LOWER, Bias.BULLISH
    elif current > middle:
        position, bias = BAND_UPPER_HALF, Bias.BEARISH
    else:
        position, bias = BAND_LOWER_HALF, Bias.BULLISH

    return BollingerResult(
        upper=round(upper, 8),
        lower=round(lower, 8),
        middle=round(middle, 8),
        position=position,
        bias=bias,
    )


# ── ATR ──────────────────────────────────────────────────────────────────


def calculate_atr(
    high: list[float],
    low: list[float],
    close: list[float],
    period: int = 14,
) -> ATRResult:
    """Average True Range over the first *period* bars of the window.

    ``TR = max(high - low, |high - close|, |low - close|)`` with all three
    taken from the same bar, so there is no previous-close shift.  This is
    a plain average, not Wilder-smoothed.  With identical high/low/close
    series, as the aggregator passes, the result is always 0.

    Volatility is graded by ATR as a percentage of the last close.
    """
    if min(len(high), len(low), len(close)) < period:
        return ATRResult(0.0, INSUFFICIENT_DATA)

    total = 0.0
    for i in range(period):
        total += max(
            high[i] - low[i],
            abs(high[i] - close[i]),
            abs(low[i] - close[i]),
        )

    atr = total / period
    last_close = close[-1]
    percentage = (atr / last_close) * 100 if last_close else 0.0

    if percentage > 3:
        volatility = "Very High"
    elif percentage > 2:
        volatility = "High"
    elif percentage > 1:
        volatility = "Moderate"
    else:
        volatility = "Low"

    return ATRResult(value=round(atr, 8), volatility=volatility)


# ── OBV ──────────────────────────────────────────────────────────────────


def calculate_obv(closes: list[float], volumes: list[float]) -> OBVResult:
    """On-Balance Volume trend over the last 10 OBV readings.

    OBV starts at the first volume and adds/subtracts each later volume by
    the sign of the close-to-close change.
    """
    n = min(len(closes), len(volumes))
    if n < 2:
        return OBVResult("Neutral", INSUFFICIENT_DATA)

    obv = volumes[0]
    obv_history = [obv]
    for i in range(1, n):
        if closes[i] > closes[i - 1]:
            obv += volumes[i]
        elif closes[i] < closes[i - 1]:
            obv -= volumes[i]
        obv_history.append(obv)

    recent = obv_history[-10:]
    if recent[-1] > recent[0]:
        trend, bias = "Bullish", Bias.BULLISH
    else:
        trend, bias = "Bearish", Bias.BEARISH

    change_pct = ((recent[-1] - recent[0]) / recent[0]) * 100 if recent[0] else 0.0
    if abs(change_pct) > 10:
        momentum = "Strong"
    elif abs(change_pct) > 5:
        momentum = "Moderate"
    else:
        momentum = "Weak"

    return OBVResult(trend=trend, momentum=momentum, bias=bias)


# ── Stochastic ───────────────────────────────────────────────────────────


def calculate_stochastic(closes: list[float], period: int = 14) -> StochasticResult:
    """Stochastic %K of the current close within the last *period* closes.

    %D is the midpoint between %K and 50, not a moving average of %K.
    """
    if len(closes) < period:
        return StochasticResult(50.0, 50.0, INSUFFICIENT_DATA)

    recent = closes[-period:]
    lowest = min(recent)
    highest = max(recent)
    current = closes[-1]

    k = 50.0 if lowest == highest else ((current - lowest) / (highest - lowest)) * 100
    d = (k + 50) / 2

    bias = Bias.NEUTRAL
    if k > 80:
        signal = "Overbought"
    elif k < 20:
        signal = "Oversold"
    elif k > d:
        signal, bias = "Bullish Crossover", Bias.BULLISH
    elif k < d:
        signal, bias = "Bearish Crossover", Bias.BEARISH
    else:
        signal = "Neutral"

    return StochasticResult(k=round(k, 2), d=round(d, 2), signal=signal, bias=bias)


# ── ADX ──────────────────────────────────────────────────────────────────


def calculate_adx(
    high: list[float],
    low: list[float],
    close: list[float],
    period: int = 14,
) -> ADXResult:
    """Trend-strength estimate standing in for a Wilder ADX.

    Takes the mean absolute change of the last *period* highs.  When the
    last bar made a higher high (uptrend) or a lower low (downtrend),
    ``ADX = min(50, 20 + 5 × mean_change)``; otherwise it stays at 20.

    *close* is accepted for signature parity with the other calculators.
    """
    if min(len(high), len(low)) < max(period, 2):
        return ADXResult(20.0, "Weak Trend", "Weak")

    recent = high[-period:]
    avg_change = sum(abs(recent[i] - recent[i - 1]) for i in range(1, len(recent))) / period

    adx = 20.0
    trend = "No Clear Trend"
    if high[-1] > high[-2]:
        trend = "Uptrend"
        adx = min(50.0, 20 + avg_change * 5)
    elif low[-1] < low[-2]:
        trend = "Downtrend"
        adx = min(50.0, 20 + avg_change * 5)

    if adx > 40:
        strength = "Very Strong"
    elif adx > 30:
        strength = "Strong"
    elif adx > 20:
        strength = "Moderate"
    else:
        strength = "Weak"

    return ADXResult(value=round(adx, 2), trend=trend, strength=strength)


# ── VWAP ─────────────────────────────────────────────────────────────────


def calculate_vwap(closes: list[float], volumes: list[float]) -> VWAPResult:
    """Volume Weighted Average Price over the whole window.

    With zero total volume the VWAP is the last close.
    """
    if not closes:
        return VWAPResult(0.0, "No Data")

    price_volume = 0.0
    volume_sum = 0.0
    for price, volume in zip(closes, volumes):
        price_volume += price * volume
        volume_sum += volume

    current = closes[-1]
    vwap = current if volume_sum == 0 else price_volume / volume_sum

    diff = ((current - vwap) / vwap) * 100 if vwap else 0.0
    if diff > 1:
        position, bias = VWAP_ABOVE, Bias.BULLISH
    elif diff < -1:
        position, bias = VWAP_BELOW, Bias.BEARISH
    else:
        position, bias = VWAP_NEAR, Bias.NEUTRAL

    return VWAPResult(level=round(vwap, 8), price_vs_vwap=position, bias=bias)


# ── Ichimoku ─────────────────────────────────────────────────────────────


def calculate_ichimoku(
    high: list[float],
    low: list[float],
    close: list[float],
) -> IchimokuResult:
    """Qualitative Ichimoku cloud read.

    Tenkan/kijun proxies are the midpoints of the 26- and 52-bar high
    ranges; *low* is accepted for signature parity.  Requires 26 bars.
    """
    if len(high) < 26 or not close:
        return IchimokuResult(INSUFFICIENT_DATA, "Neutral")

    recent26 = high[-26:]
    recent52 = high[-52:]
    tenkan = (max(recent26) + min(recent26)) / 2
    kijun = (max(recent52) + min(recent52)) / 2
    current = close[-1]

    if current > tenkan and tenkan > kijun:
        return IchimokuResult("Strong Bullish Cloud", "Strong", Bias.BULLISH)
    if current < tenkan and tenkan < kijun:
        return IchimokuResult("Strong Bearish Cloud", "Strong", Bias.BEARISH)
    if current > kijun:
        return IchimokuResult("Bullish", "Moderate", Bias.BULLISH)
    if current < kijun:
        return IchimokuResult("Bearish", "Moderate", Bias.BEARISH)
    return IchimokuResult("Neutral", "Weak")
