"""Indicator aggregator — runs every calculator and blends a 0-100 score."""

from __future__ import annotations

import logging
from typing import Optional

from coinscope.analysis.history import HistoryProvider, RandomWalkHistory
from coinscope.analysis.indicators import (
    calculate_adx,
    calculate_atr,
    calculate_bollinger,
    calculate_ema_cross,
    calculate_ichimoku,
    calculate_macd,
    calculate_obv,
    calculate_rsi,
    calculate_stochastic,
    calculate_vwap,
)
from coinscope.analysis.models import (
    ALIGNMENT_BEARISH,
    ALIGNMENT_BULLISH,
    BAND_LOWER,
    BAND_UPPER,
    VWAP_ABOVE,
    VWAP_BELOW,
    IndicatorAnalysis,
    OverallScore,
    Recommendation,
)
from coinscope.analysis.rounding import round_int
from coinscope.market.models import TokenMetrics

logger = logging.getLogger("coinscope")


def analyze_indicators(
    metrics: TokenMetrics,
    price_history: Optional[list[float]] = None,
    volume_history: Optional[list[float]] = None,
    history: Optional[HistoryProvider] = None,
) -> IndicatorAnalysis:
    """Compute every indicator for *metrics* and blend them into one score.

    Args:
        metrics: Current market snapshot.
        price_history: Real price window (oldest first).  When empty or
            ``None`` the window comes from *history*.
        volume_history: Real volume window aligned with the prices.  When
            empty or ``None`` it comes from *history*, or is a flat hourly
            average of the 24h volume when no provider is given.
        history: Provider for missing windows.  Prices default to an
            unseeded ``RandomWalkHistory``; pass a seeded one for
            reproducible output.

    Scoring starts at 50 and adds:
        - RSI outside 40-60: ``|rsi - 50| / 5 × 2``
        - EMA 9/21 fully aligned: 12
        - MACD momentum: 15 (Very Strong) or 10 (Strong)
        - Price at a Bollinger extreme: 5
        - Price away from VWAP: 8
        - ADX strength: 10 (Very Strong) or 7 (Strong)
    capped at 100.  Confidence grades the number of confirming signals.
    """
    if not price_history:
        if history is None:
            history = RandomWalkHistory()
        logger.debug("No price history supplied, synthesising with %s", type(history).__name__)
        price_history = history.price_history(metrics)
    if not volume_history:
        if history is not None:
            volume_history = history.volume_history(metrics, len(price_history))
        else:
            # Real prices without volumes: flat hourly average keeps the run deterministic
            volume_history = [metrics.volume_24h / 24] * len(price_history)

    prices = price_history
    rsi = calculate_rsi(prices)
    macd = calculate_macd(prices)
    ema = calculate_ema_cross(prices)
    bollinger = calculate_bollinger(prices)
    atr = calculate_atr(prices, prices, prices)
    obv = calculate_obv(prices, volume_history)
    stoch = calculate_stochastic(prices)
    adx = calculate_adx(prices, prices, prices)
    vwap = calculate_vwap(prices, volume_history)
    ichimoku = calculate_ichimoku(prices, prices, prices)

    score = 50.0
    confirmations = 0

    if rsi.value > 60 or rsi.value < 40:
        score += (abs(rsi.value - 50) / 5) * 2
        confirmations += 1

    if ema.alignment in (ALIGNMENT_BULLISH, ALIGNMENT_BEARISH):
        score += 12
        confirmations += 1

    if macd.momentum == "Very Strong":
        score += 15
        confirmations += 1
    elif macd.momentum == "Strong":
        score += 10

    if bollinger.position in (BAND_UPPER, BAND_LOWER):
        score += 5
        confirmations += 1

    if vwap.price_vs_vwap in (VWAP_ABOVE, VWAP_BELOW):
        score += 8
        confirmations += 1

    if adx.strength == "Very Strong":
        score += 10
        confirmations += 1
    elif adx.strength == "Strong":
        score += 7

    score = min(100.0, score)

    overall = OverallScore(
        score=round_int(score),
        confidence=_confidence_label(confirmations),
        recommendation=_recommendation(score),
    )
    logger.debug(
        "Indicator score %d (%s, %d confirmations) over %d samples",
        overall.score, overall.confidence, confirmations, len(prices),
    )

    return IndicatorAnalysis(
        rsi=rsi,
        macd=macd,
        ema=ema,
        bollinger=bollinger,
        atr=atr,
        obv=obv,
        stoch=stoch,
        adx=adx,
        vwap=vwap,
        ichimoku=ichimoku,
        overall=overall,
    )


def _confidence_label(confirmations: int) -> str:
    if confirmations >= 5:
        return "Very High"
    if confirmations >= 4:
        return "High"
    if confirmations >= 3:
        return "Moderate"
    if confirmations >= 2:
        return "Fair"
    return "Low"


def _recommendation(score: float) -> Recommendation:
    if score >= 75:
        return Recommendation.BUY
    if score >= 60:
        return Recommendation.CAUTIOUS_BUY
    if score <= 25:
        return Recommendation.SELL
    if score <= 40:
        return Recommendation.CAUTIOUS_SELL
    return Recommendation.NEUTRAL
