"""Tests for confluence scoring and market regime classification."""

import pytest

from coinscope.analysis.aggregator import analyze_indicators
from coinscope.analysis.confluence import calculate_confluence_score, score_biases
from coinscope.analysis.models import Bias
from coinscope.analysis.regime import classify_volatility, determine_market_regime
from coinscope.market.models import TokenMetrics

B, S, N = Bias.BULLISH, Bias.BEARISH, Bias.NEUTRAL


# ── Confluence ───────────────────────────────────────────────────────────


class TestConfluence:
    def test_no_directional_reads_is_fifty(self):
        result = score_biases([N] * 8)
        assert result.confluence_percent == 50
        assert result.agreeing_indicators == 0
        assert result.confidence_level == "low"
        assert result.tradeable is False

    def test_unanimous_bullish(self):
        result = score_biases([B] * 8)
        assert result.confluence_percent == 100
        assert result.bullish_count == 8
        assert result.confidence_level == "very-high"
        assert result.tradeable is True

    def test_three_to_one(self):
        result = score_biases([B, B, B, B, B, B, S, S])
        assert result.confluence_percent == 75
        assert result.confidence_level == "high"

    def test_sixty_percent_is_tradeable(self):
        result = score_biases([B, B, B, S, S, N, N, N])
        assert result.confluence_percent == 60
        assert result.confidence_level == "moderate"
        assert result.tradeable is True

    def test_neutral_reads_do_not_dilute(self):
        result = score_biases([S, S, N, N, N, N, N, N])
        assert result.confluence_percent == 100
        assert result.bearish_count == 2

    def test_rounds_half_up(self):
        # 2 / 3 → 66.67 → 67
        assert score_biases([B, B, S]).confluence_percent == 67

    def test_total_is_always_eight(self):
        analysis = analyze_indicators(TokenMetrics(price=1.0), [1.0 + i * 0.01 for i in range(50)])
        result = calculate_confluence_score(analysis)
        assert result.total_indicators == 8
        assert 0 <= result.confluence_percent <= 100
        assert result.bullish_count + result.bearish_count <= 8


# ── Regime ───────────────────────────────────────────────────────────────


class TestVolatility:
    @pytest.mark.parametrize(
        "atr_percent,expected",
        [(0.5, "low"), (1.0, "low"), (1.5, "medium"), (2.5, "high"), (3.0, "high"), (3.5, "extreme")],
    )
    def test_tiers(self, atr_percent, expected):
        assert classify_volatility(atr_percent) == expected


class TestMarketRegime:
    def test_trending_with_steady_prices(self):
        regime = determine_market_regime(28.0, 1.5, [100.0, 100.5, 101.0, 101.2, 101.5])
        assert regime.regime == "trending"
        assert regime.recommendation == "Trade with trend confirmation"
        assert regime.volatility == "medium"

    def test_strong_trend_recommendation(self):
        regime = determine_market_regime(35.0, 1.0, [])
        assert regime.regime == "trending"
        assert regime.recommendation == "Follow the trend, use breakouts"

    def test_breakout_on_wide_recent_range(self):
        regime = determine_market_regime(30.0, 2.0, [100.0, 101.0, 102.0, 104.0, 106.0])
        assert regime.regime == "breakout"

    def test_tight_consolidation_is_reversal(self):
        regime = determine_market_regime(20.0, 0.5, [100.0, 100.2, 100.1, 100.3, 100.2])
        assert regime.regime == "reversal"

    def test_wide_range_without_trend_is_ranging(self):
        regime = determine_market_regime(20.0, 0.5, [100.0, 105.0, 98.0, 104.0, 99.0])
        assert regime.regime == "ranging"
        assert regime.recommendation == "Trade support/resistance bounces, avoid breakouts"

    def test_empty_history_keeps_base_regime(self):
        assert determine_market_regime(30.0, 1.0, []).regime == "trending"
        assert determine_market_regime(10.0, 1.0, []).regime == "ranging"

    def test_threshold_is_exclusive(self):
        assert determine_market_regime(25.0, 1.0, []).regime == "ranging"
