"""Tests for chart pattern recognition, divergence and timeframe alignment."""

import pytest

from coinscope.analysis.models import TimeframeData
from coinscope.analysis.patterns import detect_divergence, recognize_patterns
from coinscope.analysis.timeframes import analyze_multi_timeframe

# Converging swings: highs 110 → 105, lows 101 → 104, closing above the apex
_TRIANGLE = [100.0, 110.0, 101.0, 108.0, 102.0, 106.0, 103.0, 105.0, 104.0, 104.8]

# Left half dips to 100 under a 110 rim, right half recovers with a
# handle below the rim
_CUP_HANDLE = [110.0, 100.0, 102.0, 104.0, 106.0, 105.0, 104.0, 106.0, 107.0, 108.0]

# Two lows within 2 % of each other, the next-lowest price well above them
_DOUBLE_BOTTOM = [100.0, 95.0, 100.0, 105.0, 100.0, 95.5, 101.0, 104.0, 106.0, 108.0]


def _tf(direction: str, name: str = "1h") -> TimeframeData:
    return TimeframeData(name, 50.0, "Neutral", direction, 50.0)


# ── Patterns ─────────────────────────────────────────────────────────────


class TestRecognizePatterns:
    def test_fewer_than_ten_prices(self):
        assert recognize_patterns(_TRIANGLE[:9]) == []

    def test_flat_window_has_no_patterns(self):
        assert recognize_patterns([100.0] * 20) == []

    def test_converging_triangle(self):
        patterns = recognize_patterns(_TRIANGLE)
        triangle = next(p for p in patterns if p.pattern == "triangle")
        assert triangle.direction == "bullish"
        assert triangle.confidence == 75
        assert triangle.breakout_level == pytest.approx(106.05)

    def test_triangle_below_apex_is_bearish(self):
        # Same converging swings, last price 103.5 under the 104 midpoint
        prices = _TRIANGLE[:-1] + [103.5]
        triangle = next(p for p in recognize_patterns(prices) if p.pattern == "triangle")
        assert triangle.direction == "bearish"
        assert triangle.confidence == 75
        assert triangle.breakout_level == pytest.approx(103.0 * 0.99)

    def test_triangle_at_apex_is_bearish(self):
        prices = _TRIANGLE[:-1] + [104.0]
        triangle = next(p for p in recognize_patterns(prices) if p.pattern == "triangle")
        assert triangle.direction == "bearish"

    def test_cup_and_handle(self):
        patterns = recognize_patterns(_CUP_HANDLE)
        assert [p.pattern for p in patterns] == ["cup_handle"]
        cup = patterns[0]
        assert cup.direction == "bullish"
        assert cup.confidence == 80
        assert cup.breakout_level == pytest.approx(110.0 * 1.01)

    def test_handle_reaching_left_high_is_not_a_cup(self):
        prices = _CUP_HANDLE[:-1] + [111.0]
        assert recognize_patterns(prices) == []

    def test_right_side_undercutting_left_low_is_not_a_cup(self):
        prices = _CUP_HANDLE[:5] + [99.0] + _CUP_HANDLE[6:]
        assert recognize_patterns(prices) == []

    def test_patterns_can_co_occur(self):
        names = [p.pattern for p in recognize_patterns(_TRIANGLE)]
        assert names == ["triangle", "cup_handle"]

    def test_double_bottom(self):
        patterns = recognize_patterns(_DOUBLE_BOTTOM)
        double = next(p for p in patterns if p.pattern == "double_bottom")
        assert double.direction == "bullish"
        assert double.breakout_level == pytest.approx(101.0)

    def test_only_last_twenty_prices_count(self):
        assert recognize_patterns([500.0] * 30 + _TRIANGLE * 2) == recognize_patterns(_TRIANGLE * 2)


# ── Divergence ───────────────────────────────────────────────────────────


class TestDivergence:
    def test_short_prices(self):
        result = detect_divergence([1.0, 2.0, 3.0, 4.0], [50.0] * 5)
        assert result.type == "none"
        assert result.description == "Insufficient data"

    def test_short_rsi_history(self):
        result = detect_divergence([1.0, 2.0, 3.0, 4.0, 5.0], [50.0] * 4)
        assert result.type == "none"

    def test_bullish_divergence(self):
        result = detect_divergence([10.0, 9.0, 8.0, 7.0, 6.0], [30.0, 25.0, 20.0, 22.0, 31.0])
        assert result.type == "bullish"
        assert result.indicator == "rsi"
        assert result.strength == "strong"

    def test_bearish_divergence(self):
        result = detect_divergence([1.0, 2.0, 3.0, 4.0, 5.0], [70.0, 80.0, 75.0, 72.0, 70.0])
        assert result.type == "bearish"

    def test_confirming_rsi_is_not_divergence(self):
        result = detect_divergence([1.0, 2.0, 3.0, 4.0, 5.0], [60.0, 62.0, 64.0, 66.0, 68.0])
        assert result.type == "none"
        assert result.description == "No divergence detected"


# ── Timeframes ───────────────────────────────────────────────────────────


class TestMultiTimeframe:
    def test_empty_is_neutral(self):
        assert analyze_multi_timeframe([]) == "neutral"

    def test_all_up_is_strong_bullish(self):
        assert analyze_multi_timeframe([_tf("up"), _tf("up", "4h")]) == "strong-bullish"

    def test_all_down_is_strong_bearish(self):
        assert analyze_multi_timeframe([_tf("down")] * 3) == "strong-bearish"

    def test_lead_of_two_is_directional(self):
        frames = [_tf("up"), _tf("up"), _tf("up"), _tf("down")]
        assert analyze_multi_timeframe(frames) == "bullish"

    def test_lead_of_one_is_neutral(self):
        assert analyze_multi_timeframe([_tf("up"), _tf("up"), _tf("down")]) == "neutral"

    def test_bearish_lead(self):
        frames = [_tf("down"), _tf("down"), _tf("neutral")]
        assert analyze_multi_timeframe(frames) == "bearish"
