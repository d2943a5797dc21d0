"""Tests for report formatting and the prompt JSON context."""

import json

import numpy as np

from coinscope.analysis.history import RandomWalkHistory
from coinscope.analysis.pipeline import run_advanced_analysis
from coinscope.market.models import TokenMetrics
from coinscope.reports.formatters import (
    build_prompt_context,
    format_advanced_analysis,
    format_indicators,
    format_onchain,
    format_win_rate,
)
from coinscope.risk.onchain import analyze_onchain
from coinscope.tracking.models import PatternStat, WinRateAnalysis

_METRICS = TokenMetrics(
    price=0.5, price_change_24h=10.0, volume_24h=48_000.0,
    liquidity=120_000.0, buys_24h=300, sells_24h=100,
)


def _result():
    return run_advanced_analysis(
        _METRICS, history=RandomWalkHistory(np.random.default_rng(9)),
    )


class TestTextReports:
    def test_indicators_report(self):
        text = format_indicators(_result().indicators)
        assert "Technical Indicators" in text
        assert "Score:" in text
        assert "Ichimoku:" in text

    def test_advanced_report(self):
        result = _result()
        text = format_advanced_analysis(result)
        assert f"Signal:          {result.final_signal.signal.value}" in text
        assert "Take Profit:" in text
        assert "Win Rate" not in text

    def test_empty_win_rate(self):
        assert "No signals tracked yet." in format_win_rate(WinRateAnalysis())

    def test_win_rate_report(self):
        analysis = WinRateAnalysis(
            total_signals=4, winning_signals=3, losing_signals=1, win_rate=75,
            average_win=4.0, average_loss=2.0, profit_factor=6.0,
            top_patterns=[PatternStat("triangle", 100, 2)],
            confidence_correlation=-20,
        )
        text = format_win_rate(analysis, lookback_days=7)
        assert "Win Rate (7D)" in text
        assert "75% (3W / 1L / 0BE)" in text
        assert "triangle: 100% WR (2 trades)" in text
        assert "PROFITABLE" in text
        assert "20% (not positive)" in text

    def test_onchain_report(self):
        text = format_onchain(analyze_onchain())
        assert "On-Chain Analysis" in text
        assert "Risk Score:      42/100 (moderate)" in text


class TestPromptContext:
    def test_is_valid_json(self):
        result = _result()
        context = json.loads(build_prompt_context(result, symbol="BONK"))
        assert context["token"]["symbol"] == "BONK"
        assert context["activity"]["totalTxns"] == 400
        assert context["activity"]["buyPressure"] == 75.0
        assert context["volume"]["volumeToLiquidityRatio"] == 0.4
        assert context["advancedAnalysis"]["finalSignal"] == result.final_signal.signal.value
        assert "onchain" not in context

    def test_includes_onchain(self):
        context = json.loads(build_prompt_context(_result(), onchain=analyze_onchain()))
        assert context["onchain"]["overallRiskScore"] == 42
