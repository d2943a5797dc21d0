"""Final signal composer — gates every analysis stage into one verdict."""

from __future__ import annotations

from typing import Optional

from coinscope.analysis.models import (
    ConfluenceScore,
    FinalSignal,
    GateResults,
    MarketRegime,
    SignalType,
    SmartEntry,
)
from coinscope.analysis.rounding import round_int
from coinscope.risk.risk_reward import RiskRewardSetup

CONFLUENCE_GATE = 60
GATE_COUNT = 5


def evaluate_gates(
    confluence: Optional[ConfluenceScore] = None,
    timeframe_alignment: Optional[str] = None,
    risk_reward: Optional[RiskRewardSetup] = None,
    smart_entry: Optional[SmartEntry] = None,
    market_regime: Optional[MarketRegime] = None,
) -> GateResults:
    """Evaluate the five gates; a missing stage fails its gate."""
    return GateResults(
        confluence_pass=confluence is not None and confluence.confluence_percent >= CONFLUENCE_GATE,
        timeframe_pass=timeframe_alignment in ("strong-bullish", "bullish"),
        risk_reward_pass=risk_reward is not None and risk_reward.is_valid,
        entry_ready=smart_entry is not None and smart_entry.should_enter,
        regime_accepts=market_regime is not None and market_regime.regime != "ranging",
    )


def generate_final_signal(
    confluence: Optional[ConfluenceScore] = None,
    timeframe_alignment: Optional[str] = None,
    risk_reward: Optional[RiskRewardSetup] = None,
    smart_entry: Optional[SmartEntry] = None,
    market_regime: Optional[MarketRegime] = None,
) -> FinalSignal:
    """Classify a full analysis by how many gates it passes.

    Failing the confluence or risk/reward gate skips the setup outright
    with 0 confidence.  Otherwise 5 gates → STRONG-BUY, 4 → BUY,
    3 → NEUTRAL, fewer → SKIP, with confidence = passed / 5 × 100.
    """
    gates = evaluate_gates(
        confluence, timeframe_alignment, risk_reward, smart_entry, market_regime,
    )

    if not gates.confluence_pass or not gates.risk_reward_pass:
        return FinalSignal(SignalType.SKIP, 0, "Failed confluence or risk/reward filters")

    passed = gates.passed
    confidence = round_int(passed / GATE_COUNT * 100)

    if passed == GATE_COUNT:
        return FinalSignal(SignalType.STRONG_BUY, confidence, "All checks passed - ideal setup")
    if passed >= 4:
        return FinalSignal(SignalType.BUY, confidence, "Most checks passed - good setup")
    if passed >= 3:
        return FinalSignal(SignalType.NEUTRAL, confidence, "Mixed signals - use caution")
    return FinalSignal(SignalType.SKIP, confidence, "Insufficient confluent signals")
