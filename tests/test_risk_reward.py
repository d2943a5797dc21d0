"""Tests for the risk/reward setup calculator."""

import pytest

from coinscope.risk.risk_reward import calculate_risk_reward


class TestRiskReward:
    def test_atr_levels_at_support(self):
        """Entry 100, support 97, resistance 103, ATR 2 → SL 97, TP 106."""
        setup = calculate_risk_reward(100.0, 97.0, 103.0, 2.0)
        assert setup.stop_loss == pytest.approx(97.0)
        assert setup.take_profit == pytest.approx(106.0)
        assert setup.risk_reward_ratio == 2.0
        assert setup.is_valid is True
        assert setup.potential_gain == 6.0
        assert setup.potential_loss == 3.0

    def test_position_size_multiplier(self):
        # 2 % risk / 3 % stop distance × 100
        setup = calculate_risk_reward(100.0, 97.0, 103.0, 2.0)
        assert setup.position_size == pytest.approx(6666.67)

    def test_stop_clamped_below_support(self):
        setup = calculate_risk_reward(100.0, 95.0, 110.0, 2.0)
        assert setup.stop_loss == pytest.approx(94.05)

    def test_target_clamped_above_resistance(self):
        setup = calculate_risk_reward(100.0, 95.0, 110.0, 2.0)
        assert setup.take_profit == pytest.approx(111.1)
        # reward 11.1 / risk 5.95 ≈ 1.87
        assert setup.risk_reward_ratio == pytest.approx(1.87)
        assert setup.is_valid is False

    def test_levels_bracket_entry(self):
        for atr in (0.5, 1.0, 2.0, 5.0):
            setup = calculate_risk_reward(100.0, 97.0, 103.0, atr)
            assert setup.stop_loss < setup.entry_price < setup.take_profit

    def test_zero_risk_is_invalid(self):
        # Support above entry with no ATR leaves the stop at entry
        setup = calculate_risk_reward(100.0, 110.0, 103.0, 0.0)
        assert setup.risk_reward_ratio == 0.0
        assert setup.position_size == 0.0
        assert setup.is_valid is False

    def test_custom_account_risk(self):
        setup = calculate_risk_reward(100.0, 97.0, 103.0, 2.0, account_risk_pct=1.0)
        assert setup.position_size == pytest.approx(3333.33)

    @pytest.mark.parametrize("entry", [0.0, -1.0])
    def test_rejects_non_positive_entry(self, entry):
        with pytest.raises(ValueError, match="entry_price"):
            calculate_risk_reward(entry, 97.0, 103.0, 2.0)
