"""Risk/reward setup for long entries — pure math, no I/O.

SL sits 1.5 × ATR below entry and TP 3 × ATR above it.  Support and
resistance override those distances when the ATR levels fall on the wrong
side of them:

- SL above support → SL moves to 1 % below support.
- TP below resistance → TP moves to 1 % above resistance.
"""

from dataclasses import dataclass

MIN_RISK_REWARD = 2.0
SL_ATR_MULT = 1.5
TP_ATR_MULT = 3.0


@dataclass(frozen=True)
class RiskRewardSetup:
    """Computed levels and sizing for a long trade."""

    entry_price: float
    take_profit: float
    stop_loss: float
    risk_reward_ratio: float
    is_valid: bool  # ratio >= 2
    position_size: float  # sizing multiplier, may exceed 100
    potential_gain: float  # % of entry
    potential_loss: float  # % of entry


def calculate_risk_reward(
    entry_price: float,
    support: float,
    resistance: float,
    atr_value: float,
    account_risk_pct: float = 2.0,
) -> RiskRewardSetup:
    """Derive SL/TP, the risk:reward ratio and a suggested position size.

    Formula::

        risk          = entry - SL
        reward        = TP - entry
        ratio         = reward / risk
        position_size = account_risk_pct / (risk / entry) × 100

    *position_size* is a leverage-style multiplier rather than a share of
    capital, so values above 100 are expected for tight stops.

    Args:
        entry_price: Planned entry.
        support: Nearest support below entry.
        resistance: Nearest resistance above entry.
        atr_value: Current ATR in price units.
        account_risk_pct: Percent of the account risked per trade.

    Returns:
        ``RiskRewardSetup``.  A non-positive risk distance produces a ratio
        and size of 0 and an invalid setup.

    Raises:
        ValueError: If *entry_price* is not positive.
    """
    if entry_price <= 0:
        raise ValueError(f"entry_price must be positive, got {entry_price}")

    stop_loss = entry_price - atr_value * SL_ATR_MULT
    if stop_loss > support:
        stop_loss = support * 0.99

    take_profit = entry_price + atr_value * TP_ATR_MULT
    if take_profit < resistance:
        take_profit = resistance * 1.01

    risk_amount = entry_price - stop_loss
    reward_amount = take_profit - entry_price

    if risk_amount > 0:
        ratio = reward_amount / risk_amount
        position_size = account_risk_pct / (risk_amount / entry_price) * 100
    else:
        ratio = 0.0
        position_size = 0.0

    return RiskRewardSetup(
        entry_price=entry_price,
        take_profit=round(take_profit, 8),
        stop_loss=round(stop_loss, 8),
        risk_reward_ratio=round(ratio, 2),
        is_valid=ratio >= MIN_RISK_REWARD,
        position_size=round(position_size, 2),
        potential_gain=round((reward_amount / entry_price) * 100, 2),
        potential_loss=round((risk_amount / entry_price) * 100, 2),
    )
