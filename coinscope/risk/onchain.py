"""On-chain risk scoring — holder concentration, liquidity locks, order flow.

Pure functions over figures supplied by the caller (holder balances,
exchange flows, locked liquidity, transaction sizes).  Nothing here talks
to a chain; fetching those figures belongs to the market-data layer.
"""

from dataclasses import dataclass, field
from typing import Optional

from coinscope.analysis.rounding import round_half_up, round_int

DEFAULT_WHALE_THRESHOLD = 100_000.0

_RUG_RISK_SCORES = {"low": 20, "medium": 50, "high": 75, "critical": 95}

_CONCENTRATION_TIERS = {
    "decentralized": "low",
    "balanced": "medium",
    "concentrated": "high",
    "danger": "high",
    "extreme": "critical",
}


# ── Models ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Holder:
    address: str
    balance: float


@dataclass(frozen=True)
class HolderAnalysis:
    total_holders: int
    top10_percent: float
    top50_percent: float
    dilution: float
    concentration: str  # decentralized / balanced / concentrated / danger / extreme
    rug_risk_level: str  # low / medium / high / critical


@dataclass(frozen=True)
class ExchangeFlows:
    inflow_24h: int
    outflow_24h: int
    net_flow: int
    flow_trend: str  # bullish / bearish / neutral
    whale_movement: str  # accumulating / distributing / neutral


@dataclass(frozen=True)
class LiquidityScore:
    score: int  # 0-100
    locked: int  # % of liquidity locked
    trend: str  # increasing / stable / decreasing


@dataclass(frozen=True)
class TransactionAnalysis:
    buy_sell_ratio: float
    volume_weighted_ratio: float
    signal: str  # bullish / bearish / neutral
    whale_activity: str  # buying / selling / neutral
    avg_buy_size: int
    avg_sell_size: int
    whale_size: int


@dataclass(frozen=True)
class SmartMoneySignals:
    whale_accumulation: bool
    institutional_activity: bool
    trading_bot_activity: bool
    trade_size: str  # micro / small / medium / large / whale
    large_transaction_ratio: int  # % of transactions over 2x the mean


@dataclass(frozen=True)
class OnChainInput:
    """Raw on-chain figures; every field is optional."""

    holders: list[Holder] = field(default_factory=list)
    exchange_inflow: float = 0.0
    exchange_outflow: float = 0.0
    total_liquidity: float = 0.0
    locked_liquidity: float = 0.0
    liquidity_history: list[float] = field(default_factory=list)
    buy_volume: float = 0.0
    sell_volume: float = 0.0
    buys: int = 0
    sells: int = 0
    avg_buy_size: float = 0.0
    avg_sell_size: float = 0.0
    transaction_sizes: list[float] = field(default_factory=list)
    price_action: str = "neutral"  # up / down / neutral


@dataclass(frozen=True)
class HolderDistribution:
    top_holder_percent: float
    concentration: str  # low / medium / high / critical
    rug_risk_score: int


@dataclass(frozen=True)
class LiquidityAnalysis:
    liquidity_locked: int
    liquidity_trend: str
    liquidity_score: int


@dataclass(frozen=True)
class VolumeAnalysis:
    volume_24h: float
    volume_trend: int  # % buy-side skew
    volume_quality: str  # low / medium / high


@dataclass(frozen=True)
class TransactionSummary:
    buy_sell_ratio: float
    whale_activity: str
    buyer_count: int
    seller_count: int


@dataclass(frozen=True)
class OnChainMetrics:
    holder_distribution: HolderDistribution
    liquidity_analysis: LiquidityAnalysis
    volume_analysis: VolumeAnalysis
    transaction_analysis: TransactionSummary
    smart_money_signals: SmartMoneySignals
    community_score: int  # 0-100, higher is better
    overall_risk_score: int  # 0 = safest


# ── Holders ──────────────────────────────────────────────────────────────


def analyze_holder_distribution(holders: list[Holder]) -> HolderAnalysis:
    """Grade supply concentration among the largest holders.

    Top-10 share drives both the concentration tier and rug risk:
    above 50 % is critical, above 40 % high, above 30 % medium.
    """
    if not holders:
        return HolderAnalysis(0, 0.0, 0.0, 0.0, "decentralized", "medium")

    total_supply = sum(h.balance for h in holders)
    by_balance = sorted(holders, key=lambda h: h.balance, reverse=True)

    if total_supply > 0:
        top10_percent = sum(h.balance for h in by_balance[:10]) / total_supply * 100
        top50_percent = sum(h.balance for h in by_balance[:50]) / total_supply * 100
    else:
        top10_percent = top50_percent = 0.0

    if top10_percent < 20:
        concentration = "decentralized"
    elif top10_percent < 40:
        concentration = "balanced"
    elif top10_percent < 60:
        concentration = "concentrated"
    elif top10_percent < 80:
        concentration = "danger"
    else:
        concentration = "extreme"

    if top10_percent > 50:
        rug_risk = "critical"
    elif top10_percent > 40:
        rug_risk = "high"
    elif top10_percent > 30:
        rug_risk = "medium"
    else:
        rug_risk = "low"

    # Rough dilution estimate against a 10k-holder reference
    dilution = len(holders) / 10_000 * 100

    return HolderAnalysis(
        total_holders=len(holders),
        top10_percent=round_half_up(top10_percent, 2),
        top50_percent=round_half_up(top50_percent, 2),
        dilution=round_half_up(dilution, 2),
        concentration=concentration,
        rug_risk_level=rug_risk,
    )


# ── Flows & liquidity ────────────────────────────────────────────────────


def analyze_exchange_flows(exchange_inflow: float, exchange_outflow: float) -> ExchangeFlows:
    """Net exchange outflow as an accumulation/distribution read.

    Tokens leaving exchanges (outflow beating inflow by half the inflow)
    read as accumulation; the reverse as distribution.
    """
    net_flow = exchange_outflow - exchange_inflow

    if net_flow > exchange_inflow * 0.5:
        trend, movement = "bullish", "accumulating"
    elif net_flow < -exchange_inflow * 0.5:
        trend, movement = "bearish", "distributing"
    else:
        trend, movement = "neutral", "neutral"

    return ExchangeFlows(
        inflow_24h=round_int(exchange_inflow),
        outflow_24h=round_int(exchange_outflow),
        net_flow=round_int(net_flow),
        flow_trend=trend,
        whale_movement=movement,
    )


def score_liquidity(
    total_liquidity: float,
    locked_liquidity: float,
    liquidity_history: list[float],
) -> LiquidityScore:
    """Score liquidity safety from the locked share and its recent trend.

    Locked ≥ 80 % scores 90, ≥ 60 % 75, ≥ 40 % 50, else 25.  The mean of the
    last three history samples against the fourth-from-last (or the first)
    sample adds or removes 10 when it moved more than 5 %.
    """
    locked_percent = locked_liquidity / total_liquidity * 100 if total_liquidity > 0 else 0.0

    if locked_percent >= 80:
        score = 90
    elif locked_percent >= 60:
        score = 75
    elif locked_percent >= 40:
        score = 50
    else:
        score = 25

    trend = "stable"
    if len(liquidity_history) >= 2:
        recent = liquidity_history[-3:]
        avg = sum(recent) / len(recent)
        previous = liquidity_history[-4] if len(liquidity_history) >= 4 else 0.0
        if not previous:
            previous = liquidity_history[0]

        if avg > previous * 1.05:
            trend = "increasing"
        elif avg < previous * 0.95:
            trend = "decreasing"

    if trend == "increasing":
        score += 10
    elif trend == "decreasing":
        score -= 10

    return LiquidityScore(
        score=min(100, max(0, score)),
        locked=round_int(locked_percent),
        trend=trend,
    )


# ── Order flow ───────────────────────────────────────────────────────────


def analyze_transaction_patterns(
    buys: int,
    sells: int,
    avg_buy_size: float,
    avg_sell_size: float,
    whale_threshold: float = DEFAULT_WHALE_THRESHOLD,
) -> TransactionAnalysis:
    """Sell/buy count ratio, its volume-weighted variant, and whale side."""
    ratio = sells / buys if buys > 0 else 1.0
    buy_value = buys * avg_buy_size
    volume_weighted = (sells * avg_sell_size) / buy_value if buy_value else 1.0

    if ratio < 0.8:
        signal = "bullish"
    elif ratio > 1.2:
        signal = "bearish"
    else:
        signal = "neutral"

    if avg_buy_size > whale_threshold:
        whale_activity = "buying"
    elif avg_sell_size > whale_threshold:
        whale_activity = "selling"
    else:
        whale_activity = "neutral"

    return TransactionAnalysis(
        buy_sell_ratio=round_half_up(ratio, 2),
        volume_weighted_ratio=round_half_up(volume_weighted, 2),
        signal=signal,
        whale_activity=whale_activity,
        avg_buy_size=round_int(avg_buy_size),
        avg_sell_size=round_int(avg_sell_size),
        whale_size=round_int(max(avg_buy_size, avg_sell_size)),
    )


def detect_smart_money_signals(
    transaction_sizes: list[float],
    buy_volume: float,
    sell_volume: float,
    price_action: str,
) -> SmartMoneySignals:
    """Flag whale accumulation, institutional flow and bot activity.

    "Large" transactions are over twice the mean size, "small" ones under
    half of it.  Whales accumulate when large buys dominate a falling
    market.  Trade size grades the mean transaction against total volume.
    """
    if not transaction_sizes:
        return SmartMoneySignals(False, False, False, "micro", 0)

    n = len(transaction_sizes)
    avg_size = sum(transaction_sizes) / n
    large_ratio = sum(1 for t in transaction_sizes if t > avg_size * 2) / n
    small_count = sum(1 for t in transaction_sizes if t < avg_size * 0.5)

    whale_accumulation = price_action == "down" and buy_volume > sell_volume and large_ratio > 0.3
    institutional = large_ratio > 0.4
    bot_activity = small_count > n * 0.5 and large_ratio < 0.2

    total_volume = buy_volume + sell_volume
    avg_percent = avg_size / total_volume * 100 if total_volume > 0 else 0.0
    if avg_percent < 0.01:
        trade_size = "micro"
    elif avg_percent < 0.1:
        trade_size = "small"
    elif avg_percent < 0.5:
        trade_size = "medium"
    elif avg_percent < 2:
        trade_size = "large"
    else:
        trade_size = "whale"

    return SmartMoneySignals(
        whale_accumulation=whale_accumulation,
        institutional_activity=institutional,
        trading_bot_activity=bot_activity,
        trade_size=trade_size,
        large_transaction_ratio=round_int(large_ratio * 100),
    )


# ── Composite ────────────────────────────────────────────────────────────


def analyze_onchain(data: Optional[OnChainInput] = None) -> OnChainMetrics:
    """Combine holder, liquidity, order-flow and smart-money reads.

    Community score starts at 50: +20 for low rug risk, +15 for a liquidity
    score above 70, +10 for bullish order flow, +10 for whale accumulation
    (capped at 100).  Overall risk is the mean of rug risk, inverted
    liquidity score and ``50 - community``.
    """
    if data is None:
        data = OnChainInput()

    holders = analyze_holder_distribution(data.holders)
    rug_risk_score = _RUG_RISK_SCORES[holders.rug_risk_level]

    liquidity = score_liquidity(
        data.total_liquidity, data.locked_liquidity, data.liquidity_history,
    )

    if data.buy_volume and data.sell_volume:
        volume_trend = (data.buy_volume - data.sell_volume) / data.buy_volume * 100
    else:
        volume_trend = 0.0
    if abs(volume_trend) > 30:
        volume_quality = "high"
    elif abs(volume_trend) > 10:
        volume_quality = "medium"
    else:
        volume_quality = "low"

    transactions = analyze_transaction_patterns(
        data.buys, data.sells, data.avg_buy_size, data.avg_sell_size,
    )
    smart_money = detect_smart_money_signals(
        data.transaction_sizes, data.buy_volume, data.sell_volume, data.price_action,
    )

    community = 50
    if holders.rug_risk_level == "low":
        community += 20
    if liquidity.score > 70:
        community += 15
    if transactions.signal == "bullish":
        community += 10
    if smart_money.whale_accumulation:
        community += 10
    community = min(100, community)

    overall_risk = round_int((rug_risk_score + (100 - liquidity.score) + (50 - community)) / 3)

    return OnChainMetrics(
        holder_distribution=HolderDistribution(
            top_holder_percent=holders.top10_percent,
            concentration=_CONCENTRATION_TIERS[holders.concentration],
            rug_risk_score=rug_risk_score,
        ),
        liquidity_analysis=LiquidityAnalysis(
            liquidity_locked=liquidity.locked,
            liquidity_trend=liquidity.trend,
            liquidity_score=liquidity.score,
        ),
        volume_analysis=VolumeAnalysis(
            volume_24h=data.buy_volume + data.sell_volume,
            volume_trend=round_int(volume_trend),
            volume_quality=volume_quality,
        ),
        transaction_analysis=TransactionSummary(
            buy_sell_ratio=transactions.buy_sell_ratio,
            whale_activity=transactions.whale_activity,
            buyer_count=data.buys,
            seller_count=data.sells,
        ),
        smart_money_signals=smart_money,
        community_score=community,
        overall_risk_score=overall_risk,
    )
