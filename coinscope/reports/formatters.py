"""Report formatters — plain-text summaries and the prompt JSON context."""

import json
from typing import Optional

from coinscope.analysis.models import IndicatorAnalysis, first_pattern
from coinscope.analysis.pipeline import AdvancedAnalysis
from coinscope.risk.onchain import OnChainMetrics
from coinscope.tracking.models import WinRateAnalysis

_RULE_WIDTH = 50


def _header(title: str) -> str:
    pad = max(0, _RULE_WIDTH - len(title) - 2)
    left = pad // 2
    return f"{'─' * left} {title} {'─' * (pad - left)}"


def _rule() -> str:
    return "─" * _RULE_WIDTH


def _yes_no(flag: bool) -> str:
    return "YES" if flag else "NO"


def format_indicators(analysis: IndicatorAnalysis) -> str:
    """Render every indicator reading plus the blended score."""
    lines = [
        _header("Technical Indicators"),
        f"  RSI ({analysis.rsi.value}):       {analysis.rsi.signal} | Strength: {analysis.rsi.strength}",
        f"  MACD:            {analysis.macd.signal} | Momentum: {analysis.macd.momentum}",
        f"  EMA 9/21:        {analysis.ema.alignment} | {analysis.ema.signal}",
        f"  Bollinger:       {analysis.bollinger.position}",
        f"  ATR:             {analysis.atr.volatility}",
        f"  OBV:             {analysis.obv.trend} | Momentum: {analysis.obv.momentum}",
        f"  Stochastic:      K: {analysis.stoch.k} | {analysis.stoch.signal}",
        f"  ADX:             {analysis.adx.trend} | Strength: {analysis.adx.strength}",
        f"  VWAP:            {analysis.vwap.price_vs_vwap}",
        f"  Ichimoku:        {analysis.ichimoku.cloud_signal}",
        _header("Overall"),
        f"  Score:           {analysis.overall.score}/100",
        f"  Confidence:      {analysis.overall.confidence}",
        f"  Recommendation:  {analysis.overall.recommendation.value}",
        _rule(),
    ]
    return "\n".join(lines)


def format_win_rate(analysis: WinRateAnalysis, lookback_days: int = 30) -> str:
    """Render ledger performance and a profit-factor verdict."""
    if analysis.total_signals == 0:
        return "\n".join([_header("Win Rate"), "  No signals tracked yet.", _rule()])

    lines = [
        _header(f"Win Rate ({lookback_days}D)"),
        f"  Win Rate:        {analysis.win_rate}% "
        f"({analysis.winning_signals}W / {analysis.losing_signals}L / {analysis.breakeven_signals}BE)",
        f"  Average Win:     +{analysis.average_win}%",
        f"  Average Loss:    -{analysis.average_loss}%",
        f"  Profit Factor:   {analysis.profit_factor}x",
        f"  Expectancy:      {analysis.expectancy}% per trade",
        f"  Sharpe Ratio:    {analysis.sharpe_ratio}",
        "  Top Patterns:",
    ]
    if analysis.top_patterns:
        for p in analysis.top_patterns:
            lines.append(f"    └─ {p.pattern}: {p.win_rate}% WR ({p.count} trades)")
    else:
        lines.append("    └─ No patterns tracked yet")

    trend = "positive" if analysis.confidence_correlation > 0 else "not positive"
    lines.append(
        f"  Confidence Edge: {abs(analysis.confidence_correlation)}% ({trend})"
    )

    if analysis.profit_factor > 2:
        verdict = "PROFITABLE - keep trading this setup"
    elif analysis.profit_factor > 1.5:
        verdict = "POSITIVE - good setup, maintain discipline"
    elif analysis.profit_factor > 1:
        verdict = "BREAKEVEN - consider refinements"
    else:
        verdict = "NEGATIVE - rework the strategy"
    lines.append(f"  Verdict:         {verdict}")
    lines.append(_rule())
    return "\n".join(lines)


def format_advanced_analysis(result: AdvancedAnalysis, lookback_days: int = 30) -> str:
    """Render confluence, risk/reward, regime, patterns and the final call."""
    confluence = result.confluence
    rr = result.risk_reward
    regime = result.market_regime
    pattern_text = (
        ", ".join(f"{p.pattern} ({p.direction})" for p in result.patterns)
        or "No patterns detected"
    )

    lines = [
        _header("Advanced Analysis"),
        f"  Confluence:      {confluence.confluence_percent}% "
        f"({confluence.agreeing_indicators}/{confluence.total_indicators} indicators aligned)",
        f"  Confidence:      {confluence.confidence_level.upper()}",
        f"  Timeframes:      {result.timeframe_alignment}",
        "  Risk/Reward:",
        f"    └─ Entry:       ${rr.entry_price:.8f}",
        f"    └─ Take Profit: ${rr.take_profit:.8f}",
        f"    └─ Stop Loss:   ${rr.stop_loss:.8f}",
        f"    └─ Ratio:       {rr.risk_reward_ratio}:1 ({'valid' if rr.is_valid else 'invalid'})",
        f"  Regime:          {regime.regime.upper()}",
        f"    └─ ADX:         {regime.adx_value:.1f} ({regime.volatility})",
        f"    └─ Plan:        {regime.recommendation}",
        f"  Patterns:        {pattern_text}",
        f"  Divergence:      {result.divergence.description}",
        f"  Entry:           {result.smart_entry.entry_type} "
        f"({'enter' if result.smart_entry.should_enter else 'wait'}) - {result.smart_entry.reason}",
        _header("Final Signal"),
        f"  Signal:          {result.final_signal.signal.value}",
        f"  Confidence:      {result.final_signal.confidence}%",
        f"  Reason:          {result.final_signal.reason}",
        _rule(),
    ]
    output = "\n".join(lines)
    if result.win_rate is not None:
        output += "\n" + format_win_rate(result.win_rate, lookback_days)
    return output


def format_onchain(metrics: OnChainMetrics) -> str:
    """Render holder, liquidity, order-flow and smart-money reads."""
    holders = metrics.holder_distribution
    liquidity = metrics.liquidity_analysis
    txns = metrics.transaction_analysis
    smart = metrics.smart_money_signals

    if metrics.overall_risk_score < 30:
        risk_label = "low"
    elif metrics.overall_risk_score < 60:
        risk_label = "moderate"
    else:
        risk_label = "high"

    lines = [
        _header("On-Chain Analysis"),
        f"  Top 10 Holders:  {holders.top_holder_percent}%",
        f"  Concentration:   {holders.concentration}",
        f"  Rug Risk:        {holders.rug_risk_score}/100",
        f"  Liquidity:       {liquidity.liquidity_locked}% locked, "
        f"{liquidity.liquidity_trend} (score {liquidity.liquidity_score}/100)",
        f"  Buy/Sell:        {txns.buy_sell_ratio} | Whales: {txns.whale_activity}",
        f"  Buyers/Sellers:  {txns.buyer_count} / {txns.seller_count}",
        f"  Whale Accum.:    {_yes_no(smart.whale_accumulation)}",
        f"  Institutional:   {_yes_no(smart.institutional_activity)}",
        f"  Bot Activity:    {_yes_no(smart.trading_bot_activity)}",
        _header("Overall"),
        f"  Community Score: {metrics.community_score}/100",
        f"  Risk Score:      {metrics.overall_risk_score}/100 ({risk_label})",
        _rule(),
    ]
    return "\n".join(lines)


def build_prompt_context(
    result: AdvancedAnalysis,
    symbol: Optional[str] = None,
    onchain: Optional[OnChainMetrics] = None,
) -> str:
    """Serialise the analysis into the JSON block handed to a language model."""
    m = result.metrics
    total_txns = m.buys_24h + m.sells_24h
    lead = first_pattern(result.patterns)

    context = {
        "token": {"symbol": symbol},
        "price": {
            "current": m.price,
            "change24h": m.price_change_24h,
            "change1h": m.price_change_1h,
            "change5m": m.price_change_5m,
        },
        "volume": {
            "volume24h": m.volume_24h,
            "volumeToLiquidityRatio": round(m.volume_24h / m.liquidity, 2) if m.liquidity else 0,
        },
        "liquidity": m.liquidity,
        "activity": {
            "buys24h": m.buys_24h,
            "sells24h": m.sells_24h,
            "totalTxns": total_txns,
            "buyPressure": round(m.buys_24h / total_txns * 100, 1) if total_txns else 0,
        },
        "technical": {
            "score": result.indicators.overall.score,
            "confidence": result.indicators.overall.confidence,
            "recommendation": result.indicators.overall.recommendation.value,
        },
        "advancedAnalysis": {
            "confluenceScore": result.confluence.confluence_percent,
            "confluenceStatus": result.confluence.confidence_level,
            "marketRegime": result.market_regime.regime,
            "leadPattern": lead.pattern if lead else None,
            "riskRewardRatio": result.risk_reward.risk_reward_ratio,
            "riskRewardValid": result.risk_reward.is_valid,
            "finalSignal": result.final_signal.signal.value,
            "winRate": result.win_rate.win_rate if result.win_rate else None,
        },
    }
    if onchain is not None:
        context["onchain"] = {
            "communityScore": onchain.community_score,
            "overallRiskScore": onchain.overall_risk_score,
            "rugRiskScore": onchain.holder_distribution.rug_risk_score,
        }
    return json.dumps(context, indent=2)
