"""Analysis data models — typed representations for scoring pipeline outputs."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Bias(str, Enum):
    """Directional read of a single indicator."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Recommendation(str, Enum):
    """Aggregate recommendation derived from the overall score."""

    BUY = "BUY"
    CAUTIOUS_BUY = "CAUTIOUS BUY"
    NEUTRAL = "NEUTRAL"
    CAUTIOUS_SELL = "CAUTIOUS SELL"
    SELL = "SELL"


class SignalType(str, Enum):
    """Terminal classification of a full analysis."""

    STRONG_BUY = "STRONG-BUY"
    BUY = "BUY"
    NEUTRAL = "NEUTRAL"
    SELL = "SELL"
    STRONG_SELL = "STRONG-SELL"
    SKIP = "SKIP"


# ── Labels ───────────────────────────────────────────────────────────────

INSUFFICIENT_DATA = "Insufficient Data"

BAND_UPPER = "Upper Band (Overbought)"
BAND_LOWER = "Lower Band (Oversold)"
BAND_UPPER_HALF = "Upper Half"
BAND_LOWER_HALF = "Lower Half"
BAND_MIDDLE = "Middle"

ALIGNMENT_BULLISH = "Bullish"
ALIGNMENT_BEARISH = "Bearish"

VWAP_ABOVE = "Above VWAP (Bullish)"
VWAP_BELOW = "Below VWAP (Bearish)"
VWAP_NEAR = "Near VWAP (Consolidation)"


# ── Indicator results ────────────────────────────────────────────────────


@dataclass(frozen=True)
class RSIResult:
    value: float
    signal: str
    strength: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class MACDResult:
    histogram: float
    signal: str
    momentum: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class EMACrossResult:
    ema9: float
    ema21: float
    alignment: str
    signal: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class BollingerResult:
    upper: float
    lower: float
    middle: float
    position: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class ATRResult:
    value: float
    volatility: str


@dataclass(frozen=True)
class OBVResult:
    trend: str
    momentum: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class StochasticResult:
    k: float
    d: float
    signal: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class ADXResult:
    value: float
    trend: str
    strength: str


@dataclass(frozen=True)
class VWAPResult:
    level: float
    price_vs_vwap: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class IchimokuResult:
    cloud_signal: str
    momentum: str
    bias: Bias = Bias.NEUTRAL


@dataclass(frozen=True)
class OverallScore:
    score: int  # 0-100
    confidence: str  # Low / Fair / Moderate / High / Very High
    recommendation: Recommendation


@dataclass(frozen=True)
class IndicatorAnalysis:
    """Every calculator output for one price window plus the blended score."""

    rsi: RSIResult
    macd: MACDResult
    ema: EMACrossResult
    bollinger: BollingerResult
    atr: ATRResult
    obv: OBVResult
    stoch: StochasticResult
    adx: ADXResult
    vwap: VWAPResult
    ichimoku: IchimokuResult
    overall: OverallScore

    def directional_biases(self) -> list[Bias]:
        """The eight directional reads used for confluence, in fixed order."""
        return [
            self.rsi.bias,
            self.macd.bias,
            self.ema.bias,
            self.bollinger.bias,
            self.vwap.bias,
            self.stoch.bias,
            self.ichimoku.bias,
            self.obv.bias,
        ]


# ── Advanced analysis ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConfluenceScore:
    total_indicators: int
    agreeing_indicators: int
    confluence_percent: int  # 0-100
    bullish_count: int
    bearish_count: int
    confidence_level: str  # very-low / low / moderate / high / very-high
    tradeable: bool


@dataclass(frozen=True)
class MarketRegime:
    regime: str  # trending / ranging / breakout / reversal
    adx_value: float
    volatility: str  # low / medium / high / extreme
    recommendation: str


@dataclass(frozen=True)
class PatternSignal:
    pattern: str  # triangle / cup_handle / double_bottom
    confidence: int  # 0-100
    direction: str  # bullish / bearish
    breakout_level: float


@dataclass(frozen=True)
class DivergenceSignal:
    type: str  # bullish / bearish / none
    indicator: str  # rsi / price
    strength: str  # weak / strong
    description: str


@dataclass(frozen=True)
class TimeframeData:
    timeframe: str  # e.g. "5m", "1h", "4h"
    rsi: float
    macd_signal: str
    trend_direction: str  # up / down / neutral
    strength: float  # 0-100


@dataclass(frozen=True)
class SmartEntry:
    should_enter: bool
    reason: str
    entry_type: str  # immediate / candle-confirmation / support-bounce / breakout
    entry_price: float
    entry_wait_time: int  # minutes


@dataclass(frozen=True)
class FinalSignal:
    signal: SignalType
    confidence: int  # 0-100
    reason: str


@dataclass(frozen=True)
class GateResults:
    """Pass/fail state of each final-signal gate."""

    confluence_pass: bool
    timeframe_pass: bool
    risk_reward_pass: bool
    entry_ready: bool
    regime_accepts: bool

    @property
    def passed(self) -> int:
        return sum(
            (
                self.confluence_pass,
                self.timeframe_pass,
                self.risk_reward_pass,
                self.entry_ready,
                self.regime_accepts,
            )
        )


# Convenience for callers that treat a missing pattern as ``None``
def first_pattern(patterns: list[PatternSignal]) -> Optional[PatternSignal]:
    return patterns[0] if patterns else None
