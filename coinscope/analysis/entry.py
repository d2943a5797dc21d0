"""Smart-entry rules — a first-match cascade deciding how to enter."""

from coinscope.analysis.models import (
    BAND_LOWER,
    BAND_LOWER_HALF,
    IndicatorAnalysis,
    PatternSignal,
    SmartEntry,
)


def determine_smart_entry(
    analysis: IndicatorAnalysis,
    price_history: list[float],
    patterns: list[PatternSignal],
) -> SmartEntry:
    """Decide whether and how to enter, first matching rule wins.

    Rules:
        1. Score ≥ 80 with a detected pattern → immediate entry.
        2. Score ≥ 70 and the last bar did not close above the previous one
           → wait 5 minutes for a confirming candle, entry 0.5 % above price.
        3. Price in the lower Bollinger half/band → bounce entry at the
           lower band.
        4. Pattern present and score ≥ 60 → breakout entry at the first
           pattern's breakout level.
        5. Otherwise no entry.

    Raises ``ValueError`` if *price_history* is empty.
    """
    if not price_history:
        raise ValueError("price_history must contain at least one price")

    score = analysis.overall.score
    current = price_history[-1]
    previous = price_history[-2] if len(price_history) > 1 else current
    closed_above = current > previous

    if score >= 80 and patterns:
        return SmartEntry(
            should_enter=True,
            reason="High confluence + pattern confirmation",
            entry_type="immediate",
            entry_price=current,
            entry_wait_time=0,
        )

    if score >= 70 and not closed_above:
        return SmartEntry(
            should_enter=True,
            reason="Wait for candle confirmation above level",
            entry_type="candle-confirmation",
            entry_price=current * 1.005,
            entry_wait_time=5,
        )

    if analysis.bollinger.position in (BAND_LOWER, BAND_LOWER_HALF):
        return SmartEntry(
            should_enter=True,
            reason="Watch for bounce from lower Bollinger band",
            entry_type="support-bounce",
            entry_price=analysis.bollinger.lower,
            entry_wait_time=0,
        )

    if patterns and score >= 60:
        return SmartEntry(
            should_enter=True,
            reason="Pattern breakout setup detected",
            entry_type="breakout",
            entry_price=patterns[0].breakout_level,
            entry_wait_time=0,
        )

    return SmartEntry(
        should_enter=False,
        reason="No high-confidence entry setup detected",
        entry_type="immediate",
        entry_price=current,
        entry_wait_time=0,
    )
