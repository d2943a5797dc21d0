"""API routers — /analyze, /tokens, /signals, /win-rate endpoints.

No analysis logic here.  Delegates to the pipeline, the market client and
the win-rate ledger injected at startup.
"""

import dataclasses
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import numpy as np
from fastapi import APIRouter, HTTPException, Query

from coinscope.analysis.history import RandomWalkHistory
from coinscope.analysis.models import SignalType, TimeframeData
from coinscope.analysis.pipeline import run_advanced_analysis
from coinscope.market.dexscreener_client import TokenNotFoundError
from coinscope.market.models import TokenMetrics
from coinscope.tracking.models import SignalRecord

logger = logging.getLogger("coinscope")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_ledger = None  # Set via configure_routers()
_market_client = None  # Set via configure_routers()
_lookback_days: int = 30
_account_risk_pct: float = 2.0

_METRIC_FIELDS = {f.name for f in dataclasses.fields(TokenMetrics)}
_COUNT_FIELDS = {"buys_24h", "sells_24h"}


def configure_routers(
    ledger=None,
    market_client=None,
    lookback_days: int = 30,
    account_risk_pct: float = 2.0,
) -> None:
    """Inject dependencies from the application startup.

    Args:
        ledger: A ``WinRateLedger`` instance (or duck-type for tests).
        market_client: A ``DexScreenerClient`` for live token lookups.
        lookback_days: Default win-rate window attached to analyses.
        account_risk_pct: Account risk used for position sizing.
    """
    global _ledger, _market_client, _lookback_days, _account_risk_pct  # noqa: PLW0603
    _ledger = ledger
    _market_client = market_client
    _lookback_days = lookback_days
    _account_risk_pct = account_risk_pct


# ── Parsing helpers ──────────────────────────────────────────────────────


def _parse_metrics(raw) -> TokenMetrics:
    if not isinstance(raw, dict):
        raise HTTPException(status_code=400, detail="metrics must be an object")
    unknown = set(raw) - _METRIC_FIELDS
    if unknown:
        raise HTTPException(
            status_code=400, detail=f"Unknown metric field(s): {', '.join(sorted(unknown))}"
        )
    if "price" not in raw:
        raise HTTPException(status_code=400, detail="Missing field: metrics.price")
    try:
        values = {
            name: int(value) if name in _COUNT_FIELDS else float(value)
            for name, value in raw.items()
        }
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="metrics values must be numbers") from None
    if values["price"] <= 0:
        raise HTTPException(status_code=400, detail="metrics.price must be positive")
    return TokenMetrics(**values)


def _parse_floats(raw, name: str) -> Optional[list[float]]:
    if raw is None:
        return None
    try:
        return [float(v) for v in raw]
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"{name} must be a list of numbers") from None


def _parse_timeframes(raw) -> list[TimeframeData]:
    try:
        return [TimeframeData(**tf) for tf in raw or []]
    except TypeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid timeframe: {exc}") from None


def _parse_time(raw, name: str) -> Optional[datetime]:
    if raw is None:
        return None
    try:
        parsed = datetime.fromisoformat(str(raw))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name} must be an ISO-8601 timestamp") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_ledger():
    if _ledger is None:
        raise HTTPException(status_code=503, detail="Signal ledger not configured")
    return _ledger


def _history_for(seed) -> Optional[RandomWalkHistory]:
    if seed is None:
        return None
    try:
        seed = int(seed)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="seed must be an integer") from None
    return RandomWalkHistory(np.random.default_rng(seed))


# ── Analysis ─────────────────────────────────────────────────────────────


@router.post("/analyze")
async def analyze(body: dict):
    """Run the full advanced analysis on a supplied market snapshot.

    Body: ``metrics`` (TokenMetrics fields), optional ``price_history``,
    ``volume_history``, ``timeframes`` and ``seed`` for reproducible
    synthetic history.
    """
    metrics = _parse_metrics(body.get("metrics"))
    result = run_advanced_analysis(
        metrics,
        price_history=_parse_floats(body.get("price_history"), "price_history"),
        volume_history=_parse_floats(body.get("volume_history"), "volume_history"),
        timeframes=_parse_timeframes(body.get("timeframes")),
        history=_history_for(body.get("seed")),
        ledger=_ledger,
        lookback_days=_lookback_days,
        account_risk_pct=_account_risk_pct,
    )
    return result.to_dict()


@router.get("/tokens/{token_address}/analysis")
async def analyze_token(token_address: str, seed: Optional[int] = Query(default=None)):
    """Fetch live DexScreener metrics for a token and analyse them."""
    if _market_client is None:
        raise HTTPException(status_code=503, detail="Market client not configured")
    try:
        metrics = await _market_client.fetch_token_metrics(token_address)
    except TokenNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    if metrics.price <= 0:
        raise HTTPException(status_code=422, detail=f"No usable price for {token_address}")

    result = run_advanced_analysis(
        metrics,
        history=_history_for(seed),
        ledger=_ledger,
        lookback_days=_lookback_days,
        account_risk_pct=_account_risk_pct,
    )
    return result.to_dict()


# ── Signal ledger ────────────────────────────────────────────────────────


@router.post("/signals")
async def record_signal(body: dict):
    """Record a signal in the ledger.

    ``id`` and ``timestamp`` are generated when omitted.
    """
    ledger = _require_ledger()
    pattern = body.get("pattern_detected")
    if pattern is not None and not isinstance(pattern, str):
        raise HTTPException(status_code=400, detail="pattern_detected must be a string")
    try:
        signal = SignalRecord(
            id=str(body.get("id") or uuid.uuid4().hex),
            timestamp=_parse_time(body.get("timestamp"), "timestamp")
            or datetime.now(timezone.utc),
            symbol=str(body["symbol"]),
            entry_price=float(body["entry_price"]),
            take_profit_price=float(body["take_profit_price"]),
            stop_loss_price=float(body["stop_loss_price"]),
            signal_type=SignalType(body["signal_type"]),
            confidence=float(body.get("confidence", 0)),
            confluence_percent=float(body.get("confluence_percent", 0)),
            pattern_detected=pattern,
            adx_value=float(body.get("adx_value", 0)),
            rsi_value=float(body.get("rsi_value", 0)),
            macd_signal=str(body.get("macd_signal", "")),
        )
    except KeyError as exc:
        raise HTTPException(status_code=400, detail=f"Missing field: {exc.args[0]}") from None
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None

    ledger.record(signal)
    return {"status": "ok", "signal": dataclasses.asdict(signal)}


@router.post("/signals/{signal_id}/exit")
async def close_signal(signal_id: str, body: dict):
    """Close out a recorded signal with its exit price."""
    ledger = _require_ledger()
    if "exit_price" not in body:
        raise HTTPException(status_code=400, detail="Missing field: exit_price")
    try:
        exit_price = float(body["exit_price"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="exit_price must be a number") from None

    closed = ledger.close_out(
        signal_id,
        exit_price,
        exit_time=_parse_time(body.get("exit_time"), "exit_time"),
        notes=body.get("notes"),
    )
    if closed is None:
        raise HTTPException(status_code=404, detail=f"Unknown signal: {signal_id}")
    return {"status": "ok", "signal": dataclasses.asdict(closed)}


@router.get("/signals")
async def get_signals(symbol: str = Query(...)):
    """Return every recorded signal for *symbol*, newest first."""
    ledger = _require_ledger()
    return {"signals": [dataclasses.asdict(s) for s in ledger.signals_by_symbol(symbol)]}


@router.get("/win-rate")
async def get_win_rate(lookback_days: Optional[int] = Query(default=None, ge=1)):
    """Return win-rate statistics over the lookback window."""
    ledger = _require_ledger()
    days = lookback_days if lookback_days is not None else _lookback_days
    return {"lookback_days": days, **dataclasses.asdict(ledger.query(days))}
