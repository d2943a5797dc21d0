"""Tests for the HTTP API — analysis, signal ledger and win-rate endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from coinscope.api.routers import configure_routers
from coinscope.config import Config
from coinscope.main import _analyze_token, app
from coinscope.market.dexscreener_client import TokenNotFoundError
from coinscope.market.models import TokenMetrics
from coinscope.tracking.ledger import WinRateLedger

client = TestClient(app)

_SIGNAL = {
    "id": "sig-1",
    "symbol": "BONK",
    "entry_price": 100.0,
    "take_profit_price": 106.0,
    "stop_loss_price": 97.0,
    "signal_type": "BUY",
    "confidence": 82,
    "confluence_percent": 75,
    "pattern_detected": "triangle",
}


@pytest.fixture
def ledger():
    """Fresh ledger injected into the routers for each test."""
    fresh = WinRateLedger()
    configure_routers(ledger=fresh)
    yield fresh
    configure_routers()


# ── Health & analysis ────────────────────────────────────────────────────


class TestAnalyzeEndpoint:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_analyze_with_history(self, ledger):
        body = {
            "metrics": {"price": 100.0, "volume_24h": 2400.0},
            "price_history": [100.0 + i for i in range(50)],
        }
        resp = client.post("/analyze", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["indicators"]["overall"]["score"] == 95
        assert data["confluence"]["total_indicators"] == 8
        assert data["win_rate"]["total_signals"] == 0

    def test_seed_makes_synthetic_history_reproducible(self):
        body = {"metrics": {"price": 1.0, "price_change_24h": 12.0}, "seed": 11}
        first = client.post("/analyze", json=body).json()
        second = client.post("/analyze", json=body).json()
        assert first == second

    def test_missing_price_is_rejected(self):
        resp = client.post("/analyze", json={"metrics": {"volume_24h": 5}})
        assert resp.status_code == 400

    def test_non_positive_price_is_rejected(self):
        resp = client.post("/analyze", json={"metrics": {"price": 0}})
        assert resp.status_code == 400

    def test_unknown_metric_field_is_rejected(self):
        resp = client.post("/analyze", json={"metrics": {"price": 1, "mood": "great"}})
        assert resp.status_code == 400
        assert "mood" in resp.json()["detail"]


class TestTokenAnalysisEndpoint:
    def test_live_token(self, ledger):
        market = AsyncMock()
        market.fetch_token_metrics.return_value = TokenMetrics(price=2.0, price_change_24h=3.0)
        configure_routers(ledger=ledger, market_client=market)

        resp = client.get("/tokens/abc/analysis", params={"seed": 1})
        assert resp.status_code == 200
        assert resp.json()["metrics"]["price"] == 2.0
        market.fetch_token_metrics.assert_awaited_once_with("abc")

    def test_unknown_token_is_404(self, ledger):
        market = AsyncMock()
        market.fetch_token_metrics.side_effect = TokenNotFoundError("abc")
        configure_routers(ledger=ledger, market_client=market)

        assert client.get("/tokens/abc/analysis").status_code == 404

    def test_without_market_client(self):
        configure_routers()
        assert client.get("/tokens/abc/analysis").status_code == 503


# ── Signal ledger ────────────────────────────────────────────────────────


class TestSignalEndpoints:
    def test_record_and_list(self, ledger):
        resp = client.post("/signals", json=_SIGNAL)
        assert resp.status_code == 200
        assert resp.json()["signal"]["id"] == "sig-1"
        assert len(ledger) == 1

        listed = client.get("/signals", params={"symbol": "BONK"}).json()["signals"]
        assert [s["id"] for s in listed] == ["sig-1"]

    def test_generated_id(self, ledger):
        body = {k: v for k, v in _SIGNAL.items() if k != "id"}
        signal_id = client.post("/signals", json=body).json()["signal"]["id"]
        assert ledger.get(signal_id) is not None

    def test_missing_field_is_rejected(self, ledger):
        body = {k: v for k, v in _SIGNAL.items() if k != "entry_price"}
        resp = client.post("/signals", json=body)
        assert resp.status_code == 400
        assert "entry_price" in resp.json()["detail"]

    def test_invalid_signal_type_is_rejected(self, ledger):
        resp = client.post("/signals", json={**_SIGNAL, "signal_type": "MAYBE"})
        assert resp.status_code == 400

    @pytest.mark.parametrize("pattern", [["triangle"], {"name": "triangle"}, 3])
    def test_non_string_pattern_is_rejected(self, ledger, pattern):
        resp = client.post("/signals", json={**_SIGNAL, "pattern_detected": pattern})
        assert resp.status_code == 400
        assert "pattern_detected" in resp.json()["detail"]
        assert len(ledger) == 0

    def test_rejected_pattern_keeps_win_rate_available(self, ledger):
        client.post("/signals", json={**_SIGNAL, "id": "bad", "pattern_detected": ["triangle"]})
        client.post("/signals", json=_SIGNAL)
        client.post("/signals/sig-1/exit", json={"exit_price": 105.0})

        resp = client.get("/win-rate")
        assert resp.status_code == 200
        assert resp.json()["total_signals"] == 1

        body = {"metrics": {"price": 100.0}, "price_history": [100.0] * 30}
        analysis = client.post("/analyze", json=body)
        assert analysis.status_code == 200
        assert analysis.json()["win_rate"]["total_signals"] == 1

    def test_null_pattern_is_accepted(self, ledger):
        resp = client.post("/signals", json={**_SIGNAL, "pattern_detected": None})
        assert resp.status_code == 200
        assert resp.json()["signal"]["pattern_detected"] is None

    def test_close_out(self, ledger):
        client.post("/signals", json=_SIGNAL)
        resp = client.post("/signals/sig-1/exit", json={"exit_price": 105.0, "notes": "TP"})
        assert resp.status_code == 200
        assert resp.json()["signal"]["outcome"] == "win"

    def test_close_out_unknown_is_404(self, ledger):
        resp = client.post("/signals/nope/exit", json={"exit_price": 1.0})
        assert resp.status_code == 404

    def test_win_rate(self, ledger):
        client.post("/signals", json=_SIGNAL)
        client.post("/signals", json={**_SIGNAL, "id": "sig-2"})
        client.post("/signals/sig-1/exit", json={"exit_price": 105.0})
        client.post("/signals/sig-2/exit", json={"exit_price": 98.0})

        data = client.get("/win-rate", params={"lookback_days": 7}).json()
        assert data["lookback_days"] == 7
        assert data["win_rate"] == 50
        assert data["profit_factor"] == 2.5
        assert data["top_patterns"] == [{"pattern": "triangle", "win_rate": 50, "count": 2}]

    def test_ledger_not_configured(self):
        configure_routers()
        assert client.get("/win-rate").status_code == 503


# ── CLI analyze mode ─────────────────────────────────────────────────────


def _cli_config() -> Config:
    return Config(
        dexscreener_base_url="https://api.dexscreener.com",
        ledger_capacity=100,
        win_rate_lookback_days=30,
        account_risk_pct=2.0,
        http_timeout_seconds=5.0,
        log_level="INFO",
        api_port=8080,
    )


class TestAnalyzeCommand:
    @pytest.mark.asyncio
    async def test_zero_price_is_reported_not_raised(self, capsys):
        market = AsyncMock()
        market.fetch_token_metrics.return_value = TokenMetrics(price=0.0)

        ok = await _analyze_token(market, WinRateLedger(), _cli_config(), "abc", False)
        assert ok is False
        assert capsys.readouterr().out == ""

    @pytest.mark.asyncio
    async def test_unknown_token_is_reported_not_raised(self):
        market = AsyncMock()
        market.fetch_token_metrics.side_effect = TokenNotFoundError("abc")

        ok = await _analyze_token(market, WinRateLedger(), _cli_config(), "abc", True)
        assert ok is False

    @pytest.mark.asyncio
    async def test_prints_json_context(self, capsys):
        market = AsyncMock()
        market.fetch_token_metrics.return_value = TokenMetrics(price=2.0, volume_24h=480.0)

        ok = await _analyze_token(market, WinRateLedger(), _cli_config(), "abc", True)
        assert ok is True
        assert '"symbol": "abc"' in capsys.readouterr().out
