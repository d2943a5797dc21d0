"""CoinScope — application configuration.

Loads .env variables into a typed config object.
Every variable is optional; malformed values fail fast on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    dexscreener_base_url: str
    ledger_capacity: int
    win_rate_lookback_days: int
    account_risk_pct: float
    http_timeout_seconds: float
    log_level: str
    api_port: int

    @property
    def tokens_url(self) -> str:
        """DexScreener token-pairs endpoint prefix."""
        return f"{self.dexscreener_base_url.rstrip('/')}/latest/dex/tokens"


def _env_number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for environment variable {name}: {raw!r}"
        ) from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` naming the offending variable when a numeric
    value does not parse or ``LEDGER_CAPACITY`` is not positive.
    """
    load_dotenv(dotenv_path=env_path)

    ledger_capacity = _env_number("LEDGER_CAPACITY", "10000", int)
    if ledger_capacity <= 0:
        raise ValueError(
            f"LEDGER_CAPACITY must be positive, got {ledger_capacity}"
        )

    return Config(
        dexscreener_base_url=os.environ.get(
            "DEXSCREENER_BASE_URL", "https://api.dexscreener.com"
        ),
        ledger_capacity=ledger_capacity,
        win_rate_lookback_days=_env_number("WIN_RATE_LOOKBACK_DAYS", "30", int),
        account_risk_pct=_env_number("ACCOUNT_RISK_PCT", "2.0", float),
        http_timeout_seconds=_env_number("HTTP_TIMEOUT_SECONDS", "30", float),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        api_port=_env_number("API_PORT", "8080", int),
    )
