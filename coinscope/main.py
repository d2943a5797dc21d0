"""CoinScope — application entry point.

Boots the FastAPI server and provides the CLI entry point for serving the
API or analysing a single token from the command line.
"""

import logging

from fastapi import FastAPI

from coinscope.api.routers import router

app = FastAPI(title="CoinScope Analysis API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("coinscope")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    import argparse
    import asyncio
    import sys

    from coinscope.api.routers import configure_routers
    from coinscope.config import load_config
    from coinscope.market.dexscreener_client import DexScreenerClient
    from coinscope.tracking.ledger import WinRateLedger

    parser = argparse.ArgumentParser(description="CoinScope token analysis")
    parser.add_argument(
        "--mode",
        choices=["serve", "analyze"],
        default="serve",
        help="Run the API server or analyse one token (default: serve)",
    )
    parser.add_argument("--token", help="Token address to analyse (analyze mode)")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the prompt JSON context instead of the text report",
    )
    args = parser.parse_args()

    config = load_config(args.env_file)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    ledger = WinRateLedger(capacity=config.ledger_capacity)
    client = DexScreenerClient(config)

    if args.mode == "analyze":
        if not args.token:
            parser.error("--token is required in analyze mode")
        if not asyncio.run(_analyze_token(client, ledger, config, args.token, args.json)):
            sys.exit(1)
        return

    configure_routers(
        ledger=ledger,
        market_client=client,
        lookback_days=config.win_rate_lookback_days,
        account_risk_pct=config.account_risk_pct,
    )
    _run_server(config.api_port)


async def _analyze_token(client, ledger, config, token: str, as_json: bool) -> bool:
    """Fetch one token, run the pipeline and print the report.

    Returns False without a report when the token is unknown or has no
    usable price.
    """
    from coinscope.analysis.pipeline import run_advanced_analysis
    from coinscope.market.dexscreener_client import TokenNotFoundError
    from coinscope.reports.formatters import (
        build_prompt_context,
        format_advanced_analysis,
        format_indicators,
    )

    try:
        metrics = await client.fetch_token_metrics(token)
    except TokenNotFoundError as exc:
        logger.error("%s", exc)
        return False
    if metrics.price <= 0:
        logger.error("No usable price for %s", token)
        return False

    result = run_advanced_analysis(
        metrics,
        ledger=ledger,
        lookback_days=config.win_rate_lookback_days,
        account_risk_pct=config.account_risk_pct,
    )

    if as_json:
        print(build_prompt_context(result, symbol=token))
        return True
    print(format_indicators(result.indicators))
    print(format_advanced_analysis(result, config.win_rate_lookback_days))
    return True


def _run_server(port: int = 8080) -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    logger.info("Starting CoinScope API on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    _run_cli()
