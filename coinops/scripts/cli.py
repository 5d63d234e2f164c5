# coinops/scripts/cli.py
from __future__ import annotations

import argparse
import sys
from typing import List, Optional, TextIO

from coinops.config.logging_config import configure_logging
from coinops.config.settings import Settings, get_settings
from coinops.main import build_upstream_client
from coinops.services.price_cache import CoinEntry, PriceCache
from coinops.utils.time import iso_z, utcnow


def format_price_table(entries: List[CoinEntry]) -> str:
    lines = ["ID\tDISPLAY_NAME\tUSD\t24H_CHANGE"]
    for e in entries:
        lines.append(f"{e.id}\t{e.display_name}\t{e.price_usd:.2f}\t{e.change_24h_pct:.2f}%")
    return "\n".join(lines) + "\n"


def run_list(
    settings: Settings,
    cache: Optional[PriceCache] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Print configured coins to `err`, then a TSV price table to `out`."""
    out = out or sys.stdout
    err = err or sys.stderr
    err.write(f"Coins configured: {len(settings.COINS)}\n")
    err.write(f"Timestamp: {iso_z(utcnow())}\n\n")

    if not settings.COINS:
        err.write("ERROR: No coins configured!\n")
        return 1

    err.write("Configured coins:\n")
    for i, c in enumerate(settings.COINS, start=1):
        err.write(f"  {i:3d}. {c.id} ({c.display_name})\n")
    err.write("\n")

    if cache is None:
        client = build_upstream_client(settings)
        cache = PriceCache(settings.COINS, client, ttl_seconds=settings.PRICE_CACHE_TTL_SECONDS)
        try:
            entries = cache.get_prices()
        finally:
            client.close()
    else:
        entries = cache.get_prices()

    err.write(f"Received {len(entries)} price entries\n\n")
    out.write(format_price_table(entries))
    return 0


def run_serve(settings: Settings, host: Optional[str], port: Optional[int], reload: bool) -> int:
    import uvicorn

    uvicorn.run(
        "coinops.main:app_factory",
        factory=True,
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
        log_config=None,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coinops", description="CoinOps dashboard server")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")

    sub.add_parser("list", help="List configured coins with current prices (TSV)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    # stdout is reserved for the TSV table
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON, stream=sys.stderr)

    if args.command == "serve":
        return run_serve(settings, args.host, args.port, args.reload)
    return run_list(settings)


if __name__ == "__main__":
    sys.exit(main())
