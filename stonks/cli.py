"""Command line entry points."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from stonks.config import load_config
from stonks.fx import SUPPORTED_CURRENCIES
from stonks.reports import build_closed_positions_report, build_holdings_report, build_summary
from stonks.snapshot import build_snapshot


def _run(config_path: Path, rebalance: bool, currency: str | None, output: Path | None, as_json: bool) -> None:
    config = load_config(config_path)
    logging.basicConfig(level=config.logging.level.upper(), format="%(levelname)s %(name)s: %(message)s")

    snapshot = build_snapshot(config, rebalance=rebalance, currency=currency)
    if as_json:
        print(json.dumps(build_summary(snapshot), default=str))
        return

    df = build_holdings_report(snapshot)
    if output:
        df.to_csv(output, index=False)
        print(f"Saved report to {output}")
        return

    title = "Portfolio Rebalancing" if rebalance else "Live Stock Prices"
    print(f"{snapshot.name} - {title} ({snapshot.currency})")
    print(df.to_string(index=False))
    if not rebalance and snapshot.closed_positions:
        print()
        print(build_closed_positions_report(snapshot.closed_positions, snapshot.converter).to_string(index=False))


def main() -> None:
    parser = argparse.ArgumentParser(description="Stonks portfolio CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("prices", "Value the portfolio"), ("rebalance", "Propose rebalancing trades")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--config", required=True, type=Path)
        sub.add_argument("--currency", choices=SUPPORTED_CURRENCIES, help="Display currency")
        sub.add_argument("--output", type=Path, help="Optional CSV output path")
        sub.add_argument("--json", action="store_true", help="Print the summary as JSON")

    args = parser.parse_args()
    _run(args.config, args.command == "rebalance", args.currency, args.output, args.json)


if __name__ == "__main__":  # pragma: no cover
    main()
