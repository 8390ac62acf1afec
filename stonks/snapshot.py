"""Per-request portfolio snapshot: quotes, valuation, optional rebalance."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from stonks.config import AppConfig
from stonks.data import FxSource, QuoteSource, fetch_portfolio_quotes, get_fx_source, get_quote_source
from stonks.fx import BASE_CURRENCY, CurrencyConverter, build_converter
from stonks.portfolio import (
    ClosedPosition,
    Holding,
    PortfolioValuation,
    RebalanceResult,
    Transaction,
    apply_cost_basis,
    calculate_rebalancing,
    closed_positions,
    select_active_holdings,
    value_portfolio,
)

logger = logging.getLogger(__name__)


@dataclass
class PortfolioSnapshot:
    name: str
    rebalance_mode: bool
    converter: CurrencyConverter
    valuation: PortfolioValuation
    rebalance: Optional[RebalanceResult] = None
    closed_positions: List[ClosedPosition] = field(default_factory=list)
    cache_stats: Optional[Dict[str, Optional[float]]] = None

    @property
    def currency(self) -> str:
        return self.converter.display_currency


def _fx_rates(config: AppConfig, source: Optional[FxSource], currency: str) -> Optional[Dict[str, float]]:
    if source is None:
        return None
    wanted = {c.value for c in config.fx.currencies}
    wanted.update({currency, config.display.alt_currency.value})
    wanted.discard(BASE_CURRENCY)
    return source.load(sorted(wanted))


def build_snapshot(
    config: AppConfig,
    rebalance: bool = False,
    currency: Optional[str] = None,
    quote_source: Optional[QuoteSource] = None,
    fx_source: Optional[FxSource] = None,
) -> PortfolioSnapshot:
    currency = currency or config.display.currency.value
    portfolio = config.portfolio

    holdings = [Holding.from_config(h) for h in portfolio.holdings]
    transactions = [Transaction.from_config(t) for t in portfolio.transactions]
    holdings = apply_cost_basis(holdings, transactions)

    active = select_active_holdings(holdings, rebalance_mode=rebalance, include_hidden=config.display.include_hidden)
    if not active:
        logger.warning("No active holdings in %s", portfolio.name)

    if quote_source is None:
        quote_source = get_quote_source(config)
    rows = fetch_portfolio_quotes(active, quote_source)

    closed = closed_positions(holdings, transactions)
    valuation = value_portfolio(rows, portfolio.cash, closed)

    plan = None
    if rebalance:
        plan = calculate_rebalancing(valuation.holdings, portfolio.cash, valuation.portfolio_total)
        if plan.overdrawn:
            logger.warning("Rebalance plan overdraws cash: %.2f", plan.new_cash)

    if fx_source is None:
        fx_source = get_fx_source(config)
    converter = build_converter(currency, _fx_rates(config, fx_source, currency), config.display.alt_currency.value)

    stats_fn = getattr(quote_source, "cache_stats", None)
    return PortfolioSnapshot(
        name=portfolio.name,
        rebalance_mode=rebalance,
        converter=converter,
        valuation=valuation,
        rebalance=plan,
        closed_positions=closed,
        cache_stats=stats_fn() if callable(stats_fn) else None,
    )
