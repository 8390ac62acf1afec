"""Holdings and closed-position tables for display."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from stonks.fx import CurrencyConverter
from stonks.portfolio import (
    ClosedPosition,
    RebalanceAction,
    RebalanceRecommendation,
    ValuedHolding,
    summarize_closed,
)
from stonks.portfolio.valuation import percent_of
from stonks.snapshot import PortfolioSnapshot


def _maybe(converter: CurrencyConverter, amount: Optional[float]) -> Optional[float]:
    return None if amount is None else converter.convert(amount)


def _error_row(holding: ValuedHolding) -> Dict[str, Any]:
    return {
        "name": holding.holding.name,
        "symbol": holding.holding.symbol,
        "quantity": holding.holding.quantity,
        "error": holding.error or "No data",
    }


def _price_row(holding: ValuedHolding, converter: CurrencyConverter) -> Dict[str, Any]:
    quote = holding.quote
    return {
        "name": holding.holding.name,
        "symbol": holding.holding.symbol,
        "price": converter.convert(quote.current),
        "change": converter.convert(quote.change),
        "change_percent": quote.change_percent,
        "quantity": holding.holding.quantity,
        "cost_basis": _maybe(converter, holding.cost_basis),
        "market_value": converter.convert(holding.market_value),
        "change_value": converter.convert(holding.change_value),
        "weight": holding.weight,
        "target_weight": holding.holding.target_weight,
        "weight_diff": holding.weight_diff,
        "gain": _maybe(converter, holding.gain),
        "gain_percent": holding.gain_percent,
    }


def _rebalance_row(rec: RebalanceRecommendation, converter: CurrencyConverter) -> Dict[str, Any]:
    new_diff = rec.new_weight - rec.holding.target_weight if rec.has_target else None
    return {
        "name": rec.holding.name,
        "symbol": rec.holding.symbol,
        "price": converter.convert(rec.quote.current),
        "quantity": rec.current_quantity,
        "target_quantity": rec.target_quantity,
        "quantity_change": rec.quantity_change,
        "market_value": converter.convert(rec.current_value),
        "target_value": converter.convert(rec.target_value),
        "value_change": converter.convert(rec.value_change),
        "weight": rec.current_weight,
        "new_weight": rec.new_weight,
        "target_weight": rec.holding.target_weight,
        "weight_diff": new_diff,
        "action": rec.action.value,
    }


def build_holdings_report(snapshot: PortfolioSnapshot) -> pd.DataFrame:
    """One row per holding in input order, followed by a cash row."""

    converter = snapshot.converter
    totals = snapshot.valuation.totals
    plan = snapshot.rebalance if snapshot.rebalance_mode else None

    rows: List[Dict[str, Any]] = []
    for holding in snapshot.valuation.holdings:
        if not holding.usable:
            rows.append(_error_row(holding))
            continue
        rec = plan.for_holding(holding.holding.id) if plan else None
        rows.append(_rebalance_row(rec, converter) if rec else _price_row(holding, converter))

    if plan is not None:
        rows.append(
            {
                "name": "Cash",
                "market_value": converter.convert(totals.cash),
                "target_value": converter.convert(plan.new_cash),
                "value_change": converter.convert(plan.cash_change),
                "weight": totals.cash_weight,
                "new_weight": percent_of(plan.new_cash, totals.portfolio_total),
            }
        )
    else:
        rows.append(
            {
                "name": "Cash",
                "market_value": converter.convert(totals.cash),
                "weight": totals.cash_weight,
            }
        )
    return pd.DataFrame(rows)


def build_closed_positions_report(
    positions: Sequence[ClosedPosition],
    converter: CurrencyConverter,
) -> pd.DataFrame:
    if not positions:
        return pd.DataFrame()
    rows = []
    for position in list(positions) + [summarize_closed(positions)]:
        rows.append(
            {
                "name": position.name,
                "symbol": position.code.split(":", 1)[-1],
                "total_cost": converter.convert(position.total_cost),
                "total_revenue": converter.convert(position.total_revenue),
                "profit_loss": converter.convert(position.profit_loss),
                "profit_loss_percent": position.profit_loss_percent,
                "transactions": position.transactions,
            }
        )
    return pd.DataFrame(rows)


def build_summary(snapshot: PortfolioSnapshot) -> Dict[str, Any]:
    """Figures for the portfolio summary cards, in the display currency."""

    converter = snapshot.converter
    totals = snapshot.valuation.totals
    holdings = snapshot.valuation.holdings
    payload: Dict[str, Any] = {
        "portfolio": snapshot.name,
        "currency": snapshot.currency,
        "fx_available": converter.fx_available,
        "portfolio_total": converter.convert(totals.portfolio_total),
        "alt_currency": converter.preview_currency if converter.fx_available else None,
        "portfolio_total_alt": converter.convert_to_alt(totals.portfolio_total),
        "total_market_value": converter.convert(totals.total_market_value),
        "cash": converter.convert(totals.cash),
        "cash_weight": totals.cash_weight,
        "total_change_value": converter.convert(totals.total_change_value),
        "total_change_percent": totals.total_change_percent,
        "total_gain": converter.convert(totals.total_gain),
        "total_gain_percent": totals.total_gain_percent,
        "total_weight_deviation": totals.total_weight_deviation,
        "holdings": len(holdings),
        "errors": sum(1 for h in holdings if not h.usable),
        "closed_positions": len(snapshot.closed_positions),
    }
    plan = snapshot.rebalance
    if plan is not None:
        payload.update(
            {
                "new_total_market_value": converter.convert(plan.new_total_market_value),
                "new_cash": converter.convert(plan.new_cash),
                "cash_change": converter.convert(plan.cash_change),
                "new_weight_deviation": plan.new_weight_deviation,
                "cash_overdrawn": plan.overdrawn,
                "buys": sum(1 for r in plan.recommendations if r.action is RebalanceAction.BUY),
                "sells": sum(1 for r in plan.recommendations if r.action is RebalanceAction.SELL),
            }
        )
    if snapshot.cache_stats is not None:
        payload["cache_size"] = snapshot.cache_stats.get("size")
    return payload
