"""Valuation of quoted holdings and portfolio-level aggregates."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .holdings import HoldingQuote
from .ledger import ClosedPosition

logger = logging.getLogger(__name__)


def percent_of(part: float, whole: float) -> float:
    """``part / whole * 100``, or 0 when ``whole`` is not positive."""
    return (part / whole) * 100 if whole > 0 else 0.0


@dataclass(frozen=True)
class ValuedHolding(HoldingQuote):
    market_value: float = 0.0
    change_value: float = 0.0
    weight: float = 0.0
    weight_diff: Optional[float] = None
    cost_basis: Optional[float] = None
    gain: Optional[float] = None
    gain_percent: Optional[float] = None


@dataclass(frozen=True)
class PortfolioTotals:
    cash: float
    cash_weight: float
    portfolio_total: float
    total_market_value: float
    total_cost_basis: float
    total_change_value: float
    total_change_percent: float
    open_gain: float
    closed_gain: float
    total_gain: float
    total_gain_percent: float
    total_weight_deviation: float


@dataclass(frozen=True)
class PortfolioValuation:
    holdings: Tuple[ValuedHolding, ...]
    totals: PortfolioTotals

    @property
    def portfolio_total(self) -> float:
        return self.totals.portfolio_total

    def usable(self) -> Tuple[ValuedHolding, ...]:
        return tuple(h for h in self.holdings if h.usable)


def _cost_basis(row: HoldingQuote) -> Optional[float]:
    basis = row.holding.cost_basis
    if basis is None:
        return None
    basis = float(basis)
    return basis if math.isfinite(basis) else None


def value_portfolio(
    rows: Sequence[HoldingQuote],
    cash: float,
    closed_positions: Iterable[ClosedPosition] = (),
) -> PortfolioValuation:
    """Value every row and aggregate the portfolio.

    Rows without a usable quote are kept, in order, with zero monetary
    figures so callers can render a fallback line for them. Every ratio
    short-circuits to 0 on a zero denominator.
    """

    cash = float(cash) if cash is not None and math.isfinite(cash) else 0.0

    total_market_value = 0.0
    total_change_value = 0.0
    total_cost_basis = 0.0
    open_gain = 0.0
    for row in rows:
        if not row.usable:
            logger.debug("Excluding %s from totals: %s", row.holding.code, row.status.value)
            continue
        shares = row.holding.shares
        market_value = row.quote.current * shares
        total_market_value += market_value
        total_change_value += row.quote.day_change * shares
        basis = _cost_basis(row)
        if basis is not None:
            total_cost_basis += basis
            open_gain += market_value - basis

    portfolio_total = total_market_value + cash

    valued = []
    total_weight_deviation = 0.0
    for row in rows:
        if not row.usable:
            valued.append(ValuedHolding(holding=row.holding, quote=row.quote, error=row.error_message))
            continue
        shares = row.holding.shares
        market_value = row.quote.current * shares
        weight = percent_of(market_value, portfolio_total)
        target = row.holding.target_weight
        weight_diff = weight - target if target is not None else None
        if weight_diff is not None:
            total_weight_deviation += abs(weight_diff)
        basis = _cost_basis(row)
        gain = market_value - basis if basis is not None else None
        gain_percent = percent_of(gain, basis) if basis is not None else None
        valued.append(
            ValuedHolding(
                holding=row.holding,
                quote=row.quote,
                error=None,
                market_value=market_value,
                change_value=row.quote.day_change * shares,
                weight=weight,
                weight_diff=weight_diff,
                cost_basis=basis,
                gain=gain,
                gain_percent=gain_percent,
            )
        )

    closed_gain = sum(p.profit_loss for p in closed_positions)
    total_gain = open_gain + closed_gain
    previous_value = total_market_value - total_change_value

    totals = PortfolioTotals(
        cash=cash,
        cash_weight=percent_of(cash, portfolio_total),
        portfolio_total=portfolio_total,
        total_market_value=total_market_value,
        total_cost_basis=total_cost_basis,
        total_change_value=total_change_value,
        total_change_percent=percent_of(total_change_value, previous_value),
        open_gain=open_gain,
        closed_gain=closed_gain,
        total_gain=total_gain,
        total_gain_percent=percent_of(total_gain, total_cost_basis + abs(closed_gain)),
        total_weight_deviation=total_weight_deviation,
    )
    return PortfolioValuation(holdings=tuple(valued), totals=totals)
