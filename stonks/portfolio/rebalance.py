"""Rebalance logic."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .holdings import Holding, HoldingQuote, Quote
from .valuation import percent_of

logger = logging.getLogger(__name__)


class RebalanceAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


def round_half_away(value: float) -> int:
    """Nearest integer, with .5 ties rounded away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class RebalanceRecommendation:
    holding: Holding
    quote: Quote
    current_quantity: float
    current_value: float
    current_weight: float
    target_weight: float
    target_quantity: float
    target_value: float
    quantity_change: float = 0.0
    value_change: float = 0.0
    new_weight: float = 0.0
    action: RebalanceAction = RebalanceAction.HOLD

    @property
    def has_target(self) -> bool:
        return self.holding.target_weight is not None


@dataclass(frozen=True)
class RebalanceResult:
    recommendations: Tuple[RebalanceRecommendation, ...]
    new_cash: float
    cash_change: float

    @property
    def new_total_market_value(self) -> float:
        return sum(r.target_value for r in self.recommendations)

    @property
    def new_weight_deviation(self) -> float:
        return sum(abs(r.new_weight - r.target_weight) for r in self.recommendations if r.has_target)

    @property
    def overdrawn(self) -> bool:
        return self.new_cash < 0

    def for_holding(self, holding_id: int) -> Optional[RebalanceRecommendation]:
        for rec in self.recommendations:
            if rec.holding.id == holding_id:
                return rec
        return None


def _seed(row: HoldingQuote, portfolio_total: float) -> RebalanceRecommendation:
    quantity = row.holding.shares
    value = row.quote.current * quantity
    weight = percent_of(value, portfolio_total)
    return RebalanceRecommendation(
        holding=row.holding,
        quote=row.quote,
        current_quantity=quantity,
        current_value=value,
        current_weight=weight,
        target_weight=row.holding.target_weight or 0.0,
        target_quantity=quantity,
        target_value=value,
        new_weight=weight,
    )


def _allocate(rec: RebalanceRecommendation, portfolio_total: float) -> RebalanceRecommendation:
    price = rec.quote.current
    ideal_value = (rec.target_weight / 100) * portfolio_total
    target_quantity = max(round_half_away(ideal_value / price), 0)
    target_value = target_quantity * price
    quantity_change = target_quantity - rec.current_quantity
    if quantity_change > 0:
        action = RebalanceAction.BUY
    elif quantity_change < 0:
        action = RebalanceAction.SELL
    else:
        action = RebalanceAction.HOLD
    return replace(
        rec,
        target_quantity=target_quantity,
        target_value=target_value,
        quantity_change=quantity_change,
        value_change=target_value - rec.current_value,
        new_weight=percent_of(target_value, portfolio_total),
        action=action,
    )


def calculate_rebalancing(
    rows: Sequence[HoldingQuote],
    cash_amount: float,
    portfolio_total: float,
) -> RebalanceResult:
    """Whole-share trades that move each quoted holding toward its target weight.

    Targets are read against the pre-trade ``portfolio_total``. Each holding
    is sized on its own; the resulting cash may go negative and is reported
    as-is. Rows without a usable quote get no recommendation.
    """

    seeded: List[RebalanceRecommendation] = [_seed(row, portfolio_total) for row in rows if row.usable]

    if sum(r.target_weight for r in seeded) == 0:
        logger.debug("No target weights configured; holding every position")
        return RebalanceResult(recommendations=tuple(seeded), new_cash=cash_amount, cash_change=0.0)

    recommendations = tuple(_allocate(rec, portfolio_total) for rec in seeded)
    total_cash_needed = sum(r.value_change for r in recommendations)
    return RebalanceResult(
        recommendations=recommendations,
        new_cash=cash_amount - total_cash_needed,
        cash_change=-total_cash_needed,
    )
