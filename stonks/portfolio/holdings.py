"""Holding and quote snapshots consumed by the valuation engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from stonks.config import HoldingConfig


def split_code(code: str) -> Tuple[Optional[str], str]:
    """Split an exchange-qualified code such as ``BATS:VOO`` into (exchange, symbol)."""

    if ":" not in code:
        return None, code
    exchange, symbol = code.split(":", 1)
    return exchange or None, symbol


def _finite(value: Optional[float], default: float = 0.0) -> float:
    if value is None:
        return default
    value = float(value)
    return value if math.isfinite(value) else default


@dataclass(frozen=True)
class Holding:
    id: int
    name: str
    code: str
    quantity: float = 0.0
    target_weight: Optional[float] = None
    visible: bool = True
    cost_basis: Optional[float] = None

    @property
    def symbol(self) -> str:
        return split_code(self.code)[1]

    @property
    def exchange(self) -> Optional[str]:
        return split_code(self.code)[0]

    @property
    def shares(self) -> float:
        """Quantity clamped to a finite, non-negative number."""
        return max(_finite(self.quantity), 0.0)

    @classmethod
    def from_config(cls, cfg: HoldingConfig) -> "Holding":
        return cls(
            id=cfg.id,
            name=cfg.name,
            code=cfg.code,
            quantity=cfg.quantity,
            target_weight=cfg.target_weight,
            visible=cfg.visible,
            cost_basis=cfg.cost_basis,
        )


@dataclass(frozen=True)
class Quote:
    current: float
    previous_close: float
    change: float
    change_percent: float

    @classmethod
    def from_closes(cls, current: float, previous_close: float) -> "Quote":
        change = current - previous_close
        change_percent = (change / previous_close) * 100 if previous_close else 0.0
        return cls(
            current=float(current),
            previous_close=float(previous_close),
            change=float(change),
            change_percent=float(change_percent),
        )

    @property
    def usable(self) -> bool:
        return self.current is not None and math.isfinite(self.current) and self.current > 0

    @property
    def day_change(self) -> float:
        return _finite(self.change)


class QuoteStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"
    ERROR = "error"


INVALID_PRICE = "invalid quote price"


@dataclass(frozen=True)
class HoldingQuote:
    """A holding paired with whatever the quote source produced for it."""

    holding: Holding
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @property
    def status(self) -> QuoteStatus:
        if self.error:
            return QuoteStatus.ERROR
        if self.quote is None:
            return QuoteStatus.NO_DATA
        if not self.quote.usable:
            return QuoteStatus.ERROR
        return QuoteStatus.OK

    @property
    def usable(self) -> bool:
        return self.status is QuoteStatus.OK

    @property
    def error_message(self) -> Optional[str]:
        if self.error:
            return self.error
        if self.quote is not None and not self.quote.usable:
            return INVALID_PRICE
        return None


def select_active_holdings(
    holdings: Iterable[Holding],
    rebalance_mode: bool = False,
    include_hidden: bool = False,
) -> List[Holding]:
    """Holdings worth quoting: open positions, plus targeted empty ones when rebalancing."""

    active: List[Holding] = []
    for holding in holdings:
        if not holding.visible and not include_hidden:
            continue
        if holding.shares > 0 or (rebalance_mode and holding.target_weight is not None):
            active.append(holding)
    return active
