"""Transaction ledger: aggregate cost basis and realized closed positions."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from stonks.config import TransactionConfig, TransactionType

from .holdings import Holding

_FLAT = 1e-9


@dataclass(frozen=True)
class Transaction:
    holding_code: str
    type: TransactionType
    quantity: float
    price: float
    fee: float = 0.0
    trade_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def value(self) -> float:
        return self.quantity * self.price

    @property
    def is_buy(self) -> bool:
        return self.type is TransactionType.BUY

    @classmethod
    def from_config(cls, cfg: TransactionConfig) -> "Transaction":
        return cls(
            holding_code=cfg.code,
            type=cfg.type,
            quantity=cfg.quantity,
            price=cfg.price,
            fee=cfg.fee,
            trade_date=cfg.trade_date,
            notes=cfg.notes,
        )


@dataclass(frozen=True)
class ClosedPosition:
    name: str
    code: str
    total_cost: float
    total_revenue: float
    profit_loss: float
    profit_loss_percent: float
    transactions: int


def _by_code(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    grouped: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        grouped[txn.holding_code].append(txn)
    return grouped


def cost_basis_by_code(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """Total invested per code: buy value plus fees. Sells do not reduce it."""

    basis: Dict[str, float] = {}
    for code, txns in _by_code(transactions).items():
        basis[code] = sum(t.value + t.fee for t in txns if t.is_buy)
    return basis


def apply_cost_basis(holdings: Sequence[Holding], transactions: Iterable[Transaction]) -> List[Holding]:
    """Fill in ledger cost basis for holdings that do not carry one explicitly."""

    basis = cost_basis_by_code(transactions)
    out: List[Holding] = []
    for holding in holdings:
        if holding.cost_basis is None and holding.code in basis:
            holding = replace(holding, cost_basis=basis[holding.code])
        out.append(holding)
    return out


def net_quantity(transactions: Iterable[Transaction]) -> float:
    return sum(t.quantity if t.is_buy else -t.quantity for t in transactions)


def _closed(name: str, code: str, txns: Sequence[Transaction]) -> ClosedPosition:
    total_cost = sum(t.value + t.fee for t in txns if t.is_buy)
    total_revenue = sum(t.value - t.fee for t in txns if not t.is_buy)
    profit_loss = total_revenue - total_cost
    return ClosedPosition(
        name=name,
        code=code,
        total_cost=total_cost,
        total_revenue=total_revenue,
        profit_loss=profit_loss,
        profit_loss_percent=(profit_loss / total_cost) * 100 if total_cost > 0 else 0.0,
        transactions=len(txns),
    )


def closed_positions(holdings: Sequence[Holding], transactions: Iterable[Transaction]) -> List[ClosedPosition]:
    """Holdings whose ledger has been sold down to zero shares.

    A holding that still carries shares stays open even when its ledger
    nets to zero, so its trades are never counted as realized as well.
    """

    grouped = _by_code(transactions)
    positions: List[ClosedPosition] = []
    seen = set()
    for holding in holdings:
        txns = grouped.get(holding.code)
        if not txns or holding.code in seen or holding.shares > 0:
            continue
        seen.add(holding.code)
        has_sell = any(not t.is_buy for t in txns)
        if has_sell and abs(net_quantity(txns)) < _FLAT:
            positions.append(_closed(holding.name, holding.code, txns))
    return positions


def summarize_closed(positions: Sequence[ClosedPosition]) -> ClosedPosition:
    """Totals row across all closed positions."""

    txns = sum(p.transactions for p in positions)
    total_cost = sum(p.total_cost for p in positions)
    total_revenue = sum(p.total_revenue for p in positions)
    profit_loss = total_revenue - total_cost
    return ClosedPosition(
        name="Total",
        code="",
        total_cost=total_cost,
        total_revenue=total_revenue,
        profit_loss=profit_loss,
        profit_loss_percent=(profit_loss / total_cost) * 100 if total_cost > 0 else 0.0,
        transactions=txns,
    )
