from __future__ import annotations

import pytest

from stonks.config import TransactionType
from stonks.portfolio import (
    Holding,
    HoldingQuote,
    Quote,
    Transaction,
    apply_cost_basis,
    closed_positions,
    cost_basis_by_code,
    summarize_closed,
    value_portfolio,
)

BUY = TransactionType.BUY
SELL = TransactionType.SELL


def _ledger():
    return [
        Transaction("BATS:VOO", BUY, 10, 100, fee=1),
        Transaction("BATS:VOO", BUY, 5, 110, fee=1),
        Transaction("BATS:VOO", SELL, 3, 120, fee=1),
        Transaction("NYSE:OLD", BUY, 4, 50, fee=2),
        Transaction("NYSE:OLD", SELL, 4, 40, fee=2),
    ]


def test_cost_basis_sums_buys_and_fees_only():
    basis = cost_basis_by_code(_ledger())
    assert basis["BATS:VOO"] == pytest.approx(1000 + 1 + 550 + 1)
    assert basis["NYSE:OLD"] == pytest.approx(202)


def test_apply_cost_basis_keeps_explicit_values():
    holdings = [
        Holding(1, "Vanguard", "BATS:VOO", 12),
        Holding(2, "Manual", "NYSE:OLD", 0, cost_basis=999),
        Holding(3, "Untraded", "NYSE:NEW", 1),
    ]
    filled = apply_cost_basis(holdings, _ledger())
    assert filled[0].cost_basis == pytest.approx(1552)
    assert filled[1].cost_basis == 999
    assert filled[2].cost_basis is None
    assert holdings[0].cost_basis is None


def test_fully_sold_holding_is_a_closed_position():
    holdings = [Holding(1, "Vanguard", "BATS:VOO", 12), Holding(2, "Old Co", "NYSE:OLD", 0)]
    closed = closed_positions(holdings, _ledger())

    assert [p.code for p in closed] == ["NYSE:OLD"]
    position = closed[0]
    assert position.total_cost == pytest.approx(202)
    assert position.total_revenue == pytest.approx(158)
    assert position.profit_loss == pytest.approx(-44)
    assert position.profit_loss_percent == pytest.approx(-44 / 202 * 100)
    assert position.transactions == 2


def test_summarize_closed_guards_zero_cost():
    total = summarize_closed([])
    assert total.profit_loss == 0
    assert total.profit_loss_percent == 0


def test_holding_with_shares_stays_open_even_if_ledger_nets_to_zero():
    holdings = [Holding(1, "Vanguard", "BATS:VOO", 10)]
    ledger = [Transaction("BATS:VOO", BUY, 10, 100), Transaction("BATS:VOO", SELL, 10, 120)]

    assert closed_positions(holdings, ledger) == []

    holding = apply_cost_basis(holdings, ledger)[0]
    row = HoldingQuote(holding=holding, quote=Quote(130, 130, 0, 0))
    totals = value_portfolio([row], 0, closed_positions(holdings, ledger)).totals
    assert totals.closed_gain == 0
    assert totals.total_gain == pytest.approx(300)
