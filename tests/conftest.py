from __future__ import annotations

import pytest

from stonks.portfolio import Holding, HoldingQuote, Quote


def make_row(
    id=1,
    quantity=0.0,
    price=100.0,
    target=None,
    change=0.0,
    cost_basis=None,
    code=None,
    error=None,
    quote=True,
):
    holding = Holding(
        id=id,
        name=f"Holding {id}",
        code=code or f"NYSE:H{id}",
        quantity=quantity,
        target_weight=target,
        cost_basis=cost_basis,
    )
    q = None
    if quote and error is None:
        q = Quote(current=price, previous_close=price - change, change=change, change_percent=0.0)
    return HoldingQuote(holding=holding, quote=q, error=error)


@pytest.fixture
def row():
    return make_row
