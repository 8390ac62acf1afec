"""Portfolio helpers."""

from .holdings import Holding, HoldingQuote, Quote, QuoteStatus, select_active_holdings, split_code
from .ledger import (
    ClosedPosition,
    Transaction,
    apply_cost_basis,
    closed_positions,
    cost_basis_by_code,
    summarize_closed,
)
from .valuation import PortfolioTotals, PortfolioValuation, ValuedHolding, value_portfolio
from .rebalance import (
    RebalanceAction,
    RebalanceRecommendation,
    RebalanceResult,
    calculate_rebalancing,
    round_half_away,
)

__all__ = [
    "ClosedPosition",
    "Holding",
    "HoldingQuote",
    "PortfolioTotals",
    "PortfolioValuation",
    "Quote",
    "QuoteStatus",
    "RebalanceAction",
    "RebalanceRecommendation",
    "RebalanceResult",
    "Transaction",
    "ValuedHolding",
    "apply_cost_basis",
    "calculate_rebalancing",
    "closed_positions",
    "cost_basis_by_code",
    "round_half_away",
    "select_active_holdings",
    "split_code",
    "summarize_closed",
    "value_portfolio",
]
