"""Quote and FX source interfaces for Stonks."""

from .quotes import (
    CachedQuoteSource,
    CSVQuoteSource,
    QuoteSource,
    YahooQuoteSource,
    fetch_portfolio_quotes,
    get_quote_source,
)
from .fx import FxSource, StaticFxSource, YahooFxSource, get_fx_source

__all__ = [
    "CachedQuoteSource",
    "CSVQuoteSource",
    "FxSource",
    "QuoteSource",
    "StaticFxSource",
    "YahooFxSource",
    "YahooQuoteSource",
    "fetch_portfolio_quotes",
    "get_fx_source",
    "get_quote_source",
]
