"""Quote sources for portfolio holdings."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import pandas as pd
import yfinance as yf

from stonks.config import AppConfig, QuoteProvider
from stonks.portfolio.holdings import Holding, HoldingQuote, Quote, split_code

logger = logging.getLogger(__name__)


class QuoteSource(Protocol):
    def load(self, codes: Sequence[str]) -> Dict[str, Quote]: ...


def _symbol_frame(data: pd.DataFrame, symbol: str, single: bool) -> pd.DataFrame:
    if isinstance(data.columns, pd.MultiIndex):
        if symbol not in data.columns.get_level_values(1):
            return pd.DataFrame()
        return data.xs(symbol, axis=1, level=1)
    # fallback for single symbol fetch
    return data if single else pd.DataFrame()


def _last_two_closes(data: pd.DataFrame, symbol: str, single: bool) -> Optional[Tuple[float, float]]:
    frame = _symbol_frame(data, symbol, single)
    if frame.empty or "Close" not in frame.columns:
        return None
    closes = frame["Close"].dropna()
    if closes.empty:
        return None
    current = float(closes.iloc[-1])
    previous = float(closes.iloc[-2]) if len(closes) > 1 else current
    return current, previous


class YahooQuoteSource:
    """Latest close and the close before it, from a short daily download."""

    def __init__(self, period: str = "5d"):
        self.period = period

    def load(self, codes: Sequence[str]) -> Dict[str, Quote]:
        symbols = sorted({split_code(code)[1] for code in codes})
        if not symbols:
            return {}
        data = yf.download(symbols, period=self.period, auto_adjust=False, progress=False)
        quotes: Dict[str, Quote] = {}
        for code in codes:
            symbol = split_code(code)[1]
            closes = _last_two_closes(data, symbol, single=len(symbols) == 1)
            if closes is None:
                logger.warning("No quote data for %s", symbol)
                continue
            quotes[code] = Quote.from_closes(*closes)
        return quotes


class CSVQuoteSource:
    """Quotes from a CSV with ``code,current,previous_close`` columns."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self, codes: Sequence[str]) -> Dict[str, Quote]:
        df = pd.read_csv(self.path)
        df.columns = [c.strip().lower() for c in df.columns]
        rows = {str(row["code"]).strip(): row for _, row in df.iterrows()}
        quotes: Dict[str, Quote] = {}
        for code in codes:
            row = rows.get(code)
            if row is None:
                # bare symbols in the file match exchange-qualified holding codes
                row = rows.get(split_code(code)[1])
            if row is None or pd.isna(row.get("current")):
                continue
            current = float(row["current"])
            previous = row.get("previous_close")
            previous = current if previous is None or pd.isna(previous) else float(previous)
            quote = Quote.from_closes(current, previous)
            change = row.get("change")
            change_percent = row.get("change_percent")
            if change is not None and not pd.isna(change):
                quote = Quote(
                    current=quote.current,
                    previous_close=quote.previous_close,
                    change=float(change),
                    change_percent=quote.change_percent
                    if change_percent is None or pd.isna(change_percent)
                    else float(change_percent),
                )
            quotes[code] = quote
        return quotes


@dataclass
class CachedQuoteSource:
    """Keeps each code's quote for ``ttl_seconds`` before asking the source again."""

    source: QuoteSource
    ttl_seconds: float = 60.0
    clock: Callable[[], float] = time.time
    _cache: Dict[str, Tuple[Quote, float]] = field(default_factory=dict)

    def _fresh(self, code: str, now: float) -> Optional[Quote]:
        entry = self._cache.get(code)
        if entry is None or now - entry[1] >= self.ttl_seconds:
            return None
        return entry[0]

    def load(self, codes: Sequence[str]) -> Dict[str, Quote]:
        now = self.clock()
        quotes: Dict[str, Quote] = {}
        missing: List[str] = []
        for code in codes:
            cached = self._fresh(code, now)
            if cached is None:
                missing.append(code)
            else:
                quotes[code] = cached
        if missing:
            fetched = self.source.load(missing)
            for code, quote in fetched.items():
                self._cache[code] = (quote, now)
            quotes.update(fetched)
        return quotes

    def cache_stats(self) -> Dict[str, Optional[float]]:
        stamps = [stamp for _, stamp in self._cache.values()]
        return {
            "size": len(self._cache),
            "oldest": min(stamps) if stamps else None,
            "newest": max(stamps) if stamps else None,
        }

    def clear(self) -> None:
        self._cache.clear()


def get_quote_source(config: AppConfig) -> QuoteSource:
    if config.quotes.provider == QuoteProvider.CSV:
        source: QuoteSource = CSVQuoteSource(config.quotes.csv)
    else:
        source = YahooQuoteSource()
    if config.quotes.cache_seconds > 0:
        return CachedQuoteSource(source, ttl_seconds=config.quotes.cache_seconds)
    return source


def fetch_portfolio_quotes(holdings: Sequence[Holding], source: QuoteSource) -> List[HoldingQuote]:
    """Pair each holding with its quote, or with the reason it has none."""

    codes = list(dict.fromkeys(h.code for h in holdings))
    try:
        quotes = source.load(codes) if codes else {}
    except Exception as exc:
        logger.error("Error fetching portfolio quotes: %s", exc)
        return [HoldingQuote(holding=h, error=str(exc) or type(exc).__name__) for h in holdings]

    rows: List[HoldingQuote] = []
    for holding in holdings:
        quote = quotes.get(holding.code)
        if quote is None:
            rows.append(HoldingQuote(holding=holding, error=f"No quote data for {holding.symbol}"))
        else:
            rows.append(HoldingQuote(holding=holding, quote=quote))
    return rows
