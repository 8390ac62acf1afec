"""FX rate sources (units of foreign currency per USD)."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Protocol, Sequence

import pandas as pd
import yfinance as yf

from stonks.config import AppConfig, FxProvider

logger = logging.getLogger(__name__)


class FxSource(Protocol):
    def load(self, currencies: Sequence[str]) -> Dict[str, float]: ...


def _fx_ticker(currency: str) -> str:
    return f"USD{currency}=X"


class YahooFxSource:
    def __init__(self, period: str = "5d"):
        self.period = period

    def load(self, currencies: Sequence[str]) -> Dict[str, float]:
        wanted = [c for c in currencies if c != "USD"]
        if not wanted:
            return {}
        tickers = [_fx_ticker(c) for c in wanted]
        try:
            data = yf.download(tickers, period=self.period, auto_adjust=False, progress=False)
        except Exception as exc:
            logger.error("Error fetching FX rates: %s", exc)
            return {}
        rates: Dict[str, float] = {}
        for currency, ticker in zip(wanted, tickers):
            if isinstance(data.columns, pd.MultiIndex):
                if ticker not in data.columns.get_level_values(1):
                    continue
                closes = data.xs(ticker, axis=1, level=1)["Close"].dropna()
            elif len(tickers) == 1 and "Close" in data.columns:
                closes = data["Close"].dropna()
            else:
                continue
            if closes.empty:
                logger.warning("No FX rate for %s", currency)
                continue
            rates[currency] = float(closes.iloc[-1])
        return rates


class StaticFxSource:
    def __init__(self, rates: Mapping[str, float]):
        self.rates = {k.upper(): float(v) for k, v in rates.items()}

    def load(self, currencies: Sequence[str]) -> Dict[str, float]:
        return {c: self.rates[c] for c in currencies if c in self.rates}


def get_fx_source(config: AppConfig) -> Optional[FxSource]:
    if config.fx.provider == FxProvider.STATIC:
        return StaticFxSource(config.fx.rates)
    if config.fx.provider == FxProvider.YFINANCE:
        return YahooFxSource()
    logger.info("FX provider not configured. Currency conversion will not be available.")
    return None
