from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from stonks.config import load_config
from stonks.data import CachedQuoteSource, CSVQuoteSource, YahooQuoteSource, fetch_portfolio_quotes, get_quote_source
from stonks.portfolio import Holding, Quote, QuoteStatus


def _write_quotes(path: Path, rows: list[dict]) -> Path:
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_csv_quote_source_matches_full_and_bare_codes(tmp_path):
    path = _write_quotes(
        tmp_path / "quotes.csv",
        [
            {"code": "BATS:VOO", "current": 400, "previous_close": 395},
            {"code": "AAPL", "current": 200, "previous_close": None},
        ],
    )
    quotes = CSVQuoteSource(path).load(["BATS:VOO", "NASDAQ:AAPL", "NYSE:ZZZ"])

    assert set(quotes) == {"BATS:VOO", "NASDAQ:AAPL"}
    voo = quotes["BATS:VOO"]
    assert voo.change == pytest.approx(5)
    assert voo.change_percent == pytest.approx(5 / 395 * 100)
    assert quotes["NASDAQ:AAPL"].change == 0


def test_csv_quote_source_prefers_explicit_change(tmp_path):
    path = _write_quotes(
        tmp_path / "quotes.csv",
        [{"code": "VOO", "current": 400, "previous_close": 395, "change": 4, "change_percent": 1.0}],
    )
    quote = CSVQuoteSource(path).load(["VOO"])["VOO"]
    assert quote.change == 4
    assert quote.change_percent == 1.0


def test_yahoo_quote_source_uses_last_two_closes(monkeypatch):
    called = {}

    def fake_download(tickers, period, auto_adjust, progress):
        called["tickers"] = tickers
        idx = pd.date_range("2024-01-01", periods=3, freq="D")
        data = {
            ("Close", "VOO"): [390, 395, 400],
            ("Adj Close", "VOO"): [389, 394, 399],
            ("Close", "AAPL"): [None, None, None],
        }
        df = pd.DataFrame(data, index=idx)
        df.columns = pd.MultiIndex.from_tuples(df.columns)
        return df

    import yfinance as yf

    monkeypatch.setattr(yf, "download", fake_download)

    quotes = YahooQuoteSource().load(["BATS:VOO", "NASDAQ:AAPL"])
    assert called["tickers"] == ["AAPL", "VOO"]
    assert list(quotes) == ["BATS:VOO"]
    assert quotes["BATS:VOO"].current == 400
    assert quotes["BATS:VOO"].previous_close == 395


def test_fetch_portfolio_quotes_marks_missing_symbols():
    class FakeSource:
        def load(self, codes):
            return {"BATS:VOO": Quote.from_closes(400, 395)}

    holdings = [Holding(1, "Vanguard", "BATS:VOO", 1), Holding(2, "Gone", "NYSE:ZZZ", 1)]
    rows = fetch_portfolio_quotes(holdings, FakeSource())

    assert rows[0].status is QuoteStatus.OK
    assert rows[1].status is QuoteStatus.ERROR
    assert rows[1].error == "No quote data for ZZZ"


def test_fetch_portfolio_quotes_never_raises():
    class BrokenSource:
        def load(self, codes):
            raise RuntimeError("rate limited")

    holdings = [Holding(1, "A", "NYSE:A", 1), Holding(2, "B", "NYSE:B", 1)]
    rows = fetch_portfolio_quotes(holdings, BrokenSource())
    assert [r.error for r in rows] == ["rate limited", "rate limited"]


def test_cached_source_reuses_fresh_quotes():
    calls = []
    now = [1000.0]

    class CountingSource:
        def load(self, codes):
            calls.append(list(codes))
            return {code: Quote.from_closes(10, 9) for code in codes}

    cached = CachedQuoteSource(CountingSource(), ttl_seconds=60, clock=lambda: now[0])
    cached.load(["A", "B"])
    now[0] += 30
    cached.load(["A", "B", "C"])
    now[0] += 45
    cached.load(["A"])

    assert calls == [["A", "B"], ["C"], ["A"]]
    stats = cached.cache_stats()
    assert stats["size"] == 3
    assert stats["oldest"] == 1000.0
    assert stats["newest"] == 1075.0
    cached.clear()
    assert cached.cache_stats() == {"size": 0, "oldest": None, "newest": None}


def test_get_quote_source_wraps_in_cache(tmp_path):
    config = load_config({"quotes": {"provider": "csv", "csv": str(tmp_path / "q.csv")}})
    source = get_quote_source(config)
    assert isinstance(source, CachedQuoteSource)
    assert isinstance(source.source, CSVQuoteSource)

    config = load_config({"quotes": {"provider": "yfinance", "cache_seconds": 0}})
    assert isinstance(get_quote_source(config), YahooQuoteSource)
