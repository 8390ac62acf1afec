from __future__ import annotations

import pandas as pd
import pytest

from stonks.config import load_config
from stonks.data import StaticFxSource, YahooFxSource, get_fx_source
from stonks.fx import CurrencyConverter, build_converter, currency_symbol, format_money


def test_fx_unavailable_returns_amount_unchanged():
    for currency in ("USD", "SGD", "AUD"):
        converter = build_converter(currency, None)
        assert not converter.fx_available
        assert converter.convert(123.45) == 123.45
        assert converter.convert_to_alt(123.45) is None


def test_convert_uses_rate_for_display_currency():
    converter = build_converter("SGD", {"SGD": 1.35, "AUD": 1.52})
    assert converter.convert(100) == pytest.approx(135)
    assert build_converter("USD", {"SGD": 1.35}).convert(100) == 100


def test_missing_rate_falls_back_to_usd_amount():
    converter = build_converter("AUD", {"SGD": 1.35})
    assert converter.fx_available
    assert converter.convert(100) == 100
    assert CurrencyConverter("AUD", {"AUD": 0.0}, True).convert(100) == 100


def test_alt_preview_is_independent_of_primary_conversion():
    usd = build_converter("USD", {"SGD": 1.35})
    assert usd.preview_currency == "SGD"
    assert usd.convert(100) == 100
    assert usd.convert_to_alt(100) == pytest.approx(135)

    aud = build_converter("AUD", {"AUD": 1.5, "SGD": 1.35})
    assert aud.preview_currency == "USD"
    assert aud.convert(100) == pytest.approx(150)
    assert aud.convert_to_alt(100) == 100

    assert build_converter("USD", {"AUD": 1.5}).convert_to_alt(100) is None


def test_currency_symbols_and_formatting():
    assert currency_symbol("SGD") == "S$"
    assert currency_symbol("AUD") == "A$"
    assert currency_symbol("EUR") == "$"
    assert format_money(-1234.5, "SGD") == "-S$1,234.50"
    assert build_converter("SGD", {"SGD": 2}).format(10) == "S$20.00"


def test_get_fx_source_follows_provider():
    base = {"portfolio": {"cash": 0}}
    assert get_fx_source(load_config(base)) is None
    static = get_fx_source(load_config({**base, "fx": {"provider": "static", "rates": {"sgd": 1.3}}}))
    assert isinstance(static, StaticFxSource)
    assert static.load(["SGD", "AUD"]) == {"SGD": 1.3}
    assert isinstance(get_fx_source(load_config({**base, "fx": {"provider": "yfinance"}})), YahooFxSource)


def test_yahoo_fx_source_reads_last_close(monkeypatch):
    called = {}

    def fake_download(tickers, period, auto_adjust, progress):
        called["tickers"] = tickers
        idx = pd.date_range("2024-01-01", periods=2, freq="D")
        df = pd.DataFrame(
            {("Close", "USDSGD=X"): [1.34, 1.35], ("Close", "USDAUD=X"): [float("nan"), float("nan")]},
            index=idx,
        )
        df.columns = pd.MultiIndex.from_tuples(df.columns)
        return df

    import yfinance as yf

    monkeypatch.setattr(yf, "download", fake_download)

    rates = YahooFxSource().load(["USD", "SGD", "AUD"])
    assert called["tickers"] == ["USDSGD=X", "USDAUD=X"]
    assert rates == {"SGD": pytest.approx(1.35)}


def test_yahoo_fx_source_failure_yields_empty_table(monkeypatch):
    def boom(*args, **kwargs):
        raise ConnectionError("offline")

    import yfinance as yf

    monkeypatch.setattr(yf, "download", boom)
    assert YahooFxSource().load(["SGD"]) == {}


def test_missing_rate_warns_once_and_reports_usd(caplog):
    with caplog.at_level("WARNING", logger="stonks.fx.converter"):
        converter = build_converter("AUD", {"SGD": 1.35})
        for _ in range(5):
            converter.convert(100)
            converter.format(100)

    assert len([r for r in caplog.records if "AUD" in r.getMessage()]) == 1
    assert not converter.converted
    assert converter.display_currency == "USD"
    assert converter.format(100) == "$100.00"
    assert converter.preview_currency == "SGD"
    assert converter.convert_to_alt(100) == pytest.approx(135)

    assert build_converter("SGD", {"SGD": 1.35}).display_currency == "SGD"
    assert build_converter("AUD", None).display_currency == "USD"
