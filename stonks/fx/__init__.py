"""Currency conversion helpers."""

from .converter import (
    BASE_CURRENCY,
    SUPPORTED_CURRENCIES,
    CurrencyConverter,
    build_converter,
    currency_symbol,
    format_money,
)

__all__ = [
    "BASE_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "CurrencyConverter",
    "build_converter",
    "currency_symbol",
    "format_money",
]
