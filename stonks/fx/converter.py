"""USD to display-currency conversion."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

BASE_CURRENCY = "USD"
SUPPORTED_CURRENCIES = ("USD", "SGD", "AUD")

_SYMBOLS = {
    "USD": "$",
    "SGD": "S$",
    "AUD": "A$",
}


def currency_symbol(currency: str) -> str:
    return _SYMBOLS.get(currency, "$")


def format_money(amount: float, currency: str = BASE_CURRENCY, decimals: int = 2) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(amount):,.{decimals}f}"


def _valid_rate(rate: Optional[float]) -> bool:
    return rate is not None and math.isfinite(rate) and rate > 0


@dataclass(frozen=True)
class CurrencyConverter:
    """Converts USD amounts for display.

    With no rate table, or no rate for the requested currency, amounts pass
    through unchanged. The alt-currency preview is computed on its own and
    never feeds back into ``convert``.
    """

    currency: str = BASE_CURRENCY
    rates: Mapping[str, float] = field(default_factory=dict)
    fx_available: bool = False
    alt_currency: str = "SGD"

    @property
    def rate(self) -> Optional[float]:
        if not self.fx_available or self.currency == BASE_CURRENCY:
            return None
        rate = self.rates.get(self.currency)
        return rate if _valid_rate(rate) else None

    @property
    def preview_currency(self) -> str:
        return self.alt_currency if self.display_currency == BASE_CURRENCY else BASE_CURRENCY

    @property
    def converted(self) -> bool:
        return self.rate is not None

    @property
    def display_currency(self) -> str:
        """Currency the converted amounts are actually in."""
        return self.currency if self.converted else BASE_CURRENCY

    @property
    def symbol(self) -> str:
        return currency_symbol(self.display_currency)

    def convert(self, amount_usd: float) -> float:
        rate = self.rate
        return amount_usd if rate is None else amount_usd * rate

    def convert_to_alt(self, amount_usd: float) -> Optional[float]:
        if not self.fx_available:
            return None
        target = self.preview_currency
        if target == BASE_CURRENCY:
            return amount_usd
        rate = self.rates.get(target)
        return amount_usd * rate if _valid_rate(rate) else None

    def format(self, amount_usd: float) -> str:
        return format_money(self.convert(amount_usd), self.display_currency)


def build_converter(
    currency: str,
    rates: Optional[Dict[str, float]],
    alt_currency: str = "SGD",
) -> CurrencyConverter:
    """Converter for ``currency``; ``rates is None`` means no FX provider."""

    converter = CurrencyConverter(
        currency=currency,
        rates=dict(rates or {}),
        fx_available=rates is not None,
        alt_currency=alt_currency,
    )
    if converter.fx_available and currency != BASE_CURRENCY and not converter.converted:
        logger.warning("No rate available for %s, showing USD amounts", currency)
    return converter
