"""Configuration models and loader for the Stonks portfolio."""

from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, NonNegativeFloat, field_validator, model_validator


class Currency(str, Enum):
    USD = "USD"
    SGD = "SGD"
    AUD = "AUD"


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class HoldingConfig(BaseModel):
    id: int
    name: str
    code: str
    quantity: NonNegativeFloat = 0.0
    target_weight: Optional[float] = Field(None, ge=0.0, le=100.0)
    visible: bool = True
    cost_basis: Optional[NonNegativeFloat] = None

    @field_validator("code")
    @classmethod
    def code_not_blank(cls, code: str) -> str:
        code = code.strip()
        if not code:
            raise ValueError("holding code must not be empty")
        return code


class TransactionConfig(BaseModel):
    code: str
    type: TransactionType
    quantity: NonNegativeFloat
    price: NonNegativeFloat
    fee: NonNegativeFloat = 0.0
    trade_date: Optional[date] = None
    notes: Optional[str] = None


class PortfolioConfig(BaseModel):
    name: str = "My Portfolio"
    cash: float = 0.0
    holdings: List[HoldingConfig] = Field(default_factory=list)
    transactions: List[TransactionConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> "PortfolioConfig":
        ids = [h.id for h in self.holdings]
        if len(ids) != len(set(ids)):
            raise ValueError("holding ids must be unique")
        return self


class QuoteProvider(str, Enum):
    YFINANCE = "yfinance"
    CSV = "csv"


class QuotesConfig(BaseModel):
    provider: QuoteProvider = QuoteProvider.YFINANCE
    csv: Optional[Path] = None
    cache_seconds: NonNegativeFloat = 60.0

    @model_validator(mode="after")
    def _validate_payload(self) -> "QuotesConfig":
        if self.provider == QuoteProvider.CSV and self.csv is None:
            raise ValueError("csv provider requires a csv path")
        return self


class FxProvider(str, Enum):
    NONE = "none"
    YFINANCE = "yfinance"
    STATIC = "static"


class FxConfig(BaseModel):
    provider: FxProvider = FxProvider.NONE
    currencies: List[Currency] = Field(default_factory=lambda: [Currency.SGD, Currency.AUD])
    rates: Dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_payload(self) -> "FxConfig":
        if self.provider == FxProvider.STATIC and not self.rates:
            raise ValueError("static fx provider requires rates")
        return self


class DisplayConfig(BaseModel):
    currency: Currency = Currency.USD
    alt_currency: Currency = Currency.SGD
    include_hidden: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    portfolio: PortfolioConfig = Field(default_factory=PortfolioConfig)
    quotes: QuotesConfig = Field(default_factory=QuotesConfig)
    fx: FxConfig = Field(default_factory=FxConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def total_target_weight(self) -> float:
        return sum(h.target_weight or 0.0 for h in self.portfolio.holdings)


def load_config(source: Union[str, Path, Dict[str, Any]]) -> AppConfig:
    """Load and validate the application config from a path or raw mapping."""

    if isinstance(source, (str, Path)):
        path = Path(source)
        payload = yaml.safe_load(path.read_text()) or {}
    elif isinstance(source, dict):
        payload = source
    else:
        raise TypeError("config source must be a path or mapping")

    return AppConfig.model_validate(payload)


__all__ = [
    "AppConfig",
    "Currency",
    "DisplayConfig",
    "FxConfig",
    "FxProvider",
    "HoldingConfig",
    "LoggingConfig",
    "PortfolioConfig",
    "QuoteProvider",
    "QuotesConfig",
    "TransactionConfig",
    "TransactionType",
    "load_config",
]
