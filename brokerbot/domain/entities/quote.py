"""
Domain entities for ticker requests and price quotes.
Pure Python dataclasses with no external dependencies.
"""

import math
from dataclasses import dataclass
from enum import Enum


class AssetClass(Enum):
    STOCK = "stock"
    CRYPTO = "crypto"


@dataclass(frozen=True)
class ClassifiedTicker:
    symbol: str
    asset_class: AssetClass


@dataclass(frozen=True)
class QuoteResult:
    """A single quote ready for display.

    has_data is False when the upstream answered with an empty/zero quote,
    which is how providers report an unknown symbol.
    """

    symbol: str
    display_name: str
    price: float
    change_percent: float
    has_data: bool = True
    asset_class: AssetClass = AssetClass.STOCK

    @property
    def shows_change(self) -> bool:
        return not math.isnan(self.change_percent) and self.change_percent != 0

    @classmethod
    def no_data(cls, symbol: str, asset_class: AssetClass = AssetClass.STOCK) -> "QuoteResult":
        return cls(
            symbol=symbol,
            display_name=symbol,
            price=0.0,
            change_percent=0.0,
            has_data=False,
            asset_class=asset_class,
        )


@dataclass(frozen=True)
class PriceFeedEntry:
    pair: str
    price: str
    change_percent: str


@dataclass(frozen=True)
class Alias:
    name: str
    members: tuple[str, ...]
