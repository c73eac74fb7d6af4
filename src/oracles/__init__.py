"""Price oracles: feed read contract, feed variants and conversion."""

from .base import PriceFeed
from .manual import ManualPriceFeed
from .aggregator import AggregatorPriceAdapter, AggregatorV3
from .converter import PriceConverter

__all__ = [
    "PriceFeed",
    "ManualPriceFeed",
    "AggregatorPriceAdapter",
    "AggregatorV3",
    "PriceConverter",
]
