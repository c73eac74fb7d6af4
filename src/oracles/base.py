"""Price feed read contract."""

from abc import ABC, abstractmethod

from src.chain.contract import Contract
from src.core.models import PriceRecord


class PriceFeed(Contract, ABC):
    """Abstract base class for price feeds.

    Every feed exposes the same read contract regardless of where its
    prices come from. No staleness policy is applied here; callers decide
    how old a price they accept.
    """

    @abstractmethod
    def get_price(self, asset: str) -> PriceRecord:
        """Return the latest (price, timestamp) for an asset.

        Raises:
            ConfigurationError: If the feed has no price source for the asset
        """
        ...

    @abstractmethod
    def decimals(self) -> int:
        """Number of decimals prices are scaled by."""
        ...

    def has_asset(self, asset: str) -> bool:
        """Check whether the feed can price an asset."""
        return True
