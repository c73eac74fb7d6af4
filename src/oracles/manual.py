"""Owner-set price feed, used on test deployments."""

import logging
from typing import TYPE_CHECKING, Dict

from src.chain.guards import only
from src.core.errors import ConfigurationError, InvalidPriceError
from src.core.models import PriceRecord
from src.oracles.base import PriceFeed

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class ManualPriceFeed(PriceFeed):
    """Price feed whose prices are pushed by a single owner."""

    JOURNALED = ("prices",)

    def __init__(self, domain: "Domain", owner: str, decimals: int = 8):
        super().__init__(domain, "feed:manual")
        self.owner = owner
        self._decimals = decimals
        self.prices: Dict[str, PriceRecord] = {}

    def decimals(self) -> int:
        return self._decimals

    def has_asset(self, asset: str) -> bool:
        return asset in self.prices

    @only("owner")
    def set_price(self, sender: str, asset: str, price: int) -> None:
        """Record a new price stamped with the current domain time."""
        if price <= 0:
            raise InvalidPriceError(f"Price must be positive, got {price}")
        self.prices[asset] = PriceRecord(price=price, timestamp=self.domain.now)
        self._emit("PriceUpdated", asset=asset, price=price)
        logger.debug(f"Price for {asset} set to {price}")

    def get_price(self, asset: str) -> PriceRecord:
        record = self.prices.get(asset)
        if record is None:
            raise ConfigurationError(f"No price set for {asset}")
        return record
