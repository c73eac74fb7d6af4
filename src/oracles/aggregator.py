"""Read-through adapter over third-party aggregator feeds."""

import logging
from typing import TYPE_CHECKING, Dict, Protocol, Tuple

from src.chain.guards import only
from src.core.errors import ConfigurationError, InvalidPriceError
from src.core.models import PriceRecord
from src.oracles.base import PriceFeed

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class AggregatorV3(Protocol):
    """Read interface of a third-party round-based price aggregator."""

    def latest_round_data(self) -> Tuple[int, int, int, int, int]:
        """Return (round_id, answer, started_at, updated_at, answered_in_round)."""
        ...

    def decimals(self) -> int: ...


class AggregatorPriceAdapter(PriceFeed):
    """
    Adapts per-asset third-party aggregators to the PriceFeed contract.

    Answers are rescaled from each aggregator's own decimals to the
    adapter's decimals, so every asset priced by one adapter shares a
    common scale.
    """

    def __init__(self, domain: "Domain", owner: str, decimals: int = 8):
        super().__init__(domain, "feed:aggregator")
        self.owner = owner
        self._decimals = decimals
        self.aggregators: Dict[str, AggregatorV3] = {}

    def decimals(self) -> int:
        return self._decimals

    def has_asset(self, asset: str) -> bool:
        return asset in self.aggregators

    @only("owner")
    def set_aggregator(self, sender: str, asset: str, aggregator: AggregatorV3) -> None:
        self.aggregators[asset] = aggregator
        logger.info(f"Aggregator configured for {asset}")

    def get_price(self, asset: str) -> PriceRecord:
        aggregator = self.aggregators.get(asset)
        if aggregator is None:
            raise ConfigurationError(f"No aggregator configured for {asset}")

        _, answer, _, updated_at, _ = aggregator.latest_round_data()
        if answer <= 0:
            raise InvalidPriceError(f"Aggregator for {asset} returned non-positive answer {answer}")

        source_decimals = aggregator.decimals()
        if source_decimals > self._decimals:
            price = answer // 10 ** (source_decimals - self._decimals)
        else:
            price = answer * 10 ** (self._decimals - source_decimals)
        if price <= 0:
            raise InvalidPriceError(f"Price for {asset} rounds to zero at {self._decimals} decimals")

        return PriceRecord(price=price, timestamp=updated_at)
