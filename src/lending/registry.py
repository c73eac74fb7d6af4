"""Pool registry: the single source of pools and their collaborators."""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from config.settings import Settings, get_settings
from src.bridge.sender import BridgeSender
from src.chain.contract import Contract
from src.chain.guards import atomic, only
from src.chain.token import Token
from src.core.constants import MAX_LTV, MIN_LTV
from src.core.errors import ConfigurationError, PoolAlreadyExistsError, ValidationError
from src.core.models import PoolConfig
from src.lending.pool import LendingPool
from src.lending.swap import OracleSwapRouter
from src.oracles.base import PriceFeed
from src.oracles.converter import PriceConverter

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class PoolRegistry(Contract):
    """
    Creates lending pools and owns their shared configuration.

    Holds the one authoritative (collateral, borrow) -> pool mapping, the
    price feed per token, the swap router, the protocol treasury, and the
    bridge senders registered per destination domain.
    """

    JOURNALED = ("pools",)

    def __init__(
        self,
        domain: "Domain",
        owner: str,
        treasury: str,
        settings: Optional[Settings] = None,
    ):
        if not treasury:
            raise ConfigurationError("Treasury address is required")
        super().__init__(domain, "registry")
        self.owner = owner
        self.treasury = treasury
        self.settings = settings or get_settings()
        self.pools: Dict[Tuple[str, str], str] = {}
        self.price_feeds: Dict[str, str] = {}
        self.bridge_senders: Dict[int, List[str]] = {}
        self.swap_router: Optional[str] = None

    # ========== ADMIN ==========

    @only("owner")
    def set_price_feed(self, sender: str, token: str, feed: str) -> None:
        if not self.domain.contract(feed, PriceFeed).has_asset(token):
            raise ConfigurationError(f"Price feed {feed} cannot price {token}")
        self.price_feeds[token] = feed
        logger.info(f"Price feed for {token} set to {feed}")

    @only("owner")
    def set_swap_router(self, sender: str, router: str) -> None:
        self.domain.contract(router, OracleSwapRouter)
        self.swap_router = router
        logger.info(f"Swap router set to {router}")

    @only("owner")
    def add_bridge_sender(self, sender: str, destination_domain: int, bridge_sender: str) -> int:
        """
        Register a bridge sender for a destination domain.

        Returns:
            Index of the sender within that destination's list
        """
        resolved = self.domain.contract(bridge_sender, BridgeSender)
        if resolved.destination_domain != destination_domain:
            raise ConfigurationError(
                f"Bridge sender {bridge_sender} targets domain {resolved.destination_domain}, "
                f"not {destination_domain}"
            )
        senders = self.bridge_senders.setdefault(destination_domain, [])
        senders.append(bridge_sender)
        logger.info(f"Bridge sender {bridge_sender} registered for domain {destination_domain}")
        return len(senders) - 1

    # ========== LOOKUPS ==========

    def bridge_sender(self, destination_domain: int, index: int) -> BridgeSender:
        """
        Resolve the bridge sender registered at (destination_domain, index).

        Raises:
            ConfigurationError: If no sender is registered there
        """
        senders = self.bridge_senders.get(destination_domain, [])
        if index < 0 or index >= len(senders):
            raise ConfigurationError(
                f"No bridge sender #{index} registered for domain {destination_domain}"
            )
        return self.domain.contract(senders[index], BridgeSender)

    def price_feed(self, token: str) -> PriceFeed:
        feed = self.price_feeds.get(token)
        if feed is None:
            raise ConfigurationError(f"No price feed configured for {token}")
        return self.domain.contract(feed, PriceFeed)

    def router(self) -> OracleSwapRouter:
        if self.swap_router is None:
            raise ConfigurationError("Swap router not configured")
        return self.domain.contract(self.swap_router, OracleSwapRouter)

    def price_converter(self) -> PriceConverter:
        """Converter reading this registry's feeds under the configured staleness policy."""
        return PriceConverter(
            self.domain,
            self.price_feed,
            max_price_age_seconds=self.settings.max_price_age_seconds,
        )

    def get_pool(self, collateral_asset: str, borrow_asset: str) -> Optional[LendingPool]:
        address = self.pools.get((collateral_asset, borrow_asset))
        if address is None:
            return None
        return self.domain.contract(address, LendingPool)

    def all_pools(self) -> List[LendingPool]:
        return [self.domain.contract(address, LendingPool) for address in self.pools.values()]

    # ========== POOL CREATION ==========

    @atomic
    def create_pool(self, sender: str, collateral_asset: str, borrow_asset: str, ltv: int) -> LendingPool:
        """
        Create the pool for a collateral/borrow pair.

        Args:
            sender: Caller address (pool creation is permissionless)
            collateral_asset: Collateral token address
            borrow_asset: Borrow token address
            ltv: Loan-to-value in WAD, within (0, 1e18]

        Returns:
            The new LendingPool

        Raises:
            ValidationError: Identical assets or LTV out of range
            PoolAlreadyExistsError: A pool already exists for the pair
            ConfigurationError: Unknown tokens or missing price feeds
        """
        if collateral_asset == borrow_asset:
            raise ValidationError("Collateral and borrow assets must differ")
        if not MIN_LTV < ltv <= MAX_LTV:
            raise ValidationError(f"LTV must be within (0, {MAX_LTV}], got {ltv}")
        if (collateral_asset, borrow_asset) in self.pools:
            raise PoolAlreadyExistsError(f"Pool already exists for {collateral_asset}/{borrow_asset}")

        for token in (collateral_asset, borrow_asset):
            self.domain.contract(token, Token)
            self.price_feed(token)

        config = PoolConfig(collateral_asset=collateral_asset, borrow_asset=borrow_asset, ltv=ltv)
        pool = LendingPool(self.domain, self, config, settings=self.settings)
        self.pools[config.key] = pool.address

        self._emit("PoolCreated", pool=pool.address, collateral=collateral_asset,
                   borrow=borrow_asset, ltv=ltv, creator=sender)
        logger.info(f"Created pool {pool.address} for {collateral_asset}/{borrow_asset} ltv={ltv}")
        return pool
