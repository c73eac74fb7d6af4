"""Pool configuration and ledger state models."""

from dataclasses import dataclass
from decimal import Decimal

from src.core.constants import WAD


@dataclass(frozen=True)
class PoolConfig:
    """Immutable parameters of a lending pool, fixed at creation."""

    collateral_asset: str  # Collateral token address
    borrow_asset: str  # Borrow (loan) token address
    ltv: int  # Max borrow as a fraction of collateral value, WAD based

    @property
    def ltv_ratio(self) -> Decimal:
        """LTV as a plain ratio (0.75 for 75%)."""
        return Decimal(self.ltv) / Decimal(WAD)

    @property
    def key(self) -> tuple[str, str]:
        """Registry key for this pool."""
        return (self.collateral_asset, self.borrow_asset)


@dataclass
class PoolState:
    """Aggregate supply and debt accounting of a lending pool."""

    total_supply_assets: int = 0
    total_supply_shares: int = 0
    total_borrow_assets: int = 0
    total_borrow_shares: int = 0
    last_accrued: int = 0  # Unix timestamp of last interest application

    @property
    def utilization(self) -> Decimal:
        """Calculate current utilization rate."""
        if self.total_supply_assets == 0:
            return Decimal("0")
        return Decimal(self.total_borrow_assets) / Decimal(self.total_supply_assets)

    @property
    def available_liquidity(self) -> int:
        """Borrow asset still available to draw."""
        return self.total_supply_assets - self.total_borrow_assets

    @property
    def supply_share_price(self) -> Decimal:
        """Assets redeemable per supply share (1 for an empty pool)."""
        if self.total_supply_shares == 0:
            return Decimal("1")
        return Decimal(self.total_supply_assets) / Decimal(self.total_supply_shares)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "total_supply_assets": str(self.total_supply_assets),
            "total_supply_shares": str(self.total_supply_shares),
            "total_borrow_assets": str(self.total_borrow_assets),
            "total_borrow_shares": str(self.total_borrow_shares),
            "last_accrued": self.last_accrued,
            "utilization": str(self.utilization),
        }
