"""Solvency ("health") check for borrower positions."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from src.core.constants import WAD
from src.core.errors import SolvencyError
from src.oracles.converter import PriceConverter

if TYPE_CHECKING:
    from src.lending.position import Position

logger = logging.getLogger(__name__)

NO_DEBT_HEALTH_FACTOR = Decimal("999")


class SolvencyChecker:
    """
    Read-only solvency evaluation for a borrower.

    Values are expressed in borrow-asset units:
    - debt = borrower's proportional share of total borrow assets
    - collateral value = position's collateral balance priced in the borrow asset

    A borrower is solvent while debt <= collateral_value * ltv / WAD.
    Nothing is cached; every call reads current balances and prices.
    """

    @staticmethod
    def debt_assets(
        borrow_shares: int,
        total_borrow_assets: int,
        total_borrow_shares: int,
    ) -> int:
        """
        Convert borrow shares to debt in borrow-asset units (floor).

        Args:
            borrow_shares: Borrower's borrow shares
            total_borrow_assets: Pool-wide debt
            total_borrow_shares: Pool-wide borrow shares

        Returns:
            Borrower's debt
        """
        if total_borrow_shares == 0:
            return 0
        return borrow_shares * total_borrow_assets // total_borrow_shares

    @staticmethod
    def collateral_value(
        position: "Position",
        collateral_asset: str,
        borrow_asset: str,
        converter: PriceConverter,
    ) -> int:
        """Value of the position's collateral in borrow-asset units."""
        return converter.convert(position.balance_of(collateral_asset), collateral_asset, borrow_asset)

    @staticmethod
    def max_borrow(collateral_value: int, ltv: int) -> int:
        """Largest debt the collateral supports at the given WAD LTV."""
        return collateral_value * ltv // WAD

    @staticmethod
    def health_factor(debt: int, collateral_value: int, ltv: int) -> Decimal:
        """
        HF = (Collateral Value * LTV) / Debt

        Returns:
            Health factor (< 1.0 means the position is over its LTV)
        """
        if debt == 0:
            return NO_DEBT_HEALTH_FACTOR
        return (Decimal(collateral_value) * Decimal(ltv) / Decimal(WAD)) / Decimal(debt)

    @classmethod
    def check(
        cls,
        *,
        borrow_asset: str,
        collateral_asset: str,
        converter: PriceConverter,
        position: "Position",
        ltv: int,
        total_borrow_assets: int,
        total_borrow_shares: int,
        borrow_shares: int,
    ) -> None:
        """
        Abort when the borrower's debt exceeds what their collateral supports.

        Raises:
            SolvencyError: If debt > collateral_value * ltv / WAD
        """
        debt = cls.debt_assets(borrow_shares, total_borrow_assets, total_borrow_shares)
        collateral_value = cls.collateral_value(position, collateral_asset, borrow_asset, converter)
        max_debt = cls.max_borrow(collateral_value, ltv)

        if debt > max_debt:
            logger.warning(
                f"Solvency check failed for position {position.address}: debt={debt} max={max_debt}"
            )
            raise SolvencyError(debt, max_debt)
