"""Lending pool ledger: share accounting, interest, borrowing and repayment."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Optional

from config.settings import Settings
from src.chain.contract import Contract
from src.chain.guards import atomic, non_reentrant
from src.chain.token import Token
from src.core.constants import WAD
from src.core.errors import (
    InsufficientBalanceError,
    InsufficientFeeError,
    InsufficientLiquidityError,
    InsufficientSharesError,
    TokenNotAvailableError,
    ZeroAmountError,
)
from src.core.models import PoolConfig, PoolState
from src.lending.health import SolvencyChecker
from src.lending.position import Position

if TYPE_CHECKING:
    from src.chain.domain import Domain
    from src.lending.registry import PoolRegistry

logger = logging.getLogger(__name__)


class LendingPool(Contract):
    """
    Ledger for one collateral/borrow asset pair.

    Suppliers deposit the borrow asset and receive supply shares. Borrowers
    lock collateral in a per-borrower Position and draw the borrow asset
    against it, either paid out locally or bridged to another domain.

    All share/asset conversions floor, which favours existing holders.
    Every mutating entry point accrues interest first and runs as a
    single domain transaction: any failed check reverts the whole call.
    """

    JOURNALED = ("state", "user_supply_shares", "user_borrow_shares", "positions")

    def __init__(
        self,
        domain: "Domain",
        registry: "PoolRegistry",
        config: PoolConfig,
        settings: Optional[Settings] = None,
    ):
        super().__init__(domain, f"pool:{config.collateral_asset}:{config.borrow_asset}")
        self.registry = registry
        self.config = config
        self.settings = settings or registry.settings
        self.state = PoolState(last_accrued=domain.now)
        self.user_supply_shares: Dict[str, int] = {}
        self.user_borrow_shares: Dict[str, int] = {}
        self.positions: Dict[str, str] = {}

    # ========== PROPERTIES ==========

    @property
    def collateral_asset(self) -> str:
        return self.config.collateral_asset

    @property
    def borrow_asset(self) -> str:
        return self.config.borrow_asset

    @property
    def ltv(self) -> int:
        return self.config.ltv

    @property
    def collateral_token(self) -> Token:
        return self.domain.contract(self.config.collateral_asset, Token)

    @property
    def borrow_token(self) -> Token:
        return self.domain.contract(self.config.borrow_asset, Token)

    # ========== SHARE MATH ==========

    def to_supply_shares(self, assets: int) -> int:
        if self.state.total_supply_shares == 0:
            return assets
        return assets * self.state.total_supply_shares // self.state.total_supply_assets

    def to_supply_assets(self, shares: int) -> int:
        if self.state.total_supply_shares == 0:
            return 0
        return shares * self.state.total_supply_assets // self.state.total_supply_shares

    def to_borrow_shares(self, assets: int) -> int:
        if self.state.total_borrow_shares == 0:
            return assets
        return assets * self.state.total_borrow_shares // self.state.total_borrow_assets

    def to_borrow_assets(self, shares: int) -> int:
        if self.state.total_borrow_shares == 0:
            return 0
        return shares * self.state.total_borrow_assets // self.state.total_borrow_shares

    def supply_shares_of(self, user: str) -> int:
        return self.user_supply_shares.get(user, 0)

    def borrow_shares_of(self, user: str) -> int:
        return self.user_borrow_shares.get(user, 0)

    def debt_of(self, user: str) -> int:
        """Current debt of a user in borrow-asset units."""
        return self.to_borrow_assets(self.borrow_shares_of(user))

    def protocol_fee(self, amount: int) -> int:
        return amount * self.settings.protocol_fee // WAD

    # ========== POSITIONS ==========

    def position_of(self, user: str) -> Optional[Position]:
        address = self.positions.get(user)
        if address is None:
            return None
        return self.domain.contract(address, Position)

    @atomic
    def create_position(self, sender: str) -> Position:
        """Create the sender's position, or return the existing one."""
        return self._get_or_create_position(sender)

    def _get_or_create_position(self, user: str) -> Position:
        existing = self.position_of(user)
        if existing is not None:
            return existing

        position = Position(
            self.domain,
            pool=self.address,
            owner=user,
            collateral_asset=self.collateral_asset,
            borrow_asset=self.borrow_asset,
            registry=self.registry,
        )
        self.positions[user] = position.address
        self._emit("PositionCreated", user=user, position=position.address)
        logger.info(f"Created position {position.address} for {user}")
        return position

    # ========== INTEREST ==========

    @atomic
    def accrue_interest(self) -> int:
        """
        Apply simple interest for the time elapsed since the last accrual.

        interest = (total_borrow * rate% / 100) * elapsed / seconds_per_year

        The same amount is added to total supply and total borrow assets.

        Returns:
            Interest accrued by this call (0 when no time has passed)
        """
        return self._accrue()

    def _accrue(self) -> int:
        now = self.domain.now
        elapsed = now - self.state.last_accrued
        if elapsed <= 0:
            return 0

        interest_per_year = self.state.total_borrow_assets * self.settings.interest_rate_percent // 100
        interest = interest_per_year * elapsed // self.settings.seconds_per_year

        self.state.total_supply_assets += interest
        self.state.total_borrow_assets += interest
        self.state.last_accrued = now

        if interest:
            self._emit("InterestAccrued", interest=interest, elapsed=elapsed)
            logger.debug(f"Pool {self.address} accrued {interest} over {elapsed}s")
        return interest

    # ========== SUPPLY ==========

    @atomic
    @non_reentrant
    def supply_liquidity(self, sender: str, amount: int) -> int:
        """
        Deposit the borrow asset and receive supply shares.

        Returns:
            Shares minted
        """
        if amount == 0:
            raise ZeroAmountError()
        self._accrue()

        shares = self.to_supply_shares(amount)
        self.user_supply_shares[sender] = self.supply_shares_of(sender) + shares
        self.state.total_supply_shares += shares
        self.state.total_supply_assets += amount

        self.borrow_token.transfer_from(self.address, sender, self.address, amount)

        self._emit("SupplyLiquidity", user=sender, amount=amount, shares=shares)
        logger.info(f"{sender} supplied {amount} for {shares} shares")
        return shares

    @atomic
    @non_reentrant
    def withdraw_liquidity(self, sender: str, shares: int) -> int:
        """
        Redeem supply shares for the borrow asset.

        Returns:
            Assets paid out

        Raises:
            InsufficientSharesError: If shares exceed the sender's balance
            InsufficientLiquidityError: If outstanding debt would exceed remaining supply
        """
        if shares == 0:
            raise ZeroAmountError("shares")
        balance = self.supply_shares_of(sender)
        if shares > balance:
            raise InsufficientSharesError(shares, balance)
        self._accrue()

        amount = self.to_supply_assets(shares)
        self.user_supply_shares[sender] = balance - shares
        self.state.total_supply_shares -= shares
        self.state.total_supply_assets -= amount

        if self.state.total_supply_assets < self.state.total_borrow_assets:
            raise InsufficientLiquidityError(
                f"Withdrawal of {amount} would leave supply {self.state.total_supply_assets} "
                f"below debt {self.state.total_borrow_assets}"
            )

        self.borrow_token.transfer(self.address, sender, amount)

        self._emit("WithdrawLiquidity", user=sender, amount=amount, shares=shares)
        logger.info(f"{sender} withdrew {amount} for {shares} shares")
        return amount

    # ========== COLLATERAL ==========

    @atomic
    @non_reentrant
    def supply_collateral(self, sender: str, amount: int) -> None:
        """Move collateral from the sender into their position."""
        if amount == 0:
            raise ZeroAmountError()
        self._accrue()

        position = self._get_or_create_position(sender)
        self.collateral_token.transfer_from(self.address, sender, position.address, amount)
        position.deposit(self.address, self.collateral_asset, amount)

        self._emit("SupplyCollateral", user=sender, amount=amount)
        logger.info(f"{sender} supplied {amount} collateral")

    @atomic
    @non_reentrant
    def withdraw_collateral(self, sender: str, amount: int) -> None:
        """
        Move collateral from the sender's position back to the sender.

        The solvency check runs after the funds have left the position.
        """
        if amount == 0:
            raise ZeroAmountError()
        position = self.position_of(sender)
        if position is None:
            raise InsufficientBalanceError(sender, amount, 0)
        held = position.balance_of(self.collateral_asset)
        if held < amount:
            raise InsufficientBalanceError(position.address, amount, held)
        self._accrue()

        position.withdraw(self.address, self.collateral_asset, amount, sender)

        if self.borrow_shares_of(sender) > 0:
            self._check_solvency(sender)

        self._emit("WithdrawCollateral", user=sender, amount=amount)
        logger.info(f"{sender} withdrew {amount} collateral")

    # ========== BORROW ==========

    @atomic
    @non_reentrant
    def borrow_debt(
        self,
        sender: str,
        amount: int,
        destination_domain: int,
        bridge_sender_index: int = 0,
        value: int = 0,
    ) -> Optional[str]:
        """
        Borrow against collateral, paid out locally or on another domain.

        Args:
            sender: Borrower address
            amount: Borrow-asset amount; the protocol fee is taken out of it
            destination_domain: Where the borrowed funds are delivered
            bridge_sender_index: Which registered bridge sender to use
            value: Native currency attached to pay the messaging fee

        Returns:
            Message id of the bridge dispatch, or None for a local borrow

        Raises:
            InsufficientLiquidityError: If total debt would exceed total supply
            SolvencyError: If the borrower's collateral cannot cover the new debt
            InsufficientFeeError: If value does not cover the messaging fee
        """
        if amount == 0:
            raise ZeroAmountError()
        self._receive_value(sender, value)
        self._accrue()

        self._get_or_create_position(sender)
        shares = self.to_borrow_shares(amount)
        if shares == 0:
            raise ZeroAmountError("shares")
        self.user_borrow_shares[sender] = self.borrow_shares_of(sender) + shares
        self.state.total_borrow_shares += shares
        self.state.total_borrow_assets += amount

        fee = self.protocol_fee(amount)
        if self.state.total_borrow_assets > self.state.total_supply_assets:
            raise InsufficientLiquidityError(
                f"Borrow of {amount} exceeds available liquidity "
                f"({self.state.total_borrow_assets} > {self.state.total_supply_assets})"
            )
        self._check_solvency(sender)

        net = amount - fee
        message_id = None
        if destination_domain == self.domain.domain_id:
            self.borrow_token.transfer(self.address, sender, net)
            self._send_value(sender, value)
        else:
            bridge = self.registry.bridge_sender(destination_domain, bridge_sender_index)
            quote = bridge.quote_bridge_fee()
            if value < quote:
                raise InsufficientFeeError(quote, value)
            self.borrow_token.approve(self.address, bridge.address, net)
            message_id = bridge.bridge(self.address, net, sender, self.borrow_asset, value=quote)
            self._send_value(sender, value - quote)

        if fee:
            self.borrow_token.transfer(self.address, self.registry.treasury, fee)

        self._emit("BorrowDebt", user=sender, amount=amount, shares=shares, fee=fee,
                   destination_domain=destination_domain, message_id=message_id)
        logger.info(
            f"{sender} borrowed {amount} (fee {fee}) to domain {destination_domain}"
            + (f", message {message_id}" if message_id else "")
        )
        return message_id

    def quote_borrow_fee(self, destination_domain: int, bridge_sender_index: int = 0) -> int:
        """Native value to attach to borrow_debt for a given destination."""
        if destination_domain == self.domain.domain_id:
            return 0
        return self.registry.bridge_sender(destination_domain, bridge_sender_index).quote_bridge_fee()

    # ========== REPAY ==========

    @atomic
    @non_reentrant
    def repay_with_selected_token(
        self,
        sender: str,
        shares: int,
        token: str,
        from_position: bool = False,
    ) -> int:
        """
        Burn borrow shares and collect the matching debt.

        If token is the borrow asset and from_position is False, funds are
        pulled from the sender. Otherwise the sender's position settles the
        debt, swapping token into the borrow asset when needed. The ledger
        is decremented before collection; a failed collection reverts it.

        Returns:
            Borrow-asset amount repaid
        """
        if shares == 0:
            raise ZeroAmountError("shares")
        balance = self.borrow_shares_of(sender)
        if shares > balance:
            raise InsufficientSharesError(shares, balance)
        self._accrue()

        amount = self.to_borrow_assets(shares)
        self.user_borrow_shares[sender] = balance - shares
        self.state.total_borrow_shares -= shares
        self.state.total_borrow_assets -= amount

        if token == self.borrow_asset and not from_position:
            self.borrow_token.transfer_from(self.address, sender, self.address, amount)
        else:
            position = self.position_of(sender)
            if position is None:
                raise TokenNotAvailableError(token)
            position.settle_repayment(self.address, amount, token)

        self._emit("RepayDebt", user=sender, amount=amount, shares=shares, token=token,
                   from_position=from_position)
        logger.info(f"{sender} repaid {amount} ({shares} shares) using {token}")
        return amount

    # ========== POSITION SWAPS ==========

    @atomic
    @non_reentrant
    def swap_token_by_position(self, sender: str, token_from: str, token_to: str, amount_in: int) -> int:
        """
        Swap tokens held in the sender's position.

        Returns:
            Amount of token_to received by the position
        """
        if amount_in == 0:
            raise ZeroAmountError("amount_in")
        position = self.position_of(sender)
        if position is None or not position.is_token_available(token_from):
            raise TokenNotAvailableError(token_from)
        self._accrue()

        amount_out = position.swap(self.address, token_from, token_to, amount_in)
        if token_from == self.collateral_asset and self.borrow_shares_of(sender) > 0:
            self._check_solvency(sender)

        self._emit("SwapByPosition", user=sender, token_from=token_from, token_to=token_to,
                   amount_in=amount_in, amount_out=amount_out)
        return amount_out

    @atomic
    @non_reentrant
    def transfer_to_position(self, sender: str, token: str, amount: int, recipient: str) -> None:
        """
        Move tokens from the sender's position into the recipient's position.

        The recipient's position is created if needed. Moving collateral
        away is solvency-checked like a collateral withdrawal.
        """
        if amount == 0:
            raise ZeroAmountError()
        position = self.position_of(sender)
        if position is None or not position.is_token_available(token):
            raise TokenNotAvailableError(token)
        self._accrue()

        target = self._get_or_create_position(recipient)
        position.transfer_to_position(self.address, token, amount, target.address)
        if token == self.collateral_asset and self.borrow_shares_of(sender) > 0:
            self._check_solvency(sender)

        self._emit("TransferToPosition", user=sender, recipient=recipient, token=token, amount=amount)
        logger.info(f"{sender} moved {amount} of {token} to the position of {recipient}")

    # ========== HEALTH ==========

    def _check_solvency(self, user: str) -> None:
        position = self._get_or_create_position(user)
        SolvencyChecker.check(
            borrow_asset=self.borrow_asset,
            collateral_asset=self.collateral_asset,
            converter=self.registry.price_converter(),
            position=position,
            ltv=self.ltv,
            total_borrow_assets=self.state.total_borrow_assets,
            total_borrow_shares=self.state.total_borrow_shares,
            borrow_shares=self.borrow_shares_of(user),
        )

    def health_factor(self, user: str) -> Decimal:
        """Current health factor of a user (999 when they have no debt)."""
        debt = self.debt_of(user)
        position = self.position_of(user)
        if position is None:
            collateral_value = 0
        else:
            collateral_value = SolvencyChecker.collateral_value(
                position, self.collateral_asset, self.borrow_asset, self.registry.price_converter()
            )
        return SolvencyChecker.health_factor(debt, collateral_value, self.ltv)

    def max_borrow(self, user: str) -> int:
        """Additional borrow-asset amount the user could draw right now."""
        position = self.position_of(user)
        if position is None:
            return 0
        collateral_value = SolvencyChecker.collateral_value(
            position, self.collateral_asset, self.borrow_asset, self.registry.price_converter()
        )
        headroom = SolvencyChecker.max_borrow(collateral_value, self.ltv) - self.debt_of(user)
        return max(0, min(headroom, self.state.available_liquidity))
