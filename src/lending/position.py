"""Per-borrower custody vault."""

import logging
from typing import TYPE_CHECKING, List

from src.chain.contract import Contract
from src.chain.guards import atomic, only
from src.chain.token import Token
from src.core.errors import (
    ConfigurationError,
    InsufficientBalanceError,
    TokenNotAvailableError,
    ZeroAmountError,
)

if TYPE_CHECKING:
    from src.chain.domain import Domain
    from src.lending.registry import PoolRegistry

logger = logging.getLogger(__name__)


class Position(Contract):
    """
    Custody vault holding one borrower's collateral and swapped assets.

    Exactly one exists per borrower per pool. Only the owning pool may
    call the mutating operations; the position trusts that pool fully.

    Besides the collateral asset, the position tracks every token it has
    received through a swap or deposit so those can later be swapped or
    used to repay.
    """

    JOURNALED = ("tracked_tokens",)

    def __init__(
        self,
        domain: "Domain",
        pool: str,
        owner: str,
        collateral_asset: str,
        borrow_asset: str,
        registry: "PoolRegistry",
    ):
        super().__init__(domain, f"position:{owner}")
        self.pool = pool
        self.owner = owner
        self.collateral_asset = collateral_asset
        self.borrow_asset = borrow_asset
        self.registry = registry
        self.tracked_tokens: List[str] = []

    # ========== READS ==========

    def balance_of(self, token: str) -> int:
        return self.domain.contract(token, Token).balance_of(self.address)

    def is_token_available(self, token: str) -> bool:
        """Collateral or a token this position has held."""
        return token == self.collateral_asset or token in self.tracked_tokens

    def balances(self) -> dict[str, int]:
        """Balance of every token the position knows about."""
        tokens = [self.collateral_asset] + [t for t in self.tracked_tokens if t != self.collateral_asset]
        return {token: self.balance_of(token) for token in tokens}

    def _track(self, token: str) -> None:
        if token != self.collateral_asset and token not in self.tracked_tokens:
            self.tracked_tokens.append(token)

    # ========== MUTATIONS (pool only) ==========

    @atomic
    @only("pool")
    def deposit(self, sender: str, token: str, amount: int) -> None:
        """
        Book tokens the pool moved into this position's custody.

        Raises:
            InsufficientBalanceError: If the position does not actually hold them
        """
        if amount == 0:
            raise ZeroAmountError()
        held = self.balance_of(token)
        if held < amount:
            raise InsufficientBalanceError(self.address, amount, held)
        self._track(token)
        self._emit("PositionDeposit", token=token, amount=amount)

    @atomic
    @only("pool")
    def withdraw(self, sender: str, token: str, amount: int, to: str) -> None:
        if amount == 0:
            raise ZeroAmountError()
        if not self.is_token_available(token):
            raise TokenNotAvailableError(token)
        self.domain.contract(token, Token).transfer(self.address, to, amount)
        self._emit("PositionWithdraw", token=token, amount=amount, to=to)

    @atomic
    @only("pool")
    def transfer_to_position(self, sender: str, token: str, amount: int, other: str) -> None:
        """Move tokens into another position of the same pool."""
        if amount == 0:
            raise ZeroAmountError()
        if not self.is_token_available(token):
            raise TokenNotAvailableError(token)
        target = self.domain.contract(other, Position)
        if target.pool != self.pool:
            raise ConfigurationError(f"Position {other} belongs to a different pool")

        self.domain.contract(token, Token).transfer(self.address, target.address, amount)
        target._track(token)
        self._emit("PositionTransfer", token=token, amount=amount, to=other)

    @atomic
    @only("pool")
    def swap(self, sender: str, token_from: str, token_to: str, amount_in: int) -> int:
        """
        Swap held tokens through the registry's swap router.

        Returns:
            Amount of token_to received
        """
        if amount_in == 0:
            raise ZeroAmountError("amount_in")
        if not self.is_token_available(token_from):
            raise TokenNotAvailableError(token_from)
        held = self.balance_of(token_from)
        if held < amount_in:
            raise InsufficientBalanceError(self.address, amount_in, held)

        router = self.registry.router()
        self.domain.contract(token_from, Token).approve(self.address, router.address, amount_in)
        amount_out = router.swap(self.address, token_from, token_to, amount_in)
        self._track(token_to)

        logger.info(f"Position {self.address} swapped {amount_in} {token_from} for {amount_out} {token_to}")
        return amount_out

    @atomic
    @only("pool")
    def settle_repayment(self, sender: str, amount: int, token: str) -> int:
        """
        Pay `amount` of the borrow asset to the pool out of this position.

        When the position's borrow-asset balance falls short, just enough of
        `token` is swapped into the borrow asset to cover the difference.
        Any swap surplus stays in the position.

        Returns:
            Amount of `token` spent on swapping (0 if no swap was needed)
        """
        if amount == 0:
            raise ZeroAmountError()

        spent = 0
        held = self.balance_of(self.borrow_asset)
        if token != self.borrow_asset and held < amount:
            if not self.is_token_available(token):
                raise TokenNotAvailableError(token)
            shortfall = amount - held
            converter = self.registry.price_converter()
            spent = converter.convert(shortfall, self.borrow_asset, token, round_up=True)
            self.swap(sender, token, self.borrow_asset, spent)
        elif token == self.borrow_asset and held < amount:
            raise InsufficientBalanceError(self.address, amount, held)

        self.domain.contract(self.borrow_asset, Token).transfer(self.address, self.pool, amount)
        self._emit("PositionRepay", token=token, amount=amount, spent=spent)
        return spent
