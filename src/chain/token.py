"""Fungible token ledger."""

import logging
from typing import TYPE_CHECKING, Dict, Optional, Set, Tuple

from src.chain.contract import Contract
from src.chain.guards import only
from src.core.constants import DEFAULT_TOKEN_DECIMALS
from src.core.errors import (
    AuthorizationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    ValidationError,
)

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1


class Token(Contract):
    """
    ERC20-style fungible asset on one domain.

    Minting and burning are restricted to the owner and to accounts the
    owner granted the minter / burner role (e.g. a bridge receiver or
    sender). An allowance of MAX_UINT256 is treated as unlimited.
    """

    JOURNALED = ("balances", "allowances", "total_supply", "minters", "burners")

    def __init__(
        self,
        domain: "Domain",
        name: str,
        symbol: str,
        decimals: int = DEFAULT_TOKEN_DECIMALS,
        owner: Optional[str] = None,
    ):
        super().__init__(domain, f"token:{symbol}")
        self.name = name
        self.symbol = symbol
        self._decimals = decimals
        self.owner = owner
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[Tuple[str, str], int] = {}
        self.total_supply = 0
        self.minters: Set[str] = set()
        self.burners: Set[str] = set()

    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    # ========== TRANSFERS ==========

    def approve(self, sender: str, spender: str, amount: int) -> bool:
        _check_amount(amount)
        self.allowances[(sender, spender)] = amount
        self._emit("Approval", owner=sender, spender=spender, amount=amount)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, sender: str, owner: str, to: str, amount: int) -> bool:
        """Move owner's tokens using sender's allowance."""
        _check_amount(amount)
        allowed = self.allowance(owner, sender)
        if allowed < amount:
            raise InsufficientAllowanceError(owner, sender, amount, allowed)
        if allowed != MAX_UINT256:
            self.allowances[(owner, sender)] = allowed - amount
        self._move(owner, to, amount)
        return True

    def _move(self, frm: str, to: str, amount: int) -> None:
        _check_amount(amount)
        available = self.balance_of(frm)
        if available < amount:
            raise InsufficientBalanceError(frm, amount, available)
        self.balances[frm] = available - amount
        self.balances[to] = self.balance_of(to) + amount
        self._emit("Transfer", frm=frm, to=to, amount=amount)

    # ========== SUPPLY ==========

    def mint(self, sender: str, to: str, amount: int) -> None:
        if sender != self.owner and sender not in self.minters:
            raise AuthorizationError(sender, self.owner or "minter", "mint")
        _check_amount(amount)
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount
        self._emit("Transfer", frm=None, to=to, amount=amount)

    def burn(self, sender: str, amount: int) -> None:
        """Destroy tokens held by the sender."""
        if sender != self.owner and sender not in self.burners:
            raise AuthorizationError(sender, self.owner or "burner", "burn")
        _check_amount(amount)
        available = self.balance_of(sender)
        if available < amount:
            raise InsufficientBalanceError(sender, amount, available)
        self.balances[sender] = available - amount
        self.total_supply -= amount
        self._emit("Transfer", frm=sender, to=None, amount=amount)

    @only("owner")
    def grant_minter(self, sender: str, account: str) -> None:
        self.minters.add(account)
        logger.info(f"{self.symbol}: granted minter role to {account}")

    @only("owner")
    def grant_burner(self, sender: str, account: str) -> None:
        self.burners.add(account)
        logger.info(f"{self.symbol}: granted burner role to {account}")

    def __repr__(self) -> str:
        return f"Token({self.symbol} {self.address} @ {self.domain.domain_id})"


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or amount < 0:
        raise ValidationError(f"Invalid token amount: {amount!r}")
