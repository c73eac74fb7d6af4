"""Protocol treasury collecting borrow fees."""

import logging
from typing import TYPE_CHECKING, Optional

from src.chain.guards import atomic, non_reentrant, only
from src.chain.contract import Contract
from src.chain.token import Token
from src.core.errors import ZeroAmountError

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class ProtocolTreasury(Contract):
    """Holds protocol fees; only the owner can move them out."""

    def __init__(self, domain: "Domain", owner: str):
        super().__init__(domain, "treasury")
        self.owner = owner

    def balance_of(self, token: str) -> int:
        return self.domain.contract(token, Token).balance_of(self.address)

    @atomic
    @non_reentrant
    @only("owner")
    def withdraw(self, sender: str, token: str, amount: int, to: Optional[str] = None) -> None:
        if amount == 0:
            raise ZeroAmountError()
        recipient = to or sender
        self.domain.contract(token, Token).transfer(self.address, recipient, amount)
        self._emit("TreasuryWithdraw", token=token, amount=amount, to=recipient)
        logger.info(f"Treasury withdrew {amount} of {token} to {recipient}")
