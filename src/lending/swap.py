"""Swap execution at oracle prices."""

import logging
from typing import TYPE_CHECKING

from src.chain.contract import Contract
from src.chain.guards import atomic, non_reentrant
from src.chain.token import Token
from src.core.errors import (
    InsufficientLiquidityError,
    SlippageError,
    ValidationError,
    ZeroAmountError,
)
from src.oracles.converter import PriceConverter

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class OracleSwapRouter(Contract):
    """
    Swaps between tokens at the oracle price, paying out of its own reserves.

    Stands in for a DEX router. Reserves are funded by transferring tokens
    to the router's address.
    """

    def __init__(self, domain: "Domain", converter: PriceConverter):
        super().__init__(domain, "swap-router")
        self.converter = converter

    def reserve_of(self, token: str) -> int:
        return self.domain.contract(token, Token).balance_of(self.address)

    def quote(self, token_in: str, token_out: str, amount_in: int) -> int:
        """Output amount for a swap, before reserve checks."""
        return self.converter.convert(amount_in, token_in, token_out)

    @atomic
    @non_reentrant
    def swap(
        self,
        sender: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> int:
        """
        Pull amount_in of token_in from sender and pay out token_out.

        Raises:
            SlippageError: If the output is below min_amount_out
            InsufficientLiquidityError: If reserves cannot cover the output
        """
        if amount_in == 0:
            raise ZeroAmountError("amount_in")
        if token_in == token_out:
            raise ValidationError("Cannot swap a token for itself")

        amount_out = self.quote(token_in, token_out, amount_in)
        if amount_out < min_amount_out:
            raise SlippageError(f"Swap output {amount_out} below minimum {min_amount_out}")
        if amount_out > self.reserve_of(token_out):
            raise InsufficientLiquidityError(
                f"Router reserve of {token_out} is {self.reserve_of(token_out)}, need {amount_out}"
            )

        self.domain.contract(token_in, Token).transfer_from(self.address, sender, self.address, amount_in)
        self.domain.contract(token_out, Token).transfer(self.address, sender, amount_out)

        self._emit("Swap", sender=sender, token_in=token_in, token_out=token_out,
                   amount_in=amount_in, amount_out=amount_out)
        logger.debug(f"Swapped {amount_in} {token_in} -> {amount_out} {token_out} for {sender}")
        return amount_out
