"""Amount conversion between assets through price feeds."""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from src.chain.token import Token
from src.core.errors import InvalidPriceError, StalePriceError
from src.core.models import PriceRecord
from src.oracles.base import PriceFeed

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class PriceConverter:
    """
    Converts token amounts into other tokens at oracle prices.

    Conversion is done in one integer expression and floors once at the
    end:

        out = amount * p_from * 10**(feed_dec_to + dec_to)
              // (p_to * 10**(feed_dec_from + dec_from))
    """

    def __init__(
        self,
        domain: "Domain",
        feed_for: Callable[[str], PriceFeed],
        max_price_age_seconds: Optional[int] = None,
    ):
        """
        Args:
            domain: Domain the tokens live on (for decimals and time)
            feed_for: Resolves a token address to its price feed
            max_price_age_seconds: Reject older prices (None disables the check)
        """
        self.domain = domain
        self.feed_for = feed_for
        self.max_price_age_seconds = max_price_age_seconds

    def price_of(self, token: str) -> PriceRecord:
        """Latest price for a token after the staleness policy is applied."""
        record = self.feed_for(token).get_price(token)
        if record.price <= 0:
            raise InvalidPriceError(f"Non-positive price for {token}")
        if self.max_price_age_seconds is not None:
            age = record.age(self.domain.now)
            if age > self.max_price_age_seconds:
                logger.warning(f"Stale price for {token}: {age}s old")
                raise StalePriceError(
                    f"Price for {token} is {age}s old, max {self.max_price_age_seconds}s"
                )
        return record

    def convert(self, amount: int, token_from: str, token_to: str, round_up: bool = False) -> int:
        """
        Value of `amount` of token_from expressed in token_to units.

        Args:
            amount: Amount in token_from native precision
            token_from: Source token address
            token_to: Target token address
            round_up: Round the result up instead of down

        Returns:
            Amount in token_to native precision
        """
        if amount == 0:
            return 0
        if token_from == token_to:
            return amount

        feed_from = self.feed_for(token_from)
        feed_to = self.feed_for(token_to)
        price_from = self.price_of(token_from).price
        price_to = self.price_of(token_to).price
        decimals_from = self.domain.contract(token_from, Token).decimals()
        decimals_to = self.domain.contract(token_to, Token).decimals()

        numerator = amount * price_from * 10 ** (feed_to.decimals() + decimals_to)
        denominator = price_to * 10 ** (feed_from.decimals() + decimals_from)
        if round_up:
            return -(-numerator // denominator)
        return numerator // denominator
