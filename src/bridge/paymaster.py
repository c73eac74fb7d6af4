"""Messaging fee quoting and collection."""

import logging
from typing import TYPE_CHECKING, Dict, Optional

from config.settings import Settings, get_settings
from src.chain.contract import Contract
from src.chain.guards import atomic, only
from src.core.errors import ConfigurationError, InsufficientFeeError

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class FeePaymaster(Contract):
    """
    Prices cross-domain messages and collects their fees in native currency.

    fee = gas_price[destination] * (gas_limit + gas_per_payload_byte * payload_size)

    Destinations must be enabled by the owner; quoting an unknown
    destination fails.
    """

    JOURNALED = ("payments",)

    def __init__(self, domain: "Domain", owner: str, settings: Optional[Settings] = None):
        super().__init__(domain, "paymaster")
        self.owner = owner
        self.settings = settings or get_settings()
        self.gas_prices: Dict[int, int] = {}
        self.payments: Dict[str, int] = {}

    @only("owner")
    def set_gas_price(self, sender: str, destination_domain: int, gas_price: Optional[int] = None) -> None:
        """Enable a destination, optionally overriding the default gas price."""
        price = self.settings.default_gas_price if gas_price is None else gas_price
        self.gas_prices[destination_domain] = price
        logger.info(f"Gas price for domain {destination_domain} set to {price}")

    def quote_fee(self, destination_domain: int, payload_size: int) -> int:
        """
        Fee for delivering a payload of payload_size bytes.

        Raises:
            ConfigurationError: If the destination is not enabled
        """
        gas_price = self.gas_prices.get(destination_domain)
        if gas_price is None:
            raise ConfigurationError(f"No gas price configured for domain {destination_domain}")
        gas = self.settings.bridge_gas_limit + self.settings.gas_per_payload_byte * payload_size
        return gas_price * gas

    @atomic
    def pay_for_message(
        self,
        sender: str,
        message_id: str,
        destination_domain: int,
        payload_size: int,
        value: int,
    ) -> int:
        """
        Collect the fee for a message from the sender.

        Only the quoted fee is taken; the caller keeps any excess value.

        Returns:
            Fee collected
        """
        fee = self.quote_fee(destination_domain, payload_size)
        if value < fee:
            raise InsufficientFeeError(fee, value)
        self._receive_value(sender, fee)
        self.payments[message_id] = self.payments.get(message_id, 0) + fee
        self._emit("GasPayment", message_id=message_id, destination_domain=destination_domain, fee=fee)
        return fee

    @atomic
    @only("owner")
    def claim(self, sender: str, to: Optional[str] = None) -> int:
        """Send collected fees to the owner (or `to`)."""
        balance = self.domain.native.balance_of(self.address)
        self._send_value(to or sender, balance)
        return balance
