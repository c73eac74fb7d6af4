"""Origin leg of a cross-domain transfer: burn and dispatch."""

import logging
from typing import TYPE_CHECKING, Optional

from src.bridge.codec import encode_transfer
from src.bridge.mailbox import Mailbox
from src.bridge.paymaster import FeePaymaster
from src.chain.address import ZERO_ADDRESS
from src.chain.contract import Contract
from src.chain.guards import atomic, non_reentrant
from src.chain.token import Token
from src.core.errors import ConfigurationError, InsufficientFeeError, ZeroAmountError
from src.core.models import BridgeLeg

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class BridgeSender(Contract):
    """
    Burns tokens locally and dispatches a mint instruction to one
    destination domain.

    The burn is final once the call succeeds. Whether the matching mint
    ever happens depends only on the transport; there is no
    acknowledgement, refund or timeout path back to this contract.
    """

    def __init__(
        self,
        domain: "Domain",
        mailbox: Optional[Mailbox],
        paymaster: Optional[FeePaymaster],
        destination_domain: int,
        receiver: Optional[str],
    ):
        if destination_domain == domain.domain_id:
            raise ConfigurationError(f"Destination domain {destination_domain} is the local domain")
        if mailbox is None:
            raise ConfigurationError("Bridge sender requires a mailbox")
        if paymaster is None:
            raise ConfigurationError("Bridge sender requires a fee paymaster")
        if not receiver or receiver == ZERO_ADDRESS:
            raise ConfigurationError("Bridge sender requires a destination receiver")

        super().__init__(domain, f"bridge-sender:{destination_domain}")
        self.mailbox = mailbox
        self.paymaster = paymaster
        self.destination_domain = destination_domain
        self.receiver = receiver

    def quote_bridge_fee(self) -> int:
        """Messaging fee for one transfer payload."""
        payload_size = len(encode_transfer(ZERO_ADDRESS, 0))
        return self.paymaster.quote_fee(self.destination_domain, payload_size)

    @atomic
    @non_reentrant
    def bridge(self, sender: str, amount: int, recipient: str, token: str, value: int = 0) -> str:
        """
        Pull `amount` of `token` from the caller, burn it and dispatch a
        mint of `amount` to `recipient` on the destination domain.

        Args:
            sender: Caller; must have approved this contract for `amount`
            amount: Amount to bridge
            recipient: Beneficiary on the destination domain
            token: Token to burn (this contract needs the burner role)
            value: Native currency for the messaging fee; excess is refunded

        Returns:
            Message id of the dispatch
        """
        if amount == 0:
            raise ZeroAmountError()
        self._receive_value(sender, value)

        asset = self.domain.contract(token, Token)
        asset.transfer_from(self.address, sender, self.address, amount)
        asset.burn(self.address, amount)

        body = encode_transfer(recipient, amount)
        fee = self.paymaster.quote_fee(self.destination_domain, len(body))
        if value < fee:
            raise InsufficientFeeError(fee, value)

        message_id = self.mailbox.dispatch(self.address, self.destination_domain, self.receiver, body, value=fee)
        self._send_value(sender, value - fee)

        leg = BridgeLeg(amount=amount, recipient=recipient, destination_domain=self.destination_domain)
        self._emit("BridgeSent", message_id=message_id, token=token, amount=leg.amount,
                   recipient=leg.recipient, destination_domain=leg.destination_domain)
        logger.info(f"Burned {amount} of {token}, dispatched {message_id} to domain {self.destination_domain}")
        return message_id
