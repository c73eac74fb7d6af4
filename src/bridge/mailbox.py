"""Local endpoint of the cross-domain messaging service."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from src.bridge.codec import compute_message_id
from src.bridge.paymaster import FeePaymaster
from src.chain.contract import Contract
from src.chain.guards import atomic
from src.core.errors import ConfigurationError, SameDomainError, ValidationError
from src.core.models import Message

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class MessageRecipient(Contract, ABC):
    """A contract that can receive messages from its local mailbox."""

    @abstractmethod
    def handle(self, sender: str, origin_domain: int, origin_sender: str, body: bytes) -> None:
        """
        Handle a delivered message.

        Args:
            sender: Caller address; must be the local mailbox
            origin_domain: Domain the message was dispatched from
            origin_sender: Dispatching contract on the origin domain
            body: Message payload
        """
        ...


class Mailbox(Contract):
    """
    Dispatches outbound messages and delivers inbound ones.

    Outbound messages are appended to the outbox until the transport
    drains it with take_outbox(). Because the outbox is part of the domain
    state, a dispatch made by a call that later reverts disappears with it.
    Drained messages leave the journaled state, so snapshot cost tracks
    only messages not yet picked up.
    Inbound delivery is driven by the transport through process().
    """

    JOURNALED = ("nonce", "outbox", "processed")

    def __init__(self, domain: "Domain", paymaster: Optional[FeePaymaster]):
        if paymaster is None:
            raise ConfigurationError("Mailbox requires a fee paymaster")
        super().__init__(domain, "mailbox")
        self.paymaster = paymaster
        self.nonce = 0
        self.outbox: List[Message] = []
        self.processed = 0

    def quote_dispatch(self, destination_domain: int, body: bytes) -> int:
        return self.paymaster.quote_fee(destination_domain, len(body))

    def take_outbox(self) -> List[Message]:
        """Hand every undelivered outbound message to the relayer and clear the outbox."""
        if self.domain.in_transaction:
            raise ValidationError("Outbox cannot be drained inside a transaction")
        messages, self.outbox = self.outbox, []
        return messages

    @atomic
    def dispatch(
        self,
        sender: str,
        destination_domain: int,
        recipient: str,
        body: bytes,
        value: int = 0,
    ) -> str:
        """
        Submit a message for delivery to another domain.

        Args:
            sender: Dispatching contract
            destination_domain: Target domain id
            recipient: Handler address on the target domain
            body: Payload
            value: Native currency attached for the fee; excess is refunded

        Returns:
            Message id
        """
        if destination_domain == self.domain.domain_id:
            raise SameDomainError(f"Cannot dispatch to the local domain {destination_domain}")

        message_id = compute_message_id(
            self.nonce, self.domain.domain_id, sender, destination_domain, recipient, body
        )
        message = Message(
            message_id=message_id,
            nonce=self.nonce,
            origin_domain=self.domain.domain_id,
            sender=sender,
            destination_domain=destination_domain,
            recipient=recipient,
            body=body,
        )

        self._receive_value(sender, value)
        fee = self.paymaster.pay_for_message(self.address, message_id, destination_domain, message.size, value)
        self._send_value(sender, value - fee)

        self.outbox.append(message)
        self.nonce += 1
        self._emit("Dispatch", message_id=message_id, destination_domain=destination_domain,
                   recipient=recipient, sender=sender)
        logger.info(f"Dispatched {message_id} from {self.domain.domain_id} to {destination_domain}")
        return message_id

    @atomic
    def process(self, message: Message) -> None:
        """Deliver an inbound message to its recipient's handler."""
        if message.destination_domain != self.domain.domain_id:
            raise ValidationError(
                f"Message {message.message_id} is for domain {message.destination_domain}, "
                f"not {self.domain.domain_id}"
            )
        recipient = self.domain.contract(message.recipient, MessageRecipient)
        self.processed += 1
        self._emit("Process", message_id=message.message_id, origin_domain=message.origin_domain)
        recipient.handle(self.address, message.origin_domain, message.sender, message.body)
        logger.info(f"Processed {message.message_id} on {self.domain.domain_id}")
