"""In-memory stand-in for the external messaging transport."""

import logging
import random
from typing import Dict, List, Optional, Set

from src.bridge.mailbox import Mailbox
from src.core.errors import ConfigurationError, LendingError
from src.core.models import Message

logger = logging.getLogger(__name__)


class InMemoryTransport:
    """
    Relays messages between mailboxes on different domains.

    Delivery is at-least-once and unordered: messages are collected from
    the origin mailboxes' outboxes into the transport's own store, can
    be delivered in any order, and can be delivered again with
    redeliver(). Nothing is acknowledged back to the origin domain. A
    message whose delivery fails stays pending and can be retried; a
    dropped message is never delivered, which leaves its burned value
    unminted.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng
        self.mailboxes: Dict[int, Mailbox] = {}
        self.messages: Dict[str, Message] = {}
        self.deliveries: Dict[str, int] = {}
        self.dropped: Set[str] = set()

    def connect(self, mailbox: Mailbox) -> None:
        domain_id = mailbox.domain.domain_id
        if domain_id in self.mailboxes:
            raise ConfigurationError(f"A mailbox is already connected for domain {domain_id}")
        self.mailboxes[domain_id] = mailbox
        logger.debug(f"Connected mailbox {mailbox.address} for domain {domain_id}")

    def collect(self) -> int:
        """Pick up newly dispatched messages from every connected outbox."""
        collected = 0
        for mailbox in self.mailboxes.values():
            for message in mailbox.take_outbox():
                self.messages[message.message_id] = message
                collected += 1
        if collected:
            logger.debug(f"Collected {collected} messages")
        return collected

    def dispatched(self) -> List[Message]:
        """Every message ever dispatched through a connected mailbox."""
        self.collect()
        return list(self.messages.values())

    def pending(self) -> List[Message]:
        """Dispatched messages not yet delivered (burned, not yet minted)."""
        return [
            m for m in self.dispatched()
            if m.message_id not in self.deliveries and m.message_id not in self.dropped
        ]

    def find(self, message_id: str) -> Message:
        for message in self.dispatched():
            if message.message_id == message_id:
                return message
        raise LendingError(f"Unknown message {message_id}")

    def deliver(self, message_id: str) -> None:
        """
        Deliver one message to its destination mailbox.

        Raises whatever the destination handler raised; the message then
        stays pending.
        """
        message = self.find(message_id)
        destination = self.mailboxes.get(message.destination_domain)
        if destination is None:
            raise ConfigurationError(f"No mailbox connected for domain {message.destination_domain}")

        destination.process(message)
        self.deliveries[message_id] = self.deliveries.get(message_id, 0) + 1

    def redeliver(self, message_id: str) -> None:
        """Deliver an already delivered message again."""
        logger.warning(f"Redelivering {message_id}")
        self.deliver(message_id)

    def drop(self, message_id: str) -> None:
        """Lose a message in transit."""
        self.find(message_id)
        self.dropped.add(message_id)
        logger.warning(f"Dropped {message_id}; its value stays burned on the origin domain")

    def deliver_all(self) -> int:
        """
        Deliver every pending message, shuffled when an rng is set.

        Failed deliveries are logged and left pending.

        Returns:
            Number of messages delivered
        """
        pending = self.pending()
        if self.rng is not None:
            self.rng.shuffle(pending)

        delivered = 0
        for message in pending:
            try:
                self.deliver(message.message_id)
                delivered += 1
            except LendingError as e:
                logger.error(f"Delivery of {message.message_id} failed: {e}")
        return delivered

    def delivery_count(self, message_id: str) -> int:
        return self.deliveries.get(message_id, 0)
