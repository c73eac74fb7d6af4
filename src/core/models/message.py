"""Cross-domain message models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BridgeLeg:
    """
    One cross-domain transfer as seen by the sender.

    Never persisted. Its durable traces are the local burn and the
    message id of the dispatch that carries it.
    """

    amount: int
    recipient: str
    destination_domain: int


@dataclass(frozen=True)
class Message:
    """A dispatched message as carried by the messaging transport."""

    message_id: str
    nonce: int
    origin_domain: int
    sender: str  # Address of the dispatching contract on the origin domain
    destination_domain: int
    recipient: str  # Address of the handler on the destination domain
    body: bytes

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.body)
