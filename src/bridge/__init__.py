"""Cross-domain settlement: messaging endpoints and the bridge legs."""

from .codec import compute_message_id, decode_transfer, encode_transfer
from .paymaster import FeePaymaster
from .mailbox import Mailbox, MessageRecipient
from .transport import InMemoryTransport
from .sender import BridgeSender
from .receiver import BridgeReceiver

__all__ = [
    "compute_message_id",
    "decode_transfer",
    "encode_transfer",
    "FeePaymaster",
    "Mailbox",
    "MessageRecipient",
    "InMemoryTransport",
    "BridgeSender",
    "BridgeReceiver",
]
