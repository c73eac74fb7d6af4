"""Destination leg of a cross-domain transfer: mint on delivery."""

import logging
from typing import TYPE_CHECKING, Optional

from src.bridge.codec import decode_transfer
from src.bridge.mailbox import MessageRecipient
from src.chain.guards import atomic, only
from src.chain.token import Token
from src.core.errors import ConfigurationError

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class BridgeReceiver(MessageRecipient):
    """
    Mints the local equivalent token for each delivered transfer.

    Only the configured local mailbox may call handle(). There is no
    replay protection here: every delivery of a message mints again.
    """

    def __init__(self, domain: "Domain", mailbox: Optional[str], token: Optional[str]):
        if not mailbox:
            raise ConfigurationError("Bridge receiver requires a mailbox")
        if not token:
            raise ConfigurationError("Bridge receiver requires a token")
        super().__init__(domain, "bridge-receiver")
        self.mailbox = mailbox
        self.token = token

    @atomic
    @only("mailbox")
    def handle(self, sender: str, origin_domain: int, origin_sender: str, body: bytes) -> None:
        recipient, amount = decode_transfer(body)
        self.domain.contract(self.token, Token).mint(self.address, recipient, amount)
        self._emit("BridgeReceived", origin_domain=origin_domain, origin_sender=origin_sender,
                   recipient=recipient, amount=amount)
        logger.info(f"Minted {amount} to {recipient} from domain {origin_domain}")
