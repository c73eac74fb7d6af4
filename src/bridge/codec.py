"""ABI encoding of bridge payloads and message ids."""

from typing import Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from src.chain.address import normalize_address
from src.core.errors import ValidationError

TRANSFER_PAYLOAD_TYPES = ["address", "uint256"]
MESSAGE_TYPES = ["uint32", "uint32", "address", "uint32", "address", "bytes"]


def encode_transfer(recipient: str, amount: int) -> bytes:
    """Encode a (recipient, amount) bridge payload."""
    return encode(TRANSFER_PAYLOAD_TYPES, [recipient, amount])


def decode_transfer(body: bytes) -> Tuple[str, int]:
    """
    Decode a (recipient, amount) bridge payload.

    Raises:
        ValidationError: If the payload is not a valid transfer encoding
    """
    try:
        recipient, amount = decode(TRANSFER_PAYLOAD_TYPES, body)
    except DecodingError as e:
        raise ValidationError(f"Malformed transfer payload ({len(body)} bytes): {e}") from e
    return normalize_address(recipient), amount


def compute_message_id(
    nonce: int,
    origin_domain: int,
    sender: str,
    destination_domain: int,
    recipient: str,
    body: bytes,
) -> str:
    """keccak256 over the ABI-encoded message envelope."""
    envelope = encode(
        MESSAGE_TYPES,
        [nonce, origin_domain, sender, destination_domain, recipient, body],
    )
    return "0x" + bytes(Web3.keccak(envelope)).hex()
