"""Deterministic address helpers."""

from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def make_address(label: str) -> str:
    """
    Derive a checksummed 20-byte address from a label.

    The last 20 bytes of keccak256(label) are used, the same way an
    account address is derived from a public key hash.

    Args:
        label: Any string, e.g. "alice" or "1:pool:3"

    Returns:
        Checksummed hex address
    """
    digest = Web3.keccak(text=label)
    return Web3.to_checksum_address("0x" + bytes(digest[-20:]).hex())


def normalize_address(address: str) -> str:
    """Return the checksummed form of an address."""
    return Web3.to_checksum_address(address)
