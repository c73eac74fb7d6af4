"""Execution environment: domains, contracts, tokens and call guards."""

from .address import ZERO_ADDRESS, make_address, normalize_address
from .contract import Contract
from .domain import Domain, Event
from .guards import atomic, non_reentrant, only
from .token import MAX_UINT256, Token

__all__ = [
    "ZERO_ADDRESS",
    "make_address",
    "normalize_address",
    "Contract",
    "Domain",
    "Event",
    "atomic",
    "non_reentrant",
    "only",
    "MAX_UINT256",
    "Token",
]
