"""Core data models for the lending protocol."""

from .pool import PoolConfig, PoolState
from .price import PriceRecord
from .message import BridgeLeg, Message

__all__ = [
    "PoolConfig",
    "PoolState",
    "PriceRecord",
    "BridgeLeg",
    "Message",
]
