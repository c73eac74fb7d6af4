"""Core module - models, constants and errors."""

from .models import PoolConfig, PoolState, PriceRecord, BridgeLeg, Message
from .constants import WAD, SECONDS_PER_YEAR

__all__ = [
    "PoolConfig",
    "PoolState",
    "PriceRecord",
    "BridgeLeg",
    "Message",
    "WAD",
    "SECONDS_PER_YEAR",
]
