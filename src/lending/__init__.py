"""Lending ledger: pools, positions, solvency, registry and treasury."""

from .health import SolvencyChecker
from .position import Position
from .pool import LendingPool
from .swap import OracleSwapRouter
from .treasury import ProtocolTreasury
from .registry import PoolRegistry

__all__ = [
    "SolvencyChecker",
    "Position",
    "LendingPool",
    "OracleSwapRouter",
    "ProtocolTreasury",
    "PoolRegistry",
]
