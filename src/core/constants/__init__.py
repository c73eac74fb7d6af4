"""Core constants module.

Re-exports all constants for convenience.
"""

from src.core.constants.generic import (
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    WAD,
    DEFAULT_TOKEN_DECIMALS,
)

from src.core.constants.chains import (
    ETHEREUM_MAINNET_CHAIN_ID,
    OPTIMISM_CHAIN_ID,
    BASE_CHAIN_ID,
    ARBITRUM_ONE_CHAIN_ID,
    AVALANCHE_CHAIN_ID,
    ARBITRUM_SEPOLIA_CHAIN_ID,
    BASE_SEPOLIA_CHAIN_ID,
    get_chain_name,
)

from src.core.constants.protocol import (
    INTEREST_RATE_PERCENT,
    PROTOCOL_FEE,
    MIN_LTV,
    MAX_LTV,
)

__all__ = [
    # Generic
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "WAD",
    "DEFAULT_TOKEN_DECIMALS",
    # Chains
    "ETHEREUM_MAINNET_CHAIN_ID",
    "OPTIMISM_CHAIN_ID",
    "BASE_CHAIN_ID",
    "ARBITRUM_ONE_CHAIN_ID",
    "AVALANCHE_CHAIN_ID",
    "ARBITRUM_SEPOLIA_CHAIN_ID",
    "BASE_SEPOLIA_CHAIN_ID",
    "get_chain_name",
    # Protocol
    "INTEREST_RATE_PERCENT",
    "PROTOCOL_FEE",
    "MIN_LTV",
    "MAX_LTV",
]
