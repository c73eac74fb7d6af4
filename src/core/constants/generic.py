"""Generic constants for on-chain fixed-point and time calculations.

These constants are protocol-agnostic and shared by the ledger, oracles and bridge.
"""

# Time constants
SECONDS_PER_DAY = 24 * 3600
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY  # 31,536,000 (Solidity `365 days`)

# Precision constants
WAD = 10**18  # Standard 18 decimal precision, 1e18 == 100%

# Default token precision
DEFAULT_TOKEN_DECIMALS = 18
