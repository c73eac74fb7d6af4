"""Lending protocol parameters.

Defaults mirror the values in config.settings and are used when no
settings object is threaded through.
"""

from src.core.constants.generic import WAD

# Simple (non-compounding) annual borrow rate
INTEREST_RATE_PERCENT = 10

# Borrow fee charged on every draw, 0.1%
PROTOCOL_FEE = 10**15

# LTV bounds, exclusive lower, inclusive upper
MIN_LTV = 0
MAX_LTV = WAD
