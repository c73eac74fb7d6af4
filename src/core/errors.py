"""Exception hierarchy for the lending protocol.

Every check raises immediately. The enclosing domain transaction rolls
back all state touched by the call before the exception reaches the
caller, so a raised error always means "no effect".
"""


class LendingError(Exception):
    """Base class for all protocol errors."""


# ========== VALIDATION ==========


class ValidationError(LendingError, ValueError):
    """Bad input to an entry point."""


class ZeroAmountError(ValidationError):
    """Amount or share count must be greater than zero."""

    def __init__(self, what: str = "amount"):
        super().__init__(f"{what} must be greater than zero")
        self.what = what


class InsufficientSharesError(ValidationError):
    """Caller asked for more shares than they hold."""

    def __init__(self, requested: int, available: int):
        super().__init__(f"Insufficient shares: requested {requested}, available {available}")
        self.requested = requested
        self.available = available


class InsufficientBalanceError(ValidationError):
    """Token balance too low for a transfer or burn."""

    def __init__(self, account: str, requested: int, available: int):
        super().__init__(
            f"Insufficient balance for {account}: requested {requested}, available {available}"
        )
        self.account = account
        self.requested = requested
        self.available = available


class InsufficientAllowanceError(ValidationError):
    """Spender was not approved for the requested amount."""

    def __init__(self, owner: str, spender: str, requested: int, available: int):
        super().__init__(
            f"Insufficient allowance from {owner} to {spender}: "
            f"requested {requested}, available {available}"
        )
        self.owner = owner
        self.spender = spender
        self.requested = requested
        self.available = available


class TokenNotAvailableError(ValidationError):
    """Token is neither collateral nor tracked by the position."""

    def __init__(self, token: str):
        super().__init__(f"Token not available in position: {token}")
        self.token = token


class InsufficientFeeError(ValidationError):
    """Attached value does not cover the messaging fee."""

    def __init__(self, required: int, provided: int):
        super().__init__(f"Insufficient messaging fee: required {required}, provided {provided}")
        self.required = required
        self.provided = provided


class InvalidPriceError(ValidationError):
    """Price feed returned a non-positive price."""


class SameDomainError(ValidationError):
    """A bridge route must connect two different domains."""


class SlippageError(ValidationError):
    """Swap output fell below the caller's minimum."""


# ========== CAPACITY ==========


class InsufficientLiquidityError(LendingError):
    """Pool or swap reserves cannot cover the request."""


# ========== SOLVENCY ==========


class SolvencyError(LendingError):
    """Collateral value does not cover debt at the pool's LTV."""

    def __init__(self, debt: int, max_debt: int):
        super().__init__(f"Insufficient collateral: debt {debt} exceeds max borrow {max_debt}")
        self.debt = debt
        self.max_debt = max_debt


# ========== CONFIGURATION ==========


class ConfigurationError(LendingError):
    """Required collaborator is unset or misconfigured."""


class PoolAlreadyExistsError(ConfigurationError):
    """A pool already exists for this collateral/borrow pair."""


class StalePriceError(ConfigurationError):
    """Price is older than the configured maximum age."""


# ========== AUTHORIZATION ==========


class AuthorizationError(LendingError):
    """Caller is not the single authorized caller for this operation."""

    def __init__(self, caller: str, expected: str, operation: str = ""):
        where = f" for {operation}" if operation else ""
        super().__init__(f"Unauthorized caller {caller}{where}, expected {expected}")
        self.caller = caller
        self.expected = expected


# ========== CONCURRENCY ==========


class ReentrancyError(LendingError):
    """Entry point was re-entered before the previous call completed."""
