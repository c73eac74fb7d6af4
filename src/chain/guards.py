"""Decorators guarding contract entry points."""

import logging
from functools import wraps
from typing import Callable, TypeVar

from src.core.errors import AuthorizationError, ReentrancyError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable)


def atomic(fn: F) -> F:
    """Run the method inside a transaction of the contract's domain."""

    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        with self.domain.transaction():
            return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def non_reentrant(fn: F) -> F:
    """
    Reject calls into any guarded method of the contract while another
    guarded method of the same contract is still running.
    """

    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        if getattr(self, "_entered", False):
            logger.warning(f"Blocked reentrant call to {type(self).__name__}.{fn.__name__}")
            raise ReentrancyError(f"Reentrant call to {type(self).__name__}.{fn.__name__}")
        self._entered = True
        try:
            return fn(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper  # type: ignore[return-value]


def only(attribute: str) -> Callable[[F], F]:
    """
    Restrict a method to one caller.

    The first positional argument of the guarded method is the caller
    address, and it must equal getattr(self, attribute) at call time.
    """

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(self, sender: str, *args, **kwargs):
            expected = getattr(self, attribute)
            if sender != expected:
                logger.warning(f"Rejected {sender} calling {type(self).__name__}.{fn.__name__}")
                raise AuthorizationError(sender, expected, fn.__name__)
            return fn(self, sender, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
