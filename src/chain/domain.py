"""Execution domain: clock, contract registry, event log and transactions."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from config.settings import Settings, get_settings
from src.chain.address import make_address
from src.chain.contract import Contract
from src.core.constants import get_chain_name
from src.core.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Contract)

DEFAULT_GENESIS_TIMESTAMP = 1_700_000_000


@dataclass(frozen=True)
class Event:
    """A log entry emitted by a contract."""

    name: str
    emitter: str
    timestamp: int
    args: Dict[str, Any] = field(default_factory=dict)


class Domain:
    """
    A single execution environment (chain) in the cross-domain scheme.

    Every state-mutating entry point of a contract runs inside
    transaction(), which makes the call all-or-nothing: if anything
    raises, all journaled contract state, contracts created during the
    call and emitted events are rolled back before the error propagates.
    Calls on one domain are serialized; there is no interleaving.
    """

    def __init__(
        self,
        domain_id: int,
        timestamp: int = DEFAULT_GENESIS_TIMESTAMP,
        native_symbol: str = "ETH",
        settings: Optional[Settings] = None,
    ):
        self.domain_id = domain_id
        self.settings = settings or get_settings()
        self._now = timestamp
        self._contracts: Dict[str, Contract] = {}
        self._events: List[Event] = []
        self._address_nonce = 0
        self._tx_depth = 0

        # Imported here to avoid a circular import with token -> contract
        from src.chain.token import Token

        self._genesis = make_address(f"{domain_id}:genesis")
        self.native = Token(
            self, name=f"{native_symbol} (native)", symbol=native_symbol, decimals=18, owner=self._genesis
        )

    @property
    def name(self) -> str:
        """Human-readable domain name."""
        return get_chain_name(self.domain_id)

    # ========== CLOCK ==========

    @property
    def now(self) -> int:
        """Current block timestamp."""
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new timestamp."""
        if seconds < 0:
            raise ValidationError("Cannot move the clock backwards")
        self._now += seconds
        return self._now

    def set_time(self, timestamp: int) -> None:
        """Jump the clock to an absolute timestamp (never backwards)."""
        if timestamp < self._now:
            raise ValidationError(f"Timestamp {timestamp} is before current time {self._now}")
        self._now = timestamp

    # ========== NATIVE CURRENCY ==========

    def fund(self, account: str, amount: int) -> None:
        """Credit native currency to an account out of thin air."""
        self.native.mint(self._genesis, account, amount)

    # ========== CONTRACTS ==========

    def create_address(self, label: str) -> str:
        """Allocate a fresh, deterministic contract address."""
        self._address_nonce += 1
        return make_address(f"{self.domain_id}:{label}:{self._address_nonce}")

    def register(self, contract: Contract) -> None:
        if contract.address in self._contracts:
            raise ConfigurationError(f"Address already in use: {contract.address}")
        self._contracts[contract.address] = contract
        logger.debug(f"Registered {type(contract).__name__} at {contract.address} on {self.name}")

    def get(self, address: str) -> Optional[Contract]:
        """Contract at address, or None for accounts and unknown addresses."""
        return self._contracts.get(address)

    def contract(self, address: str, kind: Type[C]) -> C:
        """
        Resolve an address to a contract of the given type.

        Raises:
            ConfigurationError: If nothing of that type lives at the address
        """
        found = self._contracts.get(address)
        if not isinstance(found, kind):
            raise ConfigurationError(f"No {kind.__name__} at {address} on {self.name}")
        return found

    def is_contract(self, address: str) -> bool:
        return address in self._contracts

    # ========== EVENTS ==========

    def emit(self, emitter: str, name: str, **args: Any) -> Event:
        event = Event(name=name, emitter=emitter, timestamp=self._now, args=args)
        self._events.append(event)
        return event

    def events(self, name: Optional[str] = None, emitter: Optional[str] = None) -> List[Event]:
        """Emitted events, optionally filtered by name and emitter."""
        return [
            e
            for e in self._events
            if (name is None or e.name == name) and (emitter is None or e.emitter == emitter)
        ]

    # ========== TRANSACTIONS ==========

    @property
    def in_transaction(self) -> bool:
        return self._tx_depth > 0

    @contextmanager
    def transaction(self) -> Iterator["Domain"]:
        """
        Run a block as one indivisible unit.

        Nested transactions join the outermost one, so a failure anywhere
        in a call tree reverts the whole tree.
        """
        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        snapshots = {address: c.snapshot() for address, c in self._contracts.items()}
        event_count = len(self._events)
        self._tx_depth = 1
        try:
            yield self
        except Exception as e:
            self._rollback(snapshots, event_count)
            logger.debug(f"Reverted transaction on {self.name}: {e}")
            raise
        finally:
            self._tx_depth = 0

    def _rollback(self, snapshots: Dict[str, Dict[str, Any]], event_count: int) -> None:
        created = [address for address in self._contracts if address not in snapshots]
        for address in created:
            del self._contracts[address]
        for address, state in snapshots.items():
            self._contracts[address].restore(state)
        del self._events[event_count:]

    def __repr__(self) -> str:
        return f"Domain({self.domain_id}, {self.name}, t={self._now})"
