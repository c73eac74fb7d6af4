"""Base class for stateful components living on a domain."""

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, Tuple

if TYPE_CHECKING:
    from src.chain.domain import Domain

logger = logging.getLogger(__name__)


class Contract:
    """
    A stateful component with an address on a single domain.

    Subclasses list the attributes that make up their persistent state in
    JOURNALED. Those attributes are snapshotted when a domain transaction
    starts and restored if it fails. Anything not listed (references to
    other contracts, reentrancy flags) is left alone.
    """

    JOURNALED: Tuple[str, ...] = ()

    def __init__(self, domain: "Domain", label: str):
        self.domain = domain
        self.address = domain.create_address(label)
        domain.register(self)

    def _journaled_fields(self) -> Tuple[str, ...]:
        fields: list[str] = []
        for klass in type(self).__mro__:
            for name in klass.__dict__.get("JOURNALED", ()):
                if name not in fields:
                    fields.append(name)
        return tuple(fields)

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the journaled state."""
        return {name: copy.deepcopy(getattr(self, name)) for name in self._journaled_fields()}

    def restore(self, state: Dict[str, Any]) -> None:
        """Put back state captured by snapshot()."""
        for name, value in state.items():
            setattr(self, name, value)

    def _emit(self, name: str, **args: Any) -> None:
        self.domain.emit(self.address, name, **args)

    def _receive_value(self, sender: str, value: int) -> None:
        """Move attached native currency from sender into this contract."""
        if value:
            self.domain.native.transfer(sender, self.address, value)

    def _send_value(self, to: str, value: int) -> None:
        if value:
            self.domain.native.transfer(self.address, to, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address} @ {self.domain.domain_id})"
