"""Price record model returned by price feeds."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceRecord:
    """Latest price of an asset and when it was last updated."""

    price: int  # Scaled by the feed's decimals()
    timestamp: int  # Unix timestamp of the update

    def age(self, now: int) -> int:
        """Seconds elapsed since the price was updated."""
        return max(0, now - self.timestamp)
