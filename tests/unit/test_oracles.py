"""Unit tests for price feeds and conversion."""

import pytest

from src.chain import Domain, Token, make_address
from src.core.errors import (
    AuthorizationError,
    ConfigurationError,
    InvalidPriceError,
    StalePriceError,
)
from src.core.models import PriceRecord
from src.oracles import AggregatorPriceAdapter, ManualPriceFeed, PriceConverter, PriceFeed

OWNER = make_address("owner")
STRANGER = make_address("stranger")


class StubAggregator:
    """Fixed-answer aggregator."""

    def __init__(self, answer: int, decimals: int, updated_at: int = 0):
        self.answer = answer
        self._decimals = decimals
        self.updated_at = updated_at

    def latest_round_data(self):
        return (1, self.answer, self.updated_at, self.updated_at, 1)

    def decimals(self) -> int:
        return self._decimals


@pytest.fixture
def domain(settings):
    return Domain(1, settings=settings)


@pytest.fixture
def feed(domain):
    return ManualPriceFeed(domain, OWNER, decimals=8)


@pytest.fixture
def weth(domain):
    return Token(domain, "Wrapped Ether", "WETH", decimals=18, owner=OWNER)


@pytest.fixture
def usdc6(domain):
    return Token(domain, "USD Coin", "USDC", decimals=6, owner=OWNER)


class TestManualPriceFeed:
    """Tests for ManualPriceFeed."""

    def test_set_and_get(self, domain, feed, weth):
        """Test prices are stamped with the domain time."""
        feed.set_price(OWNER, weth.address, 2_000 * 10**8)
        record = feed.get_price(weth.address)

        assert record == PriceRecord(price=2_000 * 10**8, timestamp=domain.now)
        assert feed.decimals() == 8
        assert feed.has_asset(weth.address)

    def test_owner_only(self, feed, weth):
        """Test only the owner can push prices."""
        with pytest.raises(AuthorizationError):
            feed.set_price(STRANGER, weth.address, 1)

    def test_rejects_non_positive(self, feed, weth):
        """Test zero prices are rejected."""
        with pytest.raises(InvalidPriceError):
            feed.set_price(OWNER, weth.address, 0)

    def test_unknown_asset(self, feed, weth):
        """Test reading an unset price fails."""
        with pytest.raises(ConfigurationError):
            feed.get_price(weth.address)

    def test_is_price_feed(self, feed):
        """Test the feed satisfies the abstract read contract."""
        assert isinstance(feed, PriceFeed)


class TestAggregatorPriceAdapter:
    """Tests for AggregatorPriceAdapter."""

    def test_rescales_answer(self, domain, weth):
        """Test answers are rescaled to the adapter decimals."""
        adapter = AggregatorPriceAdapter(domain, OWNER, decimals=8)
        adapter.set_aggregator(OWNER, weth.address, StubAggregator(2_000 * 10**18, decimals=18, updated_at=5))

        record = adapter.get_price(weth.address)
        assert record.price == 2_000 * 10**8
        assert record.timestamp == 5

    def test_scales_up(self, domain, weth):
        """Test answers with fewer decimals are scaled up."""
        adapter = AggregatorPriceAdapter(domain, OWNER, decimals=8)
        adapter.set_aggregator(OWNER, weth.address, StubAggregator(2_000 * 10**6, decimals=6))
        assert adapter.get_price(weth.address).price == 2_000 * 10**8

    def test_rejects_negative_answer(self, domain, weth):
        """Test non-positive answers are rejected."""
        adapter = AggregatorPriceAdapter(domain, OWNER)
        adapter.set_aggregator(OWNER, weth.address, StubAggregator(-1, decimals=8))
        with pytest.raises(InvalidPriceError):
            adapter.get_price(weth.address)

    def test_missing_aggregator(self, domain, weth):
        """Test assets without an aggregator fail."""
        adapter = AggregatorPriceAdapter(domain, OWNER)
        assert not adapter.has_asset(weth.address)
        with pytest.raises(ConfigurationError):
            adapter.get_price(weth.address)


class TestPriceConverter:
    """Tests for PriceConverter."""

    @pytest.fixture
    def converter(self, domain, feed, weth, usdc6):
        feed.set_price(OWNER, weth.address, 2_000 * 10**8)
        feed.set_price(OWNER, usdc6.address, 1 * 10**8)
        return PriceConverter(domain, lambda token: feed)

    def test_convert_across_decimals(self, converter, weth, usdc6):
        """Test 1 WETH (18 dec) converts to 2000 USDC (6 dec)."""
        assert converter.convert(10**18, weth.address, usdc6.address) == 2_000 * 10**6
        assert converter.convert(2_000 * 10**6, usdc6.address, weth.address) == 10**18

    def test_same_token(self, converter, weth):
        """Test converting a token into itself is the identity."""
        assert converter.convert(123, weth.address, weth.address) == 123

    def test_zero_amount(self, converter, weth, usdc6):
        """Test zero converts to zero."""
        assert converter.convert(0, weth.address, usdc6.address) == 0

    def test_rounding(self, converter, weth, usdc6):
        """Test floor by default and ceiling on request."""
        # 1 wei of WETH is worth far less than 1 USDC unit
        assert converter.convert(1, weth.address, usdc6.address) == 0
        assert converter.convert(1, weth.address, usdc6.address, round_up=True) == 1

    def test_staleness_disabled_by_default(self, domain, converter, weth):
        """Test old prices are accepted without a maximum age."""
        domain.advance(365 * 86_400)
        assert converter.price_of(weth.address).price == 2_000 * 10**8

    def test_staleness_enforced(self, domain, feed, weth, usdc6):
        """Test prices older than the maximum age are rejected."""
        feed.set_price(OWNER, weth.address, 2_000 * 10**8)
        converter = PriceConverter(domain, lambda token: feed, max_price_age_seconds=60)

        assert converter.price_of(weth.address).price == 2_000 * 10**8
        domain.advance(61)
        with pytest.raises(StalePriceError):
            converter.price_of(weth.address)
