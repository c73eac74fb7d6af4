"""Pytest configuration and fixtures."""

import pytest

from config.settings import Settings
from src.bridge import InMemoryTransport
from src.chain import make_address
from src.core.constants import ARBITRUM_ONE_CHAIN_ID, BASE_CHAIN_ID, WAD
from src.sandbox.deployment import deploy_stack, deploy_token, link_bridge

UNIT = 10**18
PRICE_UNIT = 10**8


@pytest.fixture
def settings() -> Settings:
    """Default protocol settings, isolated from the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def origin(transport, settings):
    """Protocol stack on the origin domain."""
    return deploy_stack(ARBITRUM_ONE_CHAIN_ID, transport, settings=settings)


@pytest.fixture
def destination(transport, settings):
    """Protocol stack on the destination domain."""
    return deploy_stack(BASE_CHAIN_ID, transport, settings=settings)


@pytest.fixture
def weth(origin):
    """Collateral token priced at 2000."""
    return deploy_token(origin, "WETH", 2_000 * PRICE_UNIT)


@pytest.fixture
def usdc(origin):
    """Borrow token priced at 1."""
    return deploy_token(origin, "USDC", 1 * PRICE_UNIT)


@pytest.fixture
def remote_usdc(destination):
    return deploy_token(destination, "USDC", 1 * PRICE_UNIT)


@pytest.fixture
def bridge_sender(origin, destination, usdc, remote_usdc):
    """USDC route from origin to destination."""
    return link_bridge(origin, destination, "USDC")


@pytest.fixture
def pool(origin, weth, usdc):
    """WETH/USDC pool at 75% LTV."""
    return origin.registry.create_pool(origin.owner, weth.address, usdc.address, 75 * WAD // 100)


@pytest.fixture
def lender():
    return make_address("lender")


@pytest.fixture
def borrower():
    return make_address("borrower")


@pytest.fixture
def supplied_pool(origin, pool, usdc, lender):
    """Pool holding 1000 USDC of liquidity from the lender."""
    usdc.mint(origin.owner, lender, 1_000 * UNIT)
    usdc.approve(lender, pool.address, 1_000 * UNIT)
    pool.supply_liquidity(lender, 1_000 * UNIT)
    return pool


@pytest.fixture
def collateralized_pool(origin, supplied_pool, weth, borrower):
    """Supplied pool where the borrower locked 0.05 WETH (worth 100 USDC)."""
    amount = 5 * UNIT // 100
    weth.mint(origin.owner, borrower, amount)
    weth.approve(borrower, supplied_pool.address, amount)
    supplied_pool.supply_collateral(borrower, amount)
    return supplied_pool
