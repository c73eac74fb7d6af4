"""End-to-end two-domain lending scenario."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config.settings import Settings
from src.bridge import InMemoryTransport
from src.bridge.codec import decode_transfer
from src.chain import make_address
from src.core.constants import SECONDS_PER_DAY, WAD, ARBITRUM_ONE_CHAIN_ID, BASE_CHAIN_ID
from src.core.errors import LendingError
from src.core.models import PoolConfig, PoolState
from src.sandbox.deployment import deploy_stack, deploy_token, link_bridge

logger = logging.getLogger(__name__)

UNIT = 10**18
PRICE_UNIT = 10**8


@dataclass
class ScenarioConfig:
    """Parameters of the cross-domain borrow scenario."""

    origin_domain: int = ARBITRUM_ONE_CHAIN_ID
    destination_domain: int = BASE_CHAIN_ID
    liquidity: int = 10_000 * UNIT  # USDC supplied by the lender
    collateral: int = 5 * UNIT  # WETH supplied by the borrower
    borrow: int = 1_000 * UNIT  # USDC borrowed to the destination
    weth_price: int = 2_000 * PRICE_UNIT
    usdc_price: int = 1 * PRICE_UNIT
    ltv: int = 75 * WAD // 100
    days: int = 30


@dataclass
class ScenarioStep:
    """Pool and balance snapshot after one step."""

    label: str
    timestamp: int
    pool: PoolState
    balances: Dict[str, int] = field(default_factory=dict)
    message_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "label": self.label,
            "timestamp": self.timestamp,
            "pool": self.pool.to_dict(),
            "balances": {name: str(amount) for name, amount in self.balances.items()},
            "message_id": self.message_id,
        }


@dataclass
class ScenarioResult:
    """Outcome of a scenario run."""

    config: ScenarioConfig
    steps: List[ScenarioStep] = field(default_factory=list)
    pool_config: Optional[PoolConfig] = None
    success: bool = True
    error_message: Optional[str] = None

    @property
    def final(self) -> Optional[ScenarioStep]:
        return self.steps[-1] if self.steps else None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "success": self.success,
            "error_message": self.error_message,
            "ltv": str(self.pool_config.ltv_ratio) if self.pool_config else None,
            "steps": [step.to_dict() for step in self.steps],
        }


def run_cross_domain_scenario(
    config: Optional[ScenarioConfig] = None,
    settings: Optional[Settings] = None,
) -> ScenarioResult:
    """
    Supply, collateralize, borrow across domains, relay, accrue and repay.

    Returns:
        ScenarioResult with one snapshot per step; failures are reported
        in the result rather than raised
    """
    config = config or ScenarioConfig()
    result = ScenarioResult(config=config)

    transport = InMemoryTransport()
    origin = deploy_stack(config.origin_domain, transport, settings=settings)
    destination = deploy_stack(config.destination_domain, transport, settings=settings)

    weth = deploy_token(origin, "WETH", config.weth_price)
    usdc = deploy_token(origin, "USDC", config.usdc_price)
    remote_usdc = deploy_token(destination, "USDC", config.usdc_price)
    link_bridge(origin, destination, "USDC")

    pool = origin.registry.create_pool(origin.owner, weth.address, usdc.address, config.ltv)
    result.pool_config = pool.config

    lender = make_address("lender")
    borrower = make_address("borrower")

    def snapshot(label: str, message_id: Optional[str] = None) -> None:
        result.steps.append(
            ScenarioStep(
                label=label,
                timestamp=origin.domain.now,
                pool=PoolState(**vars(pool.state)),
                balances={
                    "lender USDC": usdc.balance_of(lender),
                    "borrower USDC (origin)": usdc.balance_of(borrower),
                    "borrower USDC (destination)": remote_usdc.balance_of(borrower),
                    "treasury USDC": usdc.balance_of(origin.treasury.address),
                    "in flight": sum(_pending_amounts(transport)),
                },
                message_id=message_id,
            )
        )

    try:
        usdc.mint(origin.owner, lender, config.liquidity)
        weth.mint(origin.owner, borrower, config.collateral)
        origin.domain.fund(borrower, 1 * UNIT)

        usdc.approve(lender, pool.address, config.liquidity)
        pool.supply_liquidity(lender, config.liquidity)
        snapshot("supply liquidity")

        weth.approve(borrower, pool.address, config.collateral)
        pool.supply_collateral(borrower, config.collateral)
        snapshot("supply collateral")

        fee = pool.quote_borrow_fee(config.destination_domain)
        message_id = pool.borrow_debt(borrower, config.borrow, config.destination_domain, 0, value=fee)
        snapshot("borrow cross-domain", message_id)

        transport.deliver_all()
        snapshot("relay messages")

        origin.domain.advance(config.days * SECONDS_PER_DAY)
        pool.accrue_interest()
        snapshot(f"accrue {config.days} days")

        shares = pool.borrow_shares_of(borrower)
        debt = pool.to_borrow_assets(shares)
        usdc.mint(origin.owner, borrower, debt)
        usdc.approve(borrower, pool.address, debt)
        pool.repay_with_selected_token(borrower, shares, usdc.address, from_position=False)
        snapshot("repay")
    except LendingError as e:
        logger.error(f"Scenario failed: {e}")
        result.success = False
        result.error_message = str(e)

    return result


def _pending_amounts(transport: InMemoryTransport) -> List[int]:
    return [decode_transfer(m.body)[1] for m in transport.pending()]
