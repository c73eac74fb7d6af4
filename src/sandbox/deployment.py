"""Wiring of a full protocol deployment on one or more domains."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from config.settings import Settings, get_settings
from src.bridge import BridgeReceiver, BridgeSender, FeePaymaster, InMemoryTransport, Mailbox
from src.chain import Domain, Token, make_address
from src.chain.domain import DEFAULT_GENESIS_TIMESTAMP
from src.lending import OracleSwapRouter, PoolRegistry, ProtocolTreasury
from src.oracles import ManualPriceFeed

logger = logging.getLogger(__name__)

DEFAULT_FEED_DECIMALS = 8


@dataclass
class DomainStack:
    """Every protocol component deployed on one domain."""

    domain: Domain
    owner: str
    treasury: ProtocolTreasury
    registry: PoolRegistry
    feed: ManualPriceFeed
    router: OracleSwapRouter
    paymaster: FeePaymaster
    mailbox: Mailbox
    tokens: Dict[str, Token] = field(default_factory=dict)
    receivers: Dict[str, BridgeReceiver] = field(default_factory=dict)

    @property
    def domain_id(self) -> int:
        return self.domain.domain_id

    def token(self, symbol: str) -> Token:
        return self.tokens[symbol]


def deploy_stack(
    domain_id: int,
    transport: InMemoryTransport,
    owner: Optional[str] = None,
    settings: Optional[Settings] = None,
    timestamp: int = DEFAULT_GENESIS_TIMESTAMP,
) -> DomainStack:
    """
    Deploy treasury, registry, price feed, swap router and messaging
    endpoints on a fresh domain and connect its mailbox to the transport.

    Args:
        domain_id: Id of the new domain
        transport: Transport the domain's mailbox is connected to
        owner: Admin address of every component (default: derived "owner")
        settings: Protocol settings shared by all components
        timestamp: Genesis timestamp of the domain clock

    Returns:
        The deployed DomainStack
    """
    settings = settings or get_settings()
    owner = owner or make_address("owner")
    domain = Domain(domain_id, timestamp=timestamp, settings=settings)

    treasury = ProtocolTreasury(domain, owner)
    registry = PoolRegistry(domain, owner, treasury.address, settings=settings)
    feed = ManualPriceFeed(domain, owner, decimals=DEFAULT_FEED_DECIMALS)
    router = OracleSwapRouter(domain, registry.price_converter())
    registry.set_swap_router(owner, router.address)

    paymaster = FeePaymaster(domain, owner, settings=settings)
    mailbox = Mailbox(domain, paymaster)
    transport.connect(mailbox)

    logger.info(f"Deployed protocol stack on {domain.name} ({domain_id})")
    return DomainStack(
        domain=domain,
        owner=owner,
        treasury=treasury,
        registry=registry,
        feed=feed,
        router=router,
        paymaster=paymaster,
        mailbox=mailbox,
    )


def deploy_token(
    stack: DomainStack,
    symbol: str,
    price: int,
    decimals: int = 18,
    name: Optional[str] = None,
) -> Token:
    """
    Deploy a token, price it on the stack's feed and register the feed.

    Args:
        stack: Target deployment
        symbol: Token symbol, also its key in stack.tokens
        price: Price scaled by the feed decimals (1e8 == 1.0)
        decimals: Token decimals
        name: Token name (defaults to the symbol)
    """
    token = Token(stack.domain, name=name or symbol, symbol=symbol, decimals=decimals, owner=stack.owner)
    stack.feed.set_price(stack.owner, token.address, price)
    stack.registry.set_price_feed(stack.owner, token.address, stack.feed.address)
    stack.tokens[symbol] = token
    return token


def link_bridge(origin: DomainStack, destination: DomainStack, symbol: str) -> BridgeSender:
    """
    Open a one-way bridge route for a token from origin to destination.

    Deploys (or reuses) a receiver for the token on the destination,
    deploys a sender on the origin, grants burn/mint roles, enables the
    destination on the origin paymaster and registers the sender.

    Returns:
        The origin-side BridgeSender
    """
    origin_token = origin.token(symbol)
    destination_token = destination.token(symbol)

    receiver = destination.receivers.get(symbol)
    if receiver is None:
        receiver = BridgeReceiver(destination.domain, destination.mailbox.address, destination_token.address)
        destination_token.grant_minter(destination.owner, receiver.address)
        destination.receivers[symbol] = receiver

    origin.paymaster.set_gas_price(origin.owner, destination.domain_id)
    sender = BridgeSender(
        origin.domain,
        mailbox=origin.mailbox,
        paymaster=origin.paymaster,
        destination_domain=destination.domain_id,
        receiver=receiver.address,
    )
    origin_token.grant_burner(origin.owner, sender.address)
    origin.registry.add_bridge_sender(origin.owner, destination.domain_id, sender.address)

    logger.info(f"Linked {symbol} route {origin.domain_id} -> {destination.domain_id}")
    return sender
