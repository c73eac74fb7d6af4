"""Messaging domain identifiers for supported chains."""

ETHEREUM_MAINNET_CHAIN_ID = 1
OPTIMISM_CHAIN_ID = 10
BASE_CHAIN_ID = 8453
ARBITRUM_ONE_CHAIN_ID = 42161
AVALANCHE_CHAIN_ID = 43114
ARBITRUM_SEPOLIA_CHAIN_ID = 421614
BASE_SEPOLIA_CHAIN_ID = 84532

CHAIN_NAMES = {
    ETHEREUM_MAINNET_CHAIN_ID: "Ethereum",
    OPTIMISM_CHAIN_ID: "Optimism",
    BASE_CHAIN_ID: "Base",
    ARBITRUM_ONE_CHAIN_ID: "Arbitrum One",
    AVALANCHE_CHAIN_ID: "Avalanche",
    ARBITRUM_SEPOLIA_CHAIN_ID: "Arbitrum Sepolia",
    BASE_SEPOLIA_CHAIN_ID: "Base Sepolia",
}


def get_chain_name(domain_id: int) -> str:
    """Human-readable name for a domain id."""
    return CHAIN_NAMES.get(domain_id, f"domain-{domain_id}")
