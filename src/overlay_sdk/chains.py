"""Chain registry: chain id -> Overlay V1 deployment addresses and endpoints."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .errors import UnsupportedChainError

ARBITRUM_SEPOLIA = 421614


@dataclass(frozen=True)
class ChainDeployment:
    chain_id: int
    name: str
    periphery_address: str
    ov_token_address: str
    subgraph_url: str
    market_prices_api: str


CHAINS: Dict[int, ChainDeployment] = {
    ARBITRUM_SEPOLIA: ChainDeployment(
        chain_id=ARBITRUM_SEPOLIA,
        name="arbitrum-sepolia",
        periphery_address="0x2878837ea173e8bd40db7cee360b15c1c27deb5a",
        ov_token_address="0x3e27fae625f25291bfda517f74bf41dc40721da2",
        subgraph_url=(
            "https://api.studio.thegraph.com/query/77621/overlay-arb-sepolia/version/latest"
        ),
        market_prices_api="https://api.overlay.market/data/api",
    ),
}

V1_PERIPHERY_ADDRESS: Dict[int, str] = {
    chain_id: deployment.periphery_address for chain_id, deployment in CHAINS.items()
}


def require_supported_chain(chain_id: int) -> ChainDeployment:
    deployment = CHAINS.get(chain_id)
    if deployment is None:
        raise UnsupportedChainError(chain_id)
    return deployment


def periphery_address(chain_id: int) -> str:
    return require_supported_chain(chain_id).periphery_address
