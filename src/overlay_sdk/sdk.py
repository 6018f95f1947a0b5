"""
SDK composition

``create_sdk`` wires the web3-backed readers, the subgraph client and the
trade evaluator for one chain. Nothing is constructed at import time; the
host application calls the factory once at startup and owns the result.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from .chains import require_supported_chain
from .config import OverlaySettings
from .market_reader import OverlayMarketReader
from .markets import OverlayMarkets
from .ov_token import OverlayTokenReader
from .state_reader import OverlayStateReader
from .subgraph import SubgraphClient
from .trade import OverlayTrade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlaySDKCore:
    web3: AsyncWeb3
    chain_id: int


@dataclass
class OverlaySDK:
    core: OverlaySDKCore
    state: OverlayStateReader
    market: OverlayMarketReader
    ov: OverlayTokenReader
    markets: OverlayMarkets
    subgraph: SubgraphClient
    trade: OverlayTrade

    async def get_open_positions(self, account: str) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.subgraph.open_positions, account)

    async def get_unwind_positions(self, account: str) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.subgraph.unwind_positions, account)


def build_web3(settings: OverlaySettings) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(settings.rpc_url))


def create_sdk(
    settings: Optional[OverlaySettings] = None,
    *,
    web3: Optional[AsyncWeb3] = None,
) -> OverlaySDK:
    """Build an :class:`OverlaySDK` for ``settings.chain_id``.

    Raises ``UnsupportedChainError`` when the chain is not in the registry.
    An existing ``AsyncWeb3`` instance can be passed to share a provider.
    """
    settings = settings or OverlaySettings()
    require_supported_chain(settings.chain_id)

    w3 = web3 if web3 is not None else build_web3(settings)
    core = OverlaySDKCore(web3=w3, chain_id=settings.chain_id)

    subgraph = SubgraphClient(
        url=settings.resolved_subgraph_url,
        market_prices_api=settings.resolved_market_prices_api,
        page_size=settings.subgraph_page_size,
        timeout_s=settings.request_timeout_s,
    )
    state = OverlayStateReader(w3)
    market = OverlayMarketReader(w3)
    ov = OverlayTokenReader(w3, settings.resolved_ov_token_address)
    markets = OverlayMarkets(subgraph)
    trade = OverlayTrade(
        settings.chain_id,
        markets,
        state,
        market,
        ov,
        periphery_address=settings.periphery_address,
    )
    logger.debug(
        "Overlay SDK created: chain=%s rpc=%s periphery=%s",
        settings.chain_id,
        settings.rpc_url,
        settings.resolved_periphery_address,
    )
    return OverlaySDK(
        core=core,
        state=state,
        market=market,
        ov=ov,
        markets=markets,
        subgraph=subgraph,
        trade=trade,
    )
