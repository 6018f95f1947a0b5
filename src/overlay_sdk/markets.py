"""
Market directory

Resolves the market identifiers callers use (a market address, or a display
name such as ``"BTC Dominance"``) to the market contract address. Names come
from the market prices API. Nothing is cached: every call resolves again.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from web3 import AsyncWeb3

from .errors import MarketNotFoundError
from .models import MarketDetails
from .subgraph import SubgraphClient

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _normalise_name(value: str) -> str:
    return unquote(value).strip().lower()


class OverlayMarkets:
    def __init__(self, subgraph: SubgraphClient) -> None:
        self._subgraph = subgraph

    async def list_active_markets(self) -> Optional[List[Dict[str, Any]]]:
        return await asyncio.to_thread(self._subgraph.active_markets)

    async def market_names(self, strict: bool = False) -> Dict[str, str]:
        return await asyncio.to_thread(self._subgraph.market_names, strict)

    async def resolve(self, market_id: str) -> MarketDetails:
        raw = (market_id or "").strip()
        if _ADDRESS_RE.match(raw):
            return MarketDetails(
                market_id=market_id,
                market_address=AsyncWeb3.to_checksum_address(raw),
            )

        wanted = _normalise_name(raw)
        if not wanted:
            raise MarketNotFoundError(market_id)

        names = await self.market_names(strict=True)
        for address, name in names.items():
            if _normalise_name(name) == wanted and _ADDRESS_RE.match(address):
                return MarketDetails(
                    market_id=market_id,
                    market_address=AsyncWeb3.to_checksum_address(address),
                    name=name,
                )

        logger.debug("Market %r not found in %d named markets", market_id, len(names))
        raise MarketNotFoundError(market_id)
