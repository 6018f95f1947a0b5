"""
OverlayV1State reader

Thin async wrapper around the periphery contract. Every method is a single
``eth_call``; the periphery address is passed per call so one reader can
serve any deployment. Transport errors propagate unchanged.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from web3 import AsyncWeb3

from .abi import OVERLAY_V1_STATE_ABI
from .models import MarketState

logger = logging.getLogger(__name__)


class OverlayStateReader:
    def __init__(self, web3: AsyncWeb3) -> None:
        self._w3 = web3

    def _functions(self, periphery: str) -> Any:
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(periphery),
            abi=OVERLAY_V1_STATE_ABI,
        )
        return contract.functions

    @staticmethod
    def _market(market: str) -> str:
        return AsyncWeb3.to_checksum_address(market)

    async def get_market_state(self, periphery: str, market: str) -> Optional[MarketState]:
        raw = await self._functions(periphery).marketState(self._market(market)).call()
        if not raw:
            logger.debug("marketState returned nothing for %s", market)
            return None
        (
            bid,
            ask,
            mid,
            volume_bid,
            volume_ask,
            oi_long,
            oi_short,
            cap_oi,
            circuit_breaker_level,
            funding_rate,
        ) = raw
        return MarketState(
            bid=int(bid),
            ask=int(ask),
            mid=int(mid),
            volume_bid=int(volume_bid),
            volume_ask=int(volume_ask),
            oi_long=int(oi_long),
            oi_short=int(oi_short),
            cap_oi=int(cap_oi),
            circuit_breaker_level=int(circuit_breaker_level),
            funding_rate=int(funding_rate),
        )

    async def get_mid_price(self, periphery: str, market: str) -> int:
        return int(await self._functions(periphery).mid(self._market(market)).call())

    async def get_bid(self, periphery: str, market: str, fraction_of_cap_oi: int) -> int:
        return int(
            await self._functions(periphery).bid(self._market(market), fraction_of_cap_oi).call()
        )

    async def get_ask(self, periphery: str, market: str, fraction_of_cap_oi: int) -> int:
        return int(
            await self._functions(periphery).ask(self._market(market), fraction_of_cap_oi).call()
        )

    async def get_oi_estimate(
        self,
        periphery: str,
        market: str,
        collateral: int,
        leverage: int,
        is_long: bool,
    ) -> int:
        oi = await self._functions(periphery).oiEstimate(
            self._market(market), collateral, leverage, is_long
        ).call()
        logger.debug(
            "oiEstimate market=%s collateral=%s leverage=%s long=%s -> %s",
            market,
            collateral,
            leverage,
            is_long,
            oi,
        )
        return int(oi)

    async def get_fraction_of_cap_oi(self, periphery: str, market: str, oi: int) -> int:
        return int(
            await self._functions(periphery).fractionOfCapOi(self._market(market), oi).call()
        )

    async def get_ois(self, periphery: str, market: str) -> Tuple[Optional[int], Optional[int]]:
        raw = await self._functions(periphery).ois(self._market(market)).call()
        if not raw or len(raw) < 2:
            return None, None
        oi_long, oi_short = raw[0], raw[1]
        return (
            int(oi_long) if oi_long is not None else None,
            int(oi_short) if oi_short is not None else None,
        )

    async def get_cap_oi(self, periphery: str, market: str) -> Optional[int]:
        cap = await self._functions(periphery).capOi(self._market(market)).call()
        return int(cap) if cap is not None else None

    async def get_circuit_breaker_level(self, periphery: str, market: str) -> int:
        return int(
            await self._functions(periphery).circuitBreakerLevel(self._market(market)).call()
        )

    async def get_liquidation_price_estimate(
        self,
        periphery: str,
        market: str,
        collateral: int,
        leverage: int,
        is_long: bool,
    ) -> int:
        return int(
            await self._functions(periphery).liquidationPriceEstimate(
                self._market(market), collateral, leverage, is_long
            ).call()
        )
