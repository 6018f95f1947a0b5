"""Reads risk parameters from an OverlayV1Market contract."""
from __future__ import annotations

import logging

from web3 import AsyncWeb3

from .abi import (
    OVERLAY_V1_MARKET_ABI,
    RISK_PARAM_MIN_COLLATERAL,
    RISK_PARAM_TRADING_FEE_RATE,
)

logger = logging.getLogger(__name__)


class OverlayMarketReader:
    def __init__(self, web3: AsyncWeb3) -> None:
        self._w3 = web3

    async def _param(self, market: str, idx: int) -> int:
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(market),
            abi=OVERLAY_V1_MARKET_ABI,
        )
        value = int(await contract.functions.params(idx).call())
        logger.debug("market=%s params(%d)=%s", market, idx, value)
        return value

    async def get_trading_fee_rate(self, market: str) -> int:
        return await self._param(market, RISK_PARAM_TRADING_FEE_RATE)

    async def get_min_collateral(self, market: str) -> int:
        return await self._param(market, RISK_PARAM_MIN_COLLATERAL)
