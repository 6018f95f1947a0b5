"""Collaborator interfaces the trade evaluator depends on.

Any backend that satisfies these Protocols can be injected into
``OverlayTrade``; the web3-backed readers in this package are the default.
"""
from __future__ import annotations

from typing import Optional, Protocol, Tuple, runtime_checkable

from .models import MarketDetails, MarketState


@runtime_checkable
class MarketDirectoryLike(Protocol):
    async def resolve(self, market_id: str) -> MarketDetails: ...


@runtime_checkable
class StateReaderLike(Protocol):
    async def get_market_state(self, periphery: str, market: str) -> Optional[MarketState]: ...
    async def get_mid_price(self, periphery: str, market: str) -> int: ...
    async def get_bid(self, periphery: str, market: str, fraction_of_cap_oi: int) -> int: ...
    async def get_ask(self, periphery: str, market: str, fraction_of_cap_oi: int) -> int: ...
    async def get_oi_estimate(
        self,
        periphery: str,
        market: str,
        collateral: int,
        leverage: int,
        is_long: bool,
    ) -> int: ...
    async def get_fraction_of_cap_oi(self, periphery: str, market: str, oi: int) -> int: ...
    async def get_ois(self, periphery: str, market: str) -> Tuple[Optional[int], Optional[int]]: ...
    async def get_cap_oi(self, periphery: str, market: str) -> Optional[int]: ...
    async def get_circuit_breaker_level(self, periphery: str, market: str) -> int: ...
    async def get_liquidation_price_estimate(
        self,
        periphery: str,
        market: str,
        collateral: int,
        leverage: int,
        is_long: bool,
    ) -> int: ...


@runtime_checkable
class MarketReaderLike(Protocol):
    async def get_trading_fee_rate(self, market: str) -> int: ...
    async def get_min_collateral(self, market: str) -> int: ...


@runtime_checkable
class TokenReaderLike(Protocol):
    async def balance(self, account: str) -> int: ...
    async def allowance(self, account: str, spender: str) -> int: ...
