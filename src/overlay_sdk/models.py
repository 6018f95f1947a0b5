from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

FixedPoint = int
Formatted = Union[int, str]


class TradeState(str, Enum):
    BUILD = "Build"
    POSITION_UNDERWATER = "Position Underwater"
    EXCEEDS_OI_CAP = "Exceeds OI Cap"
    EXCEEDS_CIRCUIT_BREAKER_OI_CAP = "Exceeds Circuit Breaker OI Cap"
    OVL_BALANCE_BELOW_MINIMUM = "OVL Balance Below Minimum"
    NEEDS_APPROVAL = "Needs Approval"
    BUILD_HIGH_PRICE_IMPACT = "Build High Price Impact"


@dataclass(frozen=True)
class MarketDetails:
    market_id: str
    market_address: str
    name: Optional[str] = None


@dataclass(frozen=True)
class MarketState:
    """Point-in-time snapshot returned by the periphery ``marketState`` call."""

    bid: FixedPoint
    ask: FixedPoint
    mid: FixedPoint
    volume_bid: FixedPoint
    volume_ask: FixedPoint
    oi_long: FixedPoint
    oi_short: FixedPoint
    cap_oi: FixedPoint
    circuit_breaker_level: FixedPoint
    funding_rate: FixedPoint


@dataclass(frozen=True)
class TradeParameters:
    market_id: str
    collateral: FixedPoint
    leverage: FixedPoint
    slippage: float
    is_long: bool
    trader_address: str


@dataclass(frozen=True)
class OIBalance:
    long: Formatted
    short: Formatted
    # None when both sides are empty and the share is undefined.
    short_percentage_of_total_oi: Optional[str]
    long_percentage_of_total_oi: Optional[str]


@dataclass(frozen=True)
class BidAsk:
    bid: Formatted
    ask: Formatted


@dataclass(frozen=True)
class PriceInfo:
    price: FixedPoint
    min_price: FixedPoint
    # None when the reference bid/ask is zero.
    price_impact_percentage: Optional[float]


@dataclass(frozen=True)
class TradeFlags:
    underwater: bool = False
    exceeds_oi_cap: bool = False
    exceeds_circuit_breaker_cap: bool = False
    balance_insufficient: bool = False
    needs_approval: bool = False
    high_price_impact: bool = False


@dataclass(frozen=True)
class TradeStateResult:
    liquidation_price_estimate: str
    raw_expected_oi: Formatted
    max_input_including_fees: Decimal
    price_info: PriceInfo
    trade_state: TradeState
    flags: TradeFlags = TradeFlags()
