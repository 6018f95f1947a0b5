"""
Trade evaluator

Combines periphery, market and token reads into the numbers a trade form
needs (price, funding, fees, OI, liquidation estimate) and into a single
``TradeState`` for a prospective build.

Every public method checks the chain before touching the network and
resolves the market on each call. Reads that do not depend on each other are
awaited together with ``asyncio.gather``; any failed read fails the call.
"""
from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Optional, Tuple, Union

from .chains import periphery_address as registered_periphery_address
from .errors import (
    CapOIUnavailableError,
    MarketStateUnavailableError,
    OpenInterestUnavailableError,
)
from .formatting import (
    DECIMAL_PRECISION,
    format_fixed_point,
    format_funding_rate_to_daily,
    percentage_of_total,
    to_decimal,
    truncate_decimal,
)
from .models import (
    BidAsk,
    MarketState,
    OIBalance,
    PriceInfo,
    TradeParameters,
    TradeStateResult,
)
from .trade_rules import evaluate_trade_flags, resolve_trade_state
from .types import (
    MarketDirectoryLike,
    MarketReaderLike,
    StateReaderLike,
    TokenReaderLike,
)

logger = logging.getLogger(__name__)

_BPS_BASE = Decimal("10000")


def min_price_with_slippage(price: int, slippage: Union[int, float], is_long: bool) -> int:
    """Worst acceptable fill price for *slippage* percent (1 == 1%).

    Longs accept up to ``price * (100 + slippage)%``, shorts down to
    ``price * (100 - slippage)%``. The result is truncated to an integer.
    """
    pct = Decimal(str(slippage))
    factor = (Decimal(100) + pct) * 100 if is_long else (Decimal(100) - pct) * 100
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return int((Decimal(int(price)) * factor / _BPS_BASE).to_integral_value(rounding=ROUND_DOWN))


def price_impact_percentage(price: int, bid: int, ask: int, is_long: bool) -> Optional[float]:
    """Distance of *price* from the current ask (long) or bid (short), in percent.

    Returns ``None`` when the reference side is zero.
    """
    reference = ask if is_long else bid
    if reference == 0:
        return None
    impact_value = price - ask if is_long else bid - price
    return float(impact_value * 100) / float(reference)


class OverlayTrade:
    def __init__(
        self,
        chain_id: int,
        markets: MarketDirectoryLike,
        state: StateReaderLike,
        market: MarketReaderLike,
        token: TokenReaderLike,
        *,
        periphery_address: Optional[str] = None,
    ) -> None:
        self._chain_id = chain_id
        self._markets = markets
        self._state = state
        self._market = market
        self._token = token
        self._periphery_override = periphery_address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def _periphery(self) -> str:
        registered = registered_periphery_address(self._chain_id)
        return self._periphery_override or registered

    async def _locate(self, market_id: str) -> Tuple[str, str]:
        periphery = self._periphery()
        details = await self._markets.resolve(market_id)
        return periphery, details.market_address

    async def _market_state(self, periphery: str, market: str) -> MarketState:
        state = await self._state.get_market_state(periphery, market)
        if state is None:
            raise MarketStateUnavailableError(market)
        return state

    @staticmethod
    def _format(value: int, decimals: Optional[int]) -> Union[int, str]:
        if decimals is None:
            return value
        return format_fixed_point(value, 18, decimals)

    async def _trading_fee_rate(self, market: str) -> Decimal:
        raw = await self._market.get_trading_fee_rate(market)
        return Decimal(format_fixed_point(raw, 18, 6))

    # ------------------------------------------------------------------
    # Market metrics
    # ------------------------------------------------------------------

    async def get_funding(self, market_id: str) -> str:
        """Daily funding rate as a 2-decimal percentage string."""
        periphery, market = await self._locate(market_id)
        state = await self._market_state(periphery, market)
        return format_funding_rate_to_daily(state.funding_rate, 18, 2)

    async def get_oi_balance(self, market_id: str, decimals: Optional[int] = None) -> OIBalance:
        periphery, market = await self._locate(market_id)
        state = await self._market_state(periphery, market)
        total = state.oi_long + state.oi_short
        if total == 0:
            logger.debug("OI balance undefined for %s: both sides empty", market)
        return OIBalance(
            long=self._format(state.oi_long, decimals),
            short=self._format(state.oi_short, decimals),
            short_percentage_of_total_oi=percentage_of_total(state.oi_short, total),
            long_percentage_of_total_oi=percentage_of_total(state.oi_long, total),
        )

    async def get_price(
        self,
        market_id: str,
        collateral: Optional[int] = None,
        leverage: Optional[int] = None,
        is_long: Optional[bool] = None,
        decimals: Optional[int] = None,
    ) -> Union[int, str]:
        """Mid price, or the ask/bid a trade of this size would fill at.

        Without a full trade (collateral, leverage and side) the current mid
        is returned. Otherwise the trade's OI estimate is converted to a
        fraction of cap OI and the ask (long) or bid (short) at that fraction
        is read, so impact grows with size relative to the cap.
        """
        periphery, market = await self._locate(market_id)

        if collateral is None or leverage is None or is_long is None:
            mid_price = await self._state.get_mid_price(periphery, market)
            return self._format(mid_price, decimals)

        oi_estimated = await self._state.get_oi_estimate(
            periphery, market, collateral, leverage, is_long
        )
        fraction_of_cap_oi = await self._state.get_fraction_of_cap_oi(
            periphery, market, oi_estimated
        )
        if is_long:
            estimated_price = await self._state.get_ask(periphery, market, fraction_of_cap_oi)
        else:
            estimated_price = await self._state.get_bid(periphery, market, fraction_of_cap_oi)
        return self._format(estimated_price, decimals)

    async def get_price_info(
        self,
        market_id: str,
        collateral: int,
        leverage: int,
        slippage: Union[int, float],
        is_long: bool,
    ) -> PriceInfo:
        self._periphery()
        price, bid_ask = await asyncio.gather(
            self.get_price(market_id, collateral, leverage, is_long),
            self.get_bid_and_ask(market_id),
        )
        price = int(price)
        bid = int(bid_ask.bid)
        ask = int(bid_ask.ask)
        return PriceInfo(
            price=price,
            min_price=min_price_with_slippage(price, slippage, is_long),
            price_impact_percentage=price_impact_percentage(price, bid, ask, is_long),
        )

    async def get_bid_and_ask(self, market_id: str, decimals: Optional[int] = None) -> BidAsk:
        periphery, market = await self._locate(market_id)
        state = await self._market_state(periphery, market)
        return BidAsk(
            bid=self._format(state.bid, decimals),
            ask=self._format(state.ask, decimals),
        )

    async def get_max_input_including_fees(
        self,
        market_id: str,
        trader_address: str,
        leverage: int,
    ) -> Decimal:
        """Largest collateral the trader can post once the build fee is paid.

        ``balance - balance * fee_rate * leverage`` in token units, truncated
        (never rounded up) to 18 decimal places.
        """
        _, market = await self._locate(market_id)
        fee_rate, balance_raw = await asyncio.gather(
            self._trading_fee_rate(market),
            self._token.balance(trader_address),
        )
        balance = to_decimal(balance_raw)
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            build_fee = balance * fee_rate * to_decimal(leverage)
            return truncate_decimal(balance - build_fee, 18)

    async def get_fee(self, market_id: str) -> Decimal:
        """Trading fee rate as a percentage."""
        _, market = await self._locate(market_id)
        return await self._trading_fee_rate(market) * 100

    async def get_liquidation_price_estimate(
        self,
        market_id: str,
        collateral: int,
        leverage: int,
        is_long: bool,
    ) -> str:
        periphery, market = await self._locate(market_id)
        liquidation_price = await self._state.get_liquidation_price_estimate(
            periphery, market, collateral, leverage, is_long
        )
        return format_fixed_point(liquidation_price, 18, 5)

    async def get_oi_estimate(
        self,
        market_id: str,
        collateral: int,
        leverage: int,
        is_long: bool,
        decimals: Optional[int] = None,
    ) -> Union[int, str]:
        periphery, market = await self._locate(market_id)
        oi = await self._state.get_oi_estimate(periphery, market, collateral, leverage, is_long)
        return self._format(oi, decimals)

    # ------------------------------------------------------------------
    # Trade state
    # ------------------------------------------------------------------

    async def get_trade_state(
        self,
        market_id: str,
        collateral: int,
        leverage: int,
        slippage: Union[int, float],
        is_long: bool,
        trader_address: str,
        decimals: Optional[int] = None,
    ) -> TradeStateResult:
        """Classify a prospective build and return the values behind it.

        Also returns the liquidation estimate, expected OI, max input after
        fees and price info computed on the way, so callers do not need to
        repeat those reads.
        """
        periphery, market = await self._locate(market_id)

        mid_price, liquidation_price_estimate = await asyncio.gather(
            self.get_price(market_id, decimals=5),
            self.get_liquidation_price_estimate(market_id, collateral, leverage, is_long),
        )

        (oi_long, oi_short), cap_oi, circuit_breaker_level = await asyncio.gather(
            self._state.get_ois(periphery, market),
            self._state.get_cap_oi(periphery, market),
            self._state.get_circuit_breaker_level(periphery, market),
        )
        if oi_long is None or oi_short is None:
            raise OpenInterestUnavailableError(market)
        if cap_oi is None:
            raise CapOIUnavailableError(market)

        raw_expected_oi = await self._state.get_oi_estimate(
            periphery, market, collateral, leverage, is_long
        )

        min_collateral_raw, max_input_including_fees, current_allowance = await asyncio.gather(
            self._market.get_min_collateral(market),
            self.get_max_input_including_fees(market_id, trader_address, leverage),
            self._token.allowance(trader_address, market),
        )

        price_info = await self.get_price_info(market_id, collateral, leverage, slippage, is_long)

        flags = evaluate_trade_flags(
            is_long=is_long,
            mid_price=Decimal(mid_price),
            liquidation_price=Decimal(liquidation_price_estimate),
            expected_oi=raw_expected_oi,
            oi_long=oi_long,
            oi_short=oi_short,
            cap_oi=cap_oi,
            circuit_breaker_level=circuit_breaker_level,
            max_input=max_input_including_fees,
            min_collateral=to_decimal(min_collateral_raw),
            allowance=current_allowance,
            collateral=collateral,
            price_impact_percentage=price_info.price_impact_percentage,
            slippage=slippage,
        )
        trade_state = resolve_trade_state(flags)
        logger.debug(
            "Trade state market=%s long=%s collateral=%s leverage=%s -> %s (%s)",
            market,
            is_long,
            collateral,
            leverage,
            trade_state.value,
            flags,
        )

        return TradeStateResult(
            liquidation_price_estimate=liquidation_price_estimate,
            raw_expected_oi=self._format(raw_expected_oi, decimals),
            max_input_including_fees=max_input_including_fees,
            price_info=price_info,
            trade_state=trade_state,
            flags=flags,
        )

    async def evaluate(
        self,
        params: TradeParameters,
        decimals: Optional[int] = None,
    ) -> TradeStateResult:
        return await self.get_trade_state(
            params.market_id,
            params.collateral,
            params.leverage,
            params.slippage,
            params.is_long,
            params.trader_address,
            decimals,
        )
