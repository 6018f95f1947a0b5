"""Ordered trade-state rules.

Rules are evaluated in list order starting from ``TradeState.BUILD``; every
matching rule overwrites the previous result, so the last match wins.
A position that is both underwater and high-impact therefore reports
``BUILD_HIGH_PRICE_IMPACT``.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional, Sequence, Tuple

from .models import TradeFlags, TradeState

ONE = 10**18

TradeStateRule = Tuple[Callable[[TradeFlags], bool], TradeState]

TRADE_STATE_RULES: Tuple[TradeStateRule, ...] = (
    (lambda f: f.underwater, TradeState.POSITION_UNDERWATER),
    (lambda f: f.exceeds_oi_cap, TradeState.EXCEEDS_OI_CAP),
    (lambda f: f.exceeds_circuit_breaker_cap, TradeState.EXCEEDS_CIRCUIT_BREAKER_OI_CAP),
    (lambda f: f.balance_insufficient, TradeState.OVL_BALANCE_BELOW_MINIMUM),
    (lambda f: f.needs_approval, TradeState.NEEDS_APPROVAL),
    (lambda f: f.high_price_impact, TradeState.BUILD_HIGH_PRICE_IMPACT),
)


def resolve_trade_state(
    flags: TradeFlags,
    rules: Sequence[TradeStateRule] = TRADE_STATE_RULES,
) -> TradeState:
    state = TradeState.BUILD
    for predicate, outcome in rules:
        if predicate(flags):
            state = outcome
    return state


def evaluate_trade_flags(
    *,
    is_long: bool,
    mid_price: Decimal,
    liquidation_price: Decimal,
    expected_oi: int,
    oi_long: int,
    oi_short: int,
    cap_oi: int,
    circuit_breaker_level: int,
    max_input: Decimal,
    min_collateral: Decimal,
    allowance: int,
    collateral: int,
    price_impact_percentage: Optional[float],
    slippage: float,
) -> TradeFlags:
    """Derive the trade-state flags from already-fetched market values.

    OI comparisons are strict: landing exactly on the cap (or on the
    circuit-breaker cap) is allowed. ``circuit_breaker_level`` is a fraction
    of cap OI scaled by 1e18.
    """
    if is_long:
        underwater = liquidation_price > mid_price
        post_trade_oi = expected_oi + oi_long
    else:
        underwater = liquidation_price < mid_price
        post_trade_oi = expected_oi + oi_short

    circuit_breaker_cap = cap_oi * circuit_breaker_level // ONE

    return TradeFlags(
        underwater=underwater,
        exceeds_oi_cap=post_trade_oi > cap_oi,
        exceeds_circuit_breaker_cap=post_trade_oi > circuit_breaker_cap,
        balance_insufficient=max_input < min_collateral,
        needs_approval=allowance < collateral,
        high_price_impact=(
            price_impact_percentage is not None
            and price_impact_percentage - float(slippage) > 0
        ),
    )
