from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from typing import Any

import requests
from dotenv import load_dotenv
from web3.exceptions import Web3Exception

from .config import OverlaySettings
from .errors import OverlaySDKError
from .formatting import to_fixed_point
from .sdk import OverlaySDK, create_sdk

# Failures reported as a JSON error envelope instead of a traceback.
_REPORTED_ERRORS = (
    OverlaySDKError,
    requests.RequestException,
    Web3Exception,
    asyncio.TimeoutError,
    OSError,
)


def _print_json(payload: Any) -> None:
    if is_dataclass(payload):
        payload = asdict(payload)
    print(json.dumps(payload, sort_keys=True, default=str))


def _configure_logging(settings: OverlaySettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_trade_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--collateral", required=True, help="Collateral in OV (e.g. 10.5)")
    parser.add_argument("--leverage", required=True, help="Leverage (e.g. 2)")
    side = parser.add_mutually_exclusive_group(required=True)
    side.add_argument("--long", dest="is_long", action="store_true")
    side.add_argument("--short", dest="is_long", action="store_false")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read-only Overlay market metrics")
    parser.add_argument("--chain-id", type=int, default=None, help="Override OVL_CHAIN_ID")
    parser.add_argument("--rpc-url", default=None, help="Override OVL_RPC_URL")
    sub = parser.add_subparsers(dest="command", required=True)

    funding_p = sub.add_parser("funding", help="Daily funding rate (%)")
    funding_p.add_argument("market", help="Market address or name")

    oi_p = sub.add_parser("oi-balance", help="Long/short open interest split")
    oi_p.add_argument("market")
    oi_p.add_argument("--decimals", type=int, default=4)

    price_p = sub.add_parser("price", help="Mid price, or estimated fill price for a trade")
    price_p.add_argument("market")
    price_p.add_argument("--decimals", type=int, default=4)
    price_p.add_argument("--collateral", default=None)
    price_p.add_argument("--leverage", default=None)
    price_side = price_p.add_mutually_exclusive_group()
    price_side.add_argument("--long", dest="is_long", action="store_true", default=None)
    price_side.add_argument("--short", dest="is_long", action="store_false")

    bid_ask_p = sub.add_parser("bid-ask", help="Current bid and ask")
    bid_ask_p.add_argument("market")
    bid_ask_p.add_argument("--decimals", type=int, default=4)

    fee_p = sub.add_parser("fee", help="Trading fee rate (%)")
    fee_p.add_argument("market")

    state_p = sub.add_parser("trade-state", help="Evaluate a prospective build")
    state_p.add_argument("market")
    _add_trade_args(state_p)
    state_p.add_argument("--slippage", type=float, default=1.0, help="Slippage tolerance in %%")
    state_p.add_argument("--trader", required=True, help="Trader address")
    state_p.add_argument("--decimals", type=int, default=4)

    positions_p = sub.add_parser("positions", help="Open positions from the subgraph")
    positions_p.add_argument("account")

    unwinds_p = sub.add_parser("unwinds", help="Unwound positions from the subgraph")
    unwinds_p.add_argument("account")
    return parser


async def _run(sdk: OverlaySDK, args: argparse.Namespace) -> Any:
    trade = sdk.trade
    if args.command == "funding":
        return {"market": args.market, "daily_funding_percent": await trade.get_funding(args.market)}
    if args.command == "oi-balance":
        return await trade.get_oi_balance(args.market, args.decimals)
    if args.command == "price":
        collateral = to_fixed_point(args.collateral) if args.collateral is not None else None
        leverage = to_fixed_point(args.leverage) if args.leverage is not None else None
        price = await trade.get_price(
            args.market, collateral, leverage, args.is_long, args.decimals
        )
        return {"market": args.market, "price": price}
    if args.command == "bid-ask":
        return await trade.get_bid_and_ask(args.market, args.decimals)
    if args.command == "fee":
        return {"market": args.market, "fee_percent": await trade.get_fee(args.market)}
    if args.command == "trade-state":
        return await trade.get_trade_state(
            args.market,
            to_fixed_point(args.collateral),
            to_fixed_point(args.leverage),
            args.slippage,
            args.is_long,
            args.trader,
            args.decimals,
        )
    if args.command == "positions":
        return await sdk.get_open_positions(args.account)
    if args.command == "unwinds":
        return await sdk.get_unwind_positions(args.account)
    raise SystemExit(f"Unsupported command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    load_dotenv()

    overrides = {}
    if args.chain_id is not None:
        overrides["chain_id"] = args.chain_id
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    settings = OverlaySettings(**overrides)
    _configure_logging(settings)

    try:
        sdk = create_sdk(settings)
        payload = asyncio.run(_run(sdk, args))
    except _REPORTED_ERRORS as exc:
        _print_json({"ok": False, "error": str(exc)})
        return 1
    _print_json(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
