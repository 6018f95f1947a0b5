from __future__ import annotations

import json
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import requests
from web3.exceptions import ContractLogicError

from overlay_sdk import cli
from overlay_sdk.errors import MarketNotFoundError
from overlay_sdk.models import PriceInfo, TradeState, TradeStateResult

E18 = 10**18
TRADER = "0x" + "2" * 40


def _fake_sdk(**trade_methods):
    return SimpleNamespace(
        trade=SimpleNamespace(**{name: AsyncMock(**kw) for name, kw in trade_methods.items()}),
    )


def test_funding_prints_json(capsys):
    sdk = _fake_sdk(get_funding={"return_value": "0.09"})
    with patch.object(cli, "create_sdk", return_value=sdk):
        assert cli.main(["funding", "ETH/USD"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"daily_funding_percent": "0.09", "market": "ETH/USD"}


def test_trade_state_parses_amounts(capsys):
    result = TradeStateResult(
        liquidation_price_estimate="500.00000",
        raw_expected_oi="10.0000",
        max_input_including_fees=Decimal("99.85"),
        price_info=PriceInfo(price=1012 * E18, min_price=1022 * E18, price_impact_percentage=0.2),
        trade_state=TradeState.BUILD,
    )
    sdk = _fake_sdk(get_trade_state={"return_value": result})
    argv = [
        "trade-state", "ETH/USD",
        "--collateral", "10", "--leverage", "1.5", "--long",
        "--slippage", "0.5", "--trader", TRADER,
    ]
    with patch.object(cli, "create_sdk", return_value=sdk):
        assert cli.main(argv) == 0

    sdk.trade.get_trade_state.assert_awaited_once_with(
        "ETH/USD", 10 * E18, 15 * 10**17, 0.5, True, TRADER, 4
    )
    payload = json.loads(capsys.readouterr().out)
    assert payload["trade_state"] == "Build"
    assert payload["max_input_including_fees"] == "99.85"


def test_sdk_errors_exit_non_zero(capsys):
    sdk = _fake_sdk(get_fee={"side_effect": MarketNotFoundError("NOPE")})
    with patch.object(cli, "create_sdk", return_value=sdk):
        assert cli.main(["fee", "NOPE"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is False
    assert "NOPE" in payload["error"]


def test_transport_errors_exit_non_zero(capsys):
    sdk = _fake_sdk(get_funding={"side_effect": requests.ConnectionError("subgraph unreachable")})
    with patch.object(cli, "create_sdk", return_value=sdk):
        assert cli.main(["funding", "ETH/USD"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"ok": False, "error": "subgraph unreachable"}


def test_contract_errors_exit_non_zero(capsys):
    sdk = _fake_sdk(get_fee={"side_effect": ContractLogicError("execution reverted")})
    with patch.object(cli, "create_sdk", return_value=sdk):
        assert cli.main(["fee", "ETH/USD"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is False
    assert "execution reverted" in payload["error"]
