# Minimal ABI fragments for the Overlay V1 reads the SDK performs.


def _view(name, inputs, outputs):
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


_MARKET = ("market", "address")
_TRADE = [_MARKET, ("collateral", "uint256"), ("leverage", "uint256"), ("isLong", "bool")]

# ===== OverlayV1State (periphery) =====

OVERLAY_V1_STATE_ABI = [
    {
        "type": "function",
        "name": "marketState",
        "stateMutability": "view",
        "inputs": [{"name": "market", "type": "address"}],
        "outputs": [
            {
                "name": "state_",
                "type": "tuple",
                "components": [
                    {"name": "bid", "type": "uint256"},
                    {"name": "ask", "type": "uint256"},
                    {"name": "mid", "type": "uint256"},
                    {"name": "volumeBid", "type": "uint256"},
                    {"name": "volumeAsk", "type": "uint256"},
                    {"name": "oiLong", "type": "uint256"},
                    {"name": "oiShort", "type": "uint256"},
                    {"name": "capOi", "type": "uint256"},
                    {"name": "circuitBreakerLevel", "type": "uint256"},
                    {"name": "fundingRate", "type": "int256"},
                ],
            }
        ],
    },
    _view("mid", [_MARKET], [("mid_", "uint256")]),
    _view("bid", [_MARKET, ("fractionOfCapOi", "uint256")], [("bid_", "uint256")]),
    _view("ask", [_MARKET, ("fractionOfCapOi", "uint256")], [("ask_", "uint256")]),
    _view("ois", [_MARKET], [("oiLong_", "uint256"), ("oiShort_", "uint256")]),
    _view("capOi", [_MARKET], [("capOi_", "uint256")]),
    _view("circuitBreakerLevel", [_MARKET], [("circuitBreakerLevel_", "uint256")]),
    _view("fractionOfCapOi", [_MARKET, ("oi", "uint256")], [("fractionOfCapOi_", "uint256")]),
    _view("oiEstimate", _TRADE, [("oi_", "uint256")]),
    _view("liquidationPriceEstimate", _TRADE, [("liquidationPrice_", "uint256")]),
]

# ===== OverlayV1Market =====

# Index into Risk.Parameters.
RISK_PARAM_TRADING_FEE_RATE = 11
RISK_PARAM_MIN_COLLATERAL = 12

OVERLAY_V1_MARKET_ABI = [
    _view("params", [("idx", "uint256")], [("", "uint256")]),
]

# ===== OV token (ERC20) =====

ERC20_ABI = [
    _view("balanceOf", [("account", "address")], [("", "uint256")]),
    _view("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")]),
]
