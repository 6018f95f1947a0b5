"""Exception taxonomy for the Overlay SDK.

Every error raised by the SDK itself derives from :class:`OverlaySDKError`.
Transport failures from ``web3`` or ``requests`` are not wrapped and reach
the caller unmodified.
"""
from __future__ import annotations


class OverlaySDKError(RuntimeError):
    pass


class UnsupportedChainError(OverlaySDKError):
    """The active chain id has no known periphery deployment."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chainId: {chain_id}")
        self.chain_id = chain_id


class MarketNotFoundError(OverlaySDKError):
    def __init__(self, market_id: str) -> None:
        super().__init__(f"Market not found: {market_id}")
        self.market_id = market_id


class MarketStateUnavailableError(OverlaySDKError):
    def __init__(self, market_address: str) -> None:
        super().__init__(f"Market state not found for {market_address}")
        self.market_address = market_address


class OpenInterestUnavailableError(OverlaySDKError):
    def __init__(self, market_address: str) -> None:
        super().__init__(f"OIs not found for {market_address}")
        self.market_address = market_address


class CapOIUnavailableError(OverlaySDKError):
    def __init__(self, market_address: str) -> None:
        super().__init__(f"Cap OI not found for {market_address}")
        self.market_address = market_address


class SubgraphQueryError(OverlaySDKError):
    """The subgraph answered with GraphQL ``errors`` instead of data."""

    def __init__(self, url: str, errors) -> None:
        super().__init__(f"Subgraph query failed ({url}): {errors!r}")
        self.url = url
        self.errors = errors
