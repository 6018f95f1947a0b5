"""
Overlay subgraph and market-names API helpers.

Plain synchronous ``requests`` calls; async callers run them with
``asyncio.to_thread``. List queries are paginated with ``first``/``skip``
until a short page comes back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import requests

from .errors import SubgraphQueryError

logger = logging.getLogger(__name__)

USER_AGENT = "overlay-sdk/0.1"
DEFAULT_PAGE_SIZE = 1000
DEFAULT_TIMEOUT_S = 10.0

SubgraphUrl = Union[str, Mapping[str, Any]]

OPEN_POSITIONS_QUERY = """
query openPositions($account: ID!, $first: Int, $skip: Int) {
  account(id: $account) {
    positions(
      where: { isLiquidated: false, currentOi_gt: "0" }
      first: $first
      skip: $skip
      orderBy: createdAtTimestamp
      orderDirection: desc
    ) {
      id
      positionId
      market { id feedAddress }
      createdAtTimestamp
      entryPrice
      isLong
      leverage
      initialCollateral
      currentOi
      currentDebt
      fractionUnwound
    }
  }
}
"""

UNWIND_POSITIONS_QUERY = """
query unwinds($account: ID!, $first: Int, $skip: Int) {
  account(id: $account) {
    unwinds(first: $first, skip: $skip, orderBy: timestamp, orderDirection: desc) {
      id
      position { id positionId entryPrice isLong leverage initialCollateral }
      market { id feedAddress }
      timestamp
      price
      fraction
      size
      pnl
      value
      fractionOfPosition
    }
  }
}
"""

ACTIVE_MARKETS_QUERY = """
query activeMarkets {
  markets(where: { isShutdown: false }) {
    id
    feedAddress
    createdAtTimestamp
    k
    capOi
    circuitBreakerMintTarget
    tradingFeeRate
    minCollateral
  }
}
"""


def parse_subgraph_url(value: SubgraphUrl) -> Dict[str, Any]:
    if isinstance(value, str):
        return {"url": value, "request_headers": {}}
    return {
        "url": value["url"],
        "request_headers": dict(value.get("request_headers") or {}),
    }


def request_subgraph(
    url: SubgraphUrl,
    document: str,
    variables: Optional[Mapping[str, Any]] = None,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> Dict[str, Any]:
    target = parse_subgraph_url(url)
    headers = {"User-Agent": USER_AGENT, "Content-Type": "application/json"}
    headers.update(target["request_headers"])
    resp = requests.post(
        target["url"],
        json={"query": document, "variables": dict(variables or {})},
        headers=headers,
        timeout=timeout_s,
    )
    resp.raise_for_status()
    payload = resp.json()

    if not isinstance(payload, dict):
        raise SubgraphQueryError(target["url"], f"unexpected payload: {payload!r}")
    if payload.get("errors"):
        raise SubgraphQueryError(target["url"], payload["errors"])
    return payload.get("data") or {}


def request_all_with_step(
    url: SubgraphUrl,
    document: str,
    variables: Mapping[str, Any],
    step: int,
    extract_array: Callable[[Optional[Dict[str, Any]]], List[Dict[str, Any]]],
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> List[Dict[str, Any]]:
    """Fetch every page of a list query, ``step`` rows at a time."""
    if step < 1:
        raise ValueError(f"step must be positive, got {step}")
    skip = 0
    results: List[Dict[str, Any]] = []
    while True:
        page = request_subgraph(
            url,
            document,
            {**variables, "first": step, "skip": skip},
            timeout_s=timeout_s,
        )
        rows = extract_array(page)
        results.extend(rows)
        if len(rows) < step:
            break
        skip += step
    logger.debug("Subgraph pagination done: %d rows (step=%d)", len(results), step)
    return results


def _account_list(key: str) -> Callable[[Optional[Dict[str, Any]]], List[Dict[str, Any]]]:
    def extract(result: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        account = (result or {}).get("account") or {}
        return list(account.get(key) or [])

    return extract


def get_open_positions(
    url: SubgraphUrl,
    account: str,
    first: Optional[int] = None,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> List[Dict[str, Any]]:
    return request_all_with_step(
        url,
        OPEN_POSITIONS_QUERY,
        {"account": account.lower()},
        first or DEFAULT_PAGE_SIZE,
        _account_list("positions"),
        timeout_s=timeout_s,
    )


def get_unwind_positions(
    url: SubgraphUrl,
    account: str,
    first: Optional[int] = None,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> List[Dict[str, Any]]:
    return request_all_with_step(
        url,
        UNWIND_POSITIONS_QUERY,
        {"account": account.lower()},
        first or DEFAULT_PAGE_SIZE,
        _account_list("unwinds"),
        timeout_s=timeout_s,
    )


def get_active_markets(
    url: SubgraphUrl,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> Optional[List[Dict[str, Any]]]:
    """Active markets from the subgraph, or ``None`` if the query fails."""
    try:
        data = request_subgraph(url, ACTIVE_MARKETS_QUERY, timeout_s=timeout_s)
    except (requests.RequestException, SubgraphQueryError, ValueError) as exc:
        logger.warning("Error fetching active markets data: %s", exc)
        return None
    return list(data.get("markets") or [])


def get_market_names(
    api_base: str,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    strict: bool = False,
) -> Dict[str, str]:
    """Map of lower-cased market address -> display name.

    Failures are logged and give an empty map, unless *strict* is set: then
    transport errors propagate and a malformed payload raises
    ``SubgraphQueryError``.
    """
    url = f"{api_base.rstrip('/')}/markets"
    try:
        resp = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout_s)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        if strict:
            raise
        logger.warning("Error fetching market names: %s", exc)
        return {}

    if not isinstance(payload, list):
        if strict:
            raise SubgraphQueryError(url, f"unexpected payload: {payload!r}")
        logger.warning("Unexpected market names payload (not a list): %r", payload)
        return {}

    names: Dict[str, str] = {}
    for row in payload:
        if not isinstance(row, dict):
            continue
        address = str(row.get("address") or "").lower()
        name = row.get("name")
        if address and name:
            names[address] = str(name)
    return names


@dataclass
class SubgraphClient:
    """Endpoint bundle for one deployment."""

    url: SubgraphUrl
    market_prices_api: Optional[str] = None
    page_size: int = DEFAULT_PAGE_SIZE
    timeout_s: float = DEFAULT_TIMEOUT_S

    def open_positions(self, account: str) -> List[Dict[str, Any]]:
        return get_open_positions(self.url, account, self.page_size, timeout_s=self.timeout_s)

    def unwind_positions(self, account: str) -> List[Dict[str, Any]]:
        return get_unwind_positions(self.url, account, self.page_size, timeout_s=self.timeout_s)

    def active_markets(self) -> Optional[List[Dict[str, Any]]]:
        return get_active_markets(self.url, timeout_s=self.timeout_s)

    def market_names(self, strict: bool = False) -> Dict[str, str]:
        if not self.market_prices_api:
            return {}
        return get_market_names(self.market_prices_api, timeout_s=self.timeout_s, strict=strict)
