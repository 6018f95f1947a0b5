"""SDK settings loaded from ``OVL_*`` environment variables and the env file.

Deployment addresses and endpoints default to the chain registry entry for
``chain_id``; any of them can be overridden for forks or new deployments.
"""
from __future__ import annotations

import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .chains import ARBITRUM_SEPOLIA, CHAINS
from .config_env import ENV_FILE

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class OverlaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OVL_",
        env_file=ENV_FILE,
        extra="ignore",
    )

    # --- Network ---
    chain_id: int = Field(
        default=ARBITRUM_SEPOLIA,
        description="Chain id the SDK reads from; must be in the chain registry.",
    )
    rpc_url: str = Field(
        default="https://sepolia-rollup.arbitrum.io/rpc",
        description="JSON-RPC endpoint used for every contract read.",
    )
    request_timeout_s: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for subgraph and prices API requests.",
    )

    # --- Deployment overrides ---
    periphery_address: Optional[str] = Field(
        default=None,
        description="Override for the OverlayV1 state (periphery) contract address.",
    )
    ov_token_address: Optional[str] = Field(
        default=None,
        description="Override for the OV settlement token address.",
    )
    subgraph_url: Optional[str] = Field(
        default=None,
        description="Override for the Overlay subgraph GraphQL endpoint.",
    )
    market_prices_api: Optional[str] = Field(
        default=None,
        description="Override for the market names / prices API base URL.",
    )
    subgraph_page_size: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="Page size (`first`) used when paginating subgraph queries.",
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Log level")

    # --- Helpers ---

    def _deployment_value(self, override: Optional[str], attr: str) -> Optional[str]:
        if override:
            return override
        deployment = CHAINS.get(self.chain_id)
        if deployment is None:
            return None
        return getattr(deployment, attr)

    @property
    def resolved_periphery_address(self) -> Optional[str]:
        return self._deployment_value(self.periphery_address, "periphery_address")

    @property
    def resolved_ov_token_address(self) -> Optional[str]:
        return self._deployment_value(self.ov_token_address, "ov_token_address")

    @property
    def resolved_subgraph_url(self) -> Optional[str]:
        return self._deployment_value(self.subgraph_url, "subgraph_url")

    @property
    def resolved_market_prices_api(self) -> Optional[str]:
        value = self._deployment_value(self.market_prices_api, "market_prices_api")
        return value.rstrip("/") if value else value

    @field_validator("periphery_address", "ov_token_address", mode="before")
    @classmethod
    def _validate_address(cls, v):
        if v is None:
            return v
        v = str(v).strip()
        if not v:
            return None
        if not _ADDRESS_RE.match(v):
            raise ValueError(f"invalid address: {v!r}")
        return v.lower()

    @field_validator("subgraph_url", "market_prices_api", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
