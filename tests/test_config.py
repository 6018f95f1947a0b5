from __future__ import annotations

import pytest
from pydantic import ValidationError

from overlay_sdk.chains import ARBITRUM_SEPOLIA, CHAINS, periphery_address, require_supported_chain
from overlay_sdk.config import OverlaySettings
from overlay_sdk.config_env import resolve_env_file
from overlay_sdk.errors import UnsupportedChainError


def test_defaults_follow_chain_registry():
    settings = OverlaySettings()
    deployment = CHAINS[ARBITRUM_SEPOLIA]
    assert settings.chain_id == ARBITRUM_SEPOLIA
    assert settings.resolved_periphery_address == deployment.periphery_address
    assert settings.resolved_ov_token_address == deployment.ov_token_address
    assert settings.resolved_subgraph_url == deployment.subgraph_url


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("OVL_RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("OVL_PERIPHERY_ADDRESS", "0x" + "A" * 40)
    monkeypatch.setenv("OVL_SUBGRAPH_PAGE_SIZE", "250")
    monkeypatch.setenv("OVL_MARKET_PRICES_API", "https://prices.example/api/")
    settings = OverlaySettings()
    assert settings.rpc_url == "http://localhost:8545"
    assert settings.resolved_periphery_address == "0x" + "a" * 40
    assert settings.subgraph_page_size == 250
    assert settings.resolved_market_prices_api == "https://prices.example/api"


def test_invalid_address_rejected():
    with pytest.raises(ValidationError):
        OverlaySettings(periphery_address="0x1234")


def test_blank_override_falls_back_to_registry():
    settings = OverlaySettings(periphery_address="", subgraph_url="  ")
    assert settings.resolved_periphery_address == CHAINS[ARBITRUM_SEPOLIA].periphery_address
    assert settings.resolved_subgraph_url == CHAINS[ARBITRUM_SEPOLIA].subgraph_url


def test_unknown_chain_has_no_defaults():
    settings = OverlaySettings(chain_id=1)
    assert settings.resolved_periphery_address is None


def test_require_supported_chain():
    assert require_supported_chain(ARBITRUM_SEPOLIA).chain_id == ARBITRUM_SEPOLIA
    with pytest.raises(UnsupportedChainError) as exc_info:
        require_supported_chain(1)
    assert exc_info.value.chain_id == 1


def test_periphery_address_follows_registry():
    assert periphery_address(ARBITRUM_SEPOLIA) == CHAINS[ARBITRUM_SEPOLIA].periphery_address
    with pytest.raises(UnsupportedChainError):
        periphery_address(1)


def test_env_file_resolves_from_working_directory(tmp_path, monkeypatch):
    env_file = tmp_path / ".env.staging"
    env_file.write_text("OVL_SUBGRAPH_PAGE_SIZE=321\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENV", "staging")

    assert resolve_env_file() == env_file
    assert OverlaySettings(_env_file=resolve_env_file()).subgraph_page_size == 321


def test_env_file_defaults_to_cwd_dotenv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENV", "missing")
    assert resolve_env_file() == tmp_path / ".env"
