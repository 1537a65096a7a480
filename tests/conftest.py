from __future__ import annotations

import pytest

from treasury_oracle.config import TreasuryConfig, resolve_config
from treasury_oracle.settings import Network, TreasurySettings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep user config files and TREASURY_ORACLE_* variables out of tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in (
        "TREASURY_ORACLE_CONFIG",
        "TREASURY_ORACLE_NETWORK",
        "TREASURY_ORACLE_TESTNET",
        "TREASURY_ORACLE_FETCH_TIMEOUT",
        "TREASURY_ORACLE_COINGECKO_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_config():
    def _make(**kwargs) -> TreasuryConfig:
        return resolve_config(TreasurySettings(**kwargs))

    return _make


@pytest.fixture
def config(make_config) -> TreasuryConfig:
    return make_config(network=Network.MAINNET)


@pytest.fixture
def testnet_config(make_config) -> TreasuryConfig:
    return make_config(network=Network.TESTNET)
