"""Resolved runtime configuration.

:class:`TreasurySettings` is turned into a :class:`TreasuryConfig` exactly
once at startup. Every other component receives the resolved config and never
branches on the network switch itself.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from .constants import (
    BITCOIN_DECIMALS,
    CHAIN_DISPLAY,
    COINGECKO_IDS,
    ETHEREUM_SUB_CHAINS,
    ETHEREUM_TESTNET_SUB_CHAINS,
    EVM_DECIMALS,
    MAINNET_ENDPOINTS,
    MAINNET_TREASURY,
    SOLANA_DECIMALS,
    TESTNET_ENDPOINTS,
    TESTNET_PRICES,
    TESTNET_TREASURY,
    TON_DECIMALS,
    XRP_DECIMALS,
    NetworkEndpoints,
    TreasuryAddresses,
)
from .domain import ChainEndpoint, ChainEndpointConfig, ChainFamily
from .processors.bonding_curve import CurveConfig
from .settings import Network, TreasurySettings


@dataclass(frozen=True)
class TreasuryConfig:
    network: Network
    chains: tuple[ChainEndpointConfig, ...]
    fetch_timeout: float
    refresh_interval: float
    coingecko_api_url: str
    coingecko_ids: Mapping[str, str]
    static_prices: Mapping[str, float]
    curve: CurveConfig = field(default_factory=CurveConfig)
    coingecko_api_key: str | None = field(default=None, repr=False)
    price_fallback_to_static: bool = False

    @property
    def is_testnet(self) -> bool:
        return self.network == Network.TESTNET

    @property
    def fund_target(self) -> float:
        return self.curve.fund_target

    @property
    def symbols(self) -> list[str]:
        """Distinct ticker symbols in configuration order."""
        return list(dict.fromkeys(chain.symbol for chain in self.chains))

    def get_chain(self, chain_id: str) -> ChainEndpointConfig:
        for chain in self.chains:
            if chain.chain_id == chain_id.upper():
                return chain
        raise ValueError(f"Unknown chain '{chain_id}'")

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = asdict(self)
        if self.coingecko_api_key:
            data["coingecko_api_key"] = "***redacted***"
        return data


def _merge_endpoints(
    defaults: NetworkEndpoints, overrides: Mapping[str, str]
) -> NetworkEndpoints:
    evm_rpcs = dict(defaults["evm_rpcs"])
    merged: dict[str, Any] = {k: v for k, v in defaults.items() if k != "evm_rpcs"}
    for key, url in overrides.items():
        key = key.lower()
        if key in merged:
            merged[key] = url
        elif key in evm_rpcs:
            evm_rpcs[key] = url
        else:
            known = sorted([*merged, *evm_rpcs])
            raise ValueError(
                f"Unknown endpoint override '{key}'. Available: {', '.join(known)}"
            )
    merged["evm_rpcs"] = evm_rpcs
    return NetworkEndpoints(**merged)


def _merge_treasury(
    defaults: TreasuryAddresses, overrides: Mapping[str, str]
) -> TreasuryAddresses:
    merged: dict[str, str] = dict(defaults)
    for key, address in overrides.items():
        if key.upper() not in merged:
            raise ValueError(
                f"Unknown treasury override '{key}'. Available: {', '.join(merged)}"
            )
        merged[key.upper()] = address
    return TreasuryAddresses(**merged)  # type: ignore[typeddict-item]


def build_chain_table(
    network: Network,
    treasury: TreasuryAddresses,
    endpoints: NetworkEndpoints,
) -> tuple[ChainEndpointConfig, ...]:
    """Build the eight treasury chains for a network."""
    testnet = network == Network.TESTNET
    rpcs = endpoints["evm_rpcs"]
    sub_chain_labels = ETHEREUM_TESTNET_SUB_CHAINS if testnet else ETHEREUM_SUB_CHAINS

    sources: dict[str, tuple[ChainFamily, str, tuple[ChainEndpoint, ...], int]] = {
        "BITCOIN": (
            ChainFamily.BITCOIN,
            treasury["BITCOIN"],
            (ChainEndpoint(endpoints["bitcoin_api"]),),
            BITCOIN_DECIMALS,
        ),
        "ETHEREUM": (
            ChainFamily.EVM,
            treasury["EVM"],
            tuple(
                ChainEndpoint(rpcs[key], label)
                for key, label in sub_chain_labels.items()
            ),
            EVM_DECIMALS,
        ),
        "BSC": (
            ChainFamily.EVM,
            treasury["EVM"],
            (ChainEndpoint(rpcs["bsc"]),),
            EVM_DECIMALS,
        ),
        "SOLANA": (
            ChainFamily.SOLANA,
            treasury["SOLANA"],
            (ChainEndpoint(endpoints["solana_rpc"]),),
            SOLANA_DECIMALS,
        ),
        "XRP": (
            ChainFamily.XRP,
            treasury["XRP"],
            (ChainEndpoint(endpoints["xrp_api"]),),
            XRP_DECIMALS,
        ),
        "TON": (
            ChainFamily.TON,
            treasury["TON"],
            (ChainEndpoint(endpoints["ton_api"]),),
            TON_DECIMALS,
        ),
        "LUX": (
            ChainFamily.EVM,
            treasury["LUX"],
            (ChainEndpoint(rpcs["lux"]),),
            EVM_DECIMALS,
        ),
        "ZOO": (
            ChainFamily.EVM,
            treasury["ZOO"],
            (ChainEndpoint(rpcs["zoo"]),),
            EVM_DECIMALS,
        ),
    }

    chains = []
    for chain_id, display in CHAIN_DISPLAY.items():
        family, address, chain_endpoints, decimals = sources[chain_id]
        chains.append(
            ChainEndpointConfig(
                chain_id=chain_id,
                name=display["testnet_name"] if testnet else display["name"],
                symbol=display["symbol"],
                family=family,
                address=address,
                endpoints=chain_endpoints,
                decimals=decimals,
                color=display["color"],
                icon=display["icon"],
            )
        )
    return tuple(chains)


def resolve_config(settings: TreasurySettings) -> TreasuryConfig:
    """Resolve settings into the immutable config used by every component."""
    testnet = settings.is_testnet
    treasury = _merge_treasury(
        TESTNET_TREASURY if testnet else MAINNET_TREASURY,
        settings.treasury_overrides,
    )
    endpoints = _merge_endpoints(
        TESTNET_ENDPOINTS if testnet else MAINNET_ENDPOINTS,
        settings.endpoint_overrides,
    )
    pricing = settings.pricing
    curve = CurveConfig(
        total_supply=pricing.total_supply,
        sale_supply=pricing.sale_supply,
        fund_target=pricing.fund_target,
        min_price=pricing.min_price,
        max_price=pricing.max_price,
        allocations=pricing.allocations,
        chain_aliases=pricing.chain_aliases,
    )
    coingecko_ids = {
        **COINGECKO_IDS,
        **{k.upper(): v for k, v in settings.coingecko_ids.items()},
    }
    api_key = settings.coingecko_api_key

    return TreasuryConfig(
        network=settings.network,
        chains=build_chain_table(settings.network, treasury, endpoints),
        fetch_timeout=settings.fetch_timeout,
        refresh_interval=settings.refresh_interval,
        coingecko_api_url=settings.coingecko_api_url.rstrip("/"),
        coingecko_ids=coingecko_ids,
        static_prices=dict(TESTNET_PRICES),
        curve=curve,
        coingecko_api_key=api_key.get_secret_value() if api_key else None,
        price_fallback_to_static=settings.price_fallback_to_static,
    )
