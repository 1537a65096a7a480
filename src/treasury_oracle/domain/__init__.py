"""Domain models for the treasury oracle."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChainFamily(str, Enum):
    BITCOIN = "bitcoin"
    EVM = "evm"
    SOLANA = "solana"
    XRP = "xrp"
    TON = "ton"


@dataclass(frozen=True)
class ChainEndpoint:
    """One RPC or REST base URL, optionally labelled as a sub-chain."""

    url: str
    label: str | None = None


@dataclass(frozen=True)
class ChainEndpointConfig:
    """Static description of one treasury chain."""

    chain_id: str
    name: str
    symbol: str
    family: ChainFamily
    address: str
    endpoints: tuple[ChainEndpoint, ...]
    decimals: int
    color: str = ""
    icon: str = ""

    def __post_init__(self) -> None:
        if not self.endpoints:
            raise ValueError(f"Chain {self.chain_id} has no endpoints configured")

    @property
    def divisor(self) -> int:
        return 10**self.decimals

    @property
    def sub_chains(self) -> tuple[str, ...] | None:
        """Labels of the networks summed into this entry, if more than one."""
        if len(self.endpoints) < 2:
            return None
        return tuple(ep.label or ep.url for ep in self.endpoints)


def _non_negative(value: float) -> float:
    if not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


@dataclass(frozen=True)
class ChainBalance:
    """Native balance of one treasury chain valued in USD."""

    chain_id: str
    name: str
    symbol: str
    native_balance: float
    price: float
    usd_value: float
    color: str = ""
    icon: str = ""
    sub_chains: tuple[str, ...] | None = None

    @classmethod
    def from_config(
        cls, chain: ChainEndpointConfig, native_balance: float, price: float
    ) -> ChainBalance:
        balance = _non_negative(native_balance)
        unit_price = _non_negative(price)
        return cls(
            chain_id=chain.chain_id,
            name=chain.name,
            symbol=chain.symbol,
            native_balance=balance,
            price=unit_price,
            usd_value=balance * unit_price,
            color=chain.color,
            icon=chain.icon,
            sub_chains=chain.sub_chains,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.chain_id,
            "name": self.name,
            "symbol": self.symbol,
            "color": self.color,
            "icon": self.icon,
            "nativeBalance": self.native_balance,
            "price": self.price,
            "usdValue": self.usd_value,
            "subChains": list(self.sub_chains) if self.sub_chains else None,
        }


@dataclass(frozen=True)
class TreasurySnapshot:
    """One complete aggregation result covering every configured chain."""

    chains: tuple[ChainBalance, ...]
    total_usd: float
    progress_pct: float
    last_updated: float
    is_testnet: bool = False
    stale: bool = False
    _index: dict[str, ChainBalance] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        self._index.update({c.chain_id: c for c in self.chains})

    @property
    def prices(self) -> dict[str, float]:
        """Unit USD price per chain id."""
        return {c.chain_id: c.price for c in self.chains}

    def get(self, chain_id: str) -> ChainBalance | None:
        return self._index.get(chain_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "chains": [c.as_dict() for c in self.chains],
            "totalUsd": self.total_usd,
            "progressPct": self.progress_pct,
            "lastUpdated": self.last_updated,
            "isTestnet": self.is_testnet,
            "stale": self.stale,
        }
