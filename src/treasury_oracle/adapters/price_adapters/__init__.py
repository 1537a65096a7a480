from __future__ import annotations

from ...config import TreasuryConfig
from .base import BasePriceAdapter
from .coingecko import CoinGeckoAdapter
from .static import StaticPriceAdapter


def get_price_adapter(config: TreasuryConfig) -> BasePriceAdapter:
    """Pick the price source for the resolved network, once, at startup."""
    if config.is_testnet:
        return StaticPriceAdapter(config)
    return CoinGeckoAdapter(config)


__all__ = [
    "BasePriceAdapter",
    "CoinGeckoAdapter",
    "StaticPriceAdapter",
    "get_price_adapter",
]
