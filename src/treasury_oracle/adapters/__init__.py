from __future__ import annotations

from .balance_adapters import ADAPTER_REGISTRY, get_adapter_class
from .price_adapters import get_price_adapter

__all__ = ["ADAPTER_REGISTRY", "get_adapter_class", "get_price_adapter"]
