from __future__ import annotations

import math
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Any

from ...config import TreasuryConfig


class BasePriceAdapter(ABC):
    """Abstract base class for USD price adapters."""

    def __init__(self, config: TreasuryConfig):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_prices(
        self, symbols: list[str], *, executor: Executor | None = None
    ) -> dict[str, float]:
        """Fetch USD unit prices for the given ticker symbols.

        Must return an entry for every requested symbol, keyed exactly as
        requested, and never raise; unknown or failed symbols are priced 0.0.
        Blocking calls run on ``executor`` (the loop default when None).
        """
        ...

    @staticmethod
    def normalize_price(value: Any) -> float:
        """Coerce a raw price into a finite non-negative float, else 0.0."""
        try:
            price = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(price) or price < 0:
            return 0.0
        return price
