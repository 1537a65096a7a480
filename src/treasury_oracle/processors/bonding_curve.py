"""Per-chain bonding curve pricing.

Every chain owns a slice of the overall fund target (its cap) and of the
token sale supply. The mint price on a chain moves linearly from
``min_price`` to ``max_price`` as the USD raised on that chain approaches
its cap, and stays at ``max_price`` once the cap is reached.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

from ..constants import (
    CHAIN_ALIASES,
    CHAIN_ALLOCATIONS,
    FUND_TARGET,
    MAX_PRICE,
    MIN_PRICE,
    SALE_SUPPLY,
    TOTAL_SUPPLY,
)
from ..domain import TreasurySnapshot


@dataclass(frozen=True)
class CurveConfig:
    """Static pricing configuration shared by all chains."""

    total_supply: float = TOTAL_SUPPLY
    sale_supply: float = SALE_SUPPLY
    fund_target: float = FUND_TARGET
    min_price: float = MIN_PRICE
    max_price: float = MAX_PRICE
    allocations: Mapping[str, float] = field(
        default_factory=lambda: dict(CHAIN_ALLOCATIONS)
    )
    chain_aliases: Mapping[str, str] = field(
        default_factory=lambda: dict(CHAIN_ALIASES)
    )

    def __post_init__(self) -> None:
        # Detach from the caller's dicts
        object.__setattr__(self, "allocations", dict(self.allocations))
        object.__setattr__(self, "chain_aliases", dict(self.chain_aliases))

        if not 0 <= self.min_price <= self.max_price:
            raise ValueError(
                f"Expected 0 <= min_price <= max_price, got {self.min_price} and {self.max_price}"
            )
        if self.fund_target < 0:
            raise ValueError(f"fund_target must be non-negative, got {self.fund_target}")
        if self.sale_supply > self.total_supply:
            raise ValueError(
                f"sale_supply ({self.sale_supply}) exceeds total_supply ({self.total_supply})"
            )
        negative = {k: v for k, v in self.allocations.items() if v < 0}
        if negative:
            raise ValueError(f"Negative chain allocations: {negative}")
        total = sum(self.allocations.values())
        if self.allocations and not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Chain allocations must sum to 1.0, got {total}")


@dataclass(frozen=True)
class ChainQuote:
    """Bonding curve figures for one chain at a given raised amount."""

    chain_id: str
    raised_usd: float
    price: float
    progress_pct: float
    cap_usd: float
    allocation_tokens: float


class BondingCurve:
    """Stateless pricing functions over a :class:`CurveConfig`."""

    def __init__(self, config: CurveConfig | None = None):
        self.config = config or CurveConfig()

    def resolve_chain(self, chain_id: str) -> str:
        """Map a physical network onto the chain it prices against."""
        chain = chain_id.upper()
        return self.config.chain_aliases.get(chain, chain)

    def allocation_pct(self, chain_id: str) -> float:
        return self.config.allocations.get(self.resolve_chain(chain_id), 0.0)

    def chain_cap(self, chain_id: str) -> float:
        """USD funding cap of a chain."""
        return self.config.fund_target * self.allocation_pct(chain_id)

    def _progress(self, raised_usd: float, cap: float) -> float:
        if math.isnan(raised_usd):
            return 0.0
        return min(max(raised_usd / cap, 0.0), 1.0)

    def mint_price(self, raised_usd: float, chain_id: str) -> float:
        """Current price per token on ``chain_id``.

        Chains without an allocation always quote ``max_price``.
        """
        cap = self.chain_cap(chain_id)
        if cap == 0:
            return self.config.max_price
        progress = self._progress(raised_usd, cap)
        if progress >= 1.0:
            return self.config.max_price
        if progress <= 0.0:
            return self.config.min_price
        spread = self.config.max_price - self.config.min_price
        return self.config.min_price + spread * progress

    def progress_pct(self, raised_usd: float, chain_id: str) -> float:
        """Percentage of the chain cap raised so far, capped at 100."""
        cap = self.chain_cap(chain_id)
        if cap == 0:
            return 0.0
        return self._progress(raised_usd, cap) * 100

    def allocation_tokens(self, chain_id: str) -> float:
        """Token ceiling reserved for a chain, independent of sales."""
        return self.config.sale_supply * self.allocation_pct(chain_id)

    def tokens_for_usd(
        self, raised_usd: float, chain_id: str, usd_amount: float
    ) -> float:
        """Tokens bought by ``usd_amount`` at the current price."""
        price = self.mint_price(raised_usd, chain_id)
        if price == 0:
            return 0.0
        return usd_amount / price

    def quote(self, raised_usd: float, chain_id: str) -> ChainQuote:
        return ChainQuote(
            chain_id=chain_id,
            raised_usd=raised_usd,
            price=self.mint_price(raised_usd, chain_id),
            progress_pct=self.progress_pct(raised_usd, chain_id),
            cap_usd=self.chain_cap(chain_id),
            allocation_tokens=self.allocation_tokens(chain_id),
        )

    def quote_snapshot(self, snapshot: TreasurySnapshot) -> dict[str, ChainQuote]:
        """Quote every chain of a snapshot using its USD value as raised amount."""
        return {
            chain.chain_id: self.quote(chain.usd_value, chain.chain_id)
            for chain in snapshot.chains
        }


DEFAULT_CURVE = BondingCurve()


def mint_price(
    raised_usd: float, chain_id: str, curve: BondingCurve = DEFAULT_CURVE
) -> float:
    return curve.mint_price(raised_usd, chain_id)


def progress_pct(
    raised_usd: float, chain_id: str, curve: BondingCurve = DEFAULT_CURVE
) -> float:
    return curve.progress_pct(raised_usd, chain_id)


def allocation_tokens(chain_id: str, curve: BondingCurve = DEFAULT_CURVE) -> float:
    return curve.allocation_tokens(chain_id)


def tokens_for_usd(
    raised_usd: float,
    chain_id: str,
    usd_amount: float,
    curve: BondingCurve = DEFAULT_CURVE,
) -> float:
    return curve.tokens_for_usd(raised_usd, chain_id, usd_amount)
