from __future__ import annotations

from .balance_aggregator import (
    build_chain_balances,
    build_snapshot,
    compute_progress_pct,
)
from .bonding_curve import (
    DEFAULT_CURVE,
    BondingCurve,
    ChainQuote,
    CurveConfig,
    allocation_tokens,
    mint_price,
    progress_pct,
    tokens_for_usd,
)

__all__ = [
    "BondingCurve",
    "ChainQuote",
    "CurveConfig",
    "DEFAULT_CURVE",
    "allocation_tokens",
    "build_chain_balances",
    "build_snapshot",
    "compute_progress_pct",
    "mint_price",
    "progress_pct",
    "tokens_for_usd",
]
