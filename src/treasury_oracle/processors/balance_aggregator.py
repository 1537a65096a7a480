from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..domain import ChainBalance, ChainEndpointConfig, TreasurySnapshot


def build_chain_balances(
    chains: Sequence[ChainEndpointConfig],
    balances: Mapping[str, float],
    prices: Mapping[str, float],
) -> list[ChainBalance]:
    """Join native balances with unit prices.

    Args:
        chains: Configured chains, in configuration order
        balances: chain_id -> native balance (summed over sub-chains)
        prices: symbol -> USD unit price

    Returns:
        One ChainBalance per configured chain. Chains missing from
        ``balances`` or ``prices`` are valued at zero.
    """
    return [
        ChainBalance.from_config(
            chain,
            native_balance=balances.get(chain.chain_id, 0.0),
            price=prices.get(chain.symbol, 0.0),
        )
        for chain in chains
    ]


def compute_progress_pct(total_usd: float, fund_target: float) -> float:
    """Percentage of the fund target raised, capped at 100."""
    if fund_target <= 0:
        return 0.0
    return min(total_usd / fund_target * 100, 100.0)


def build_snapshot(
    balances: Iterable[ChainBalance],
    *,
    fund_target: float,
    is_testnet: bool,
    last_updated: float,
) -> TreasurySnapshot:
    """Assemble a snapshot ordered by descending USD value.

    The sort is stable, so chains with equal value keep the order they were
    given in.
    """
    ordered = sorted(balances, key=lambda c: c.usd_value, reverse=True)
    total_usd = sum(c.usd_value for c in ordered)
    return TreasurySnapshot(
        chains=tuple(ordered),
        total_usd=total_usd,
        progress_pct=compute_progress_pct(total_usd, fund_target),
        last_updated=last_updated,
        is_testnet=is_testnet,
    )
