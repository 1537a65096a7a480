from __future__ import annotations

from ...domain import ChainFamily
from .base import BaseBalanceAdapter
from .bitcoin import BitcoinAdapter
from .evm import EVMAdapter
from .solana import SolanaAdapter
from .ton import TONAdapter
from .xrp import XRPAdapter

ADAPTER_REGISTRY: dict[ChainFamily, type[BaseBalanceAdapter]] = {
    ChainFamily.BITCOIN: BitcoinAdapter,
    ChainFamily.EVM: EVMAdapter,
    ChainFamily.SOLANA: SolanaAdapter,
    ChainFamily.XRP: XRPAdapter,
    ChainFamily.TON: TONAdapter,
}


def get_adapter_class(family: ChainFamily | str) -> type[BaseBalanceAdapter]:
    """Get adapter class by chain family.

    Args:
        family: Chain family (enum member or case-insensitive name)

    Returns:
        Adapter class

    Raises:
        ValueError: If family is not recognized
    """
    try:
        key = ChainFamily(family.lower() if isinstance(family, str) else family)
    except ValueError:
        raise ValueError(
            f"Unknown chain family '{family}'. "
            f"Available: {', '.join(f.value for f in ADAPTER_REGISTRY)}"
        ) from None
    return ADAPTER_REGISTRY[key]


__all__ = [
    "ADAPTER_REGISTRY",
    "BaseBalanceAdapter",
    "BitcoinAdapter",
    "EVMAdapter",
    "SolanaAdapter",
    "TONAdapter",
    "XRPAdapter",
    "get_adapter_class",
]
