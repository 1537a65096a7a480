"""Multi-chain treasury aggregation and bonding-curve pricing."""

__version__ = "0.1.0"
