from __future__ import annotations

from .formatter import (
    format_native,
    format_tokens,
    format_usd,
    print_quote,
    print_snapshot,
)

__all__ = [
    "format_native",
    "format_tokens",
    "format_usd",
    "print_quote",
    "print_snapshot",
]
