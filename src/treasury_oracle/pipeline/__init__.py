from __future__ import annotations

from .snapshot import collect_snapshot, default_snapshot

__all__ = ["collect_snapshot", "default_snapshot"]
