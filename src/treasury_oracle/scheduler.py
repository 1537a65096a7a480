"""Periodic refresh of the published treasury snapshot."""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import math
from collections.abc import Awaitable, Callable

from .adapters.price_adapters import BasePriceAdapter, get_price_adapter
from .config import TreasuryConfig
from .domain import TreasurySnapshot
from .logger import get_logger
from .pipeline import collect_snapshot, default_snapshot

logger = get_logger(__name__)

Collector = Callable[
    [TreasuryConfig, BasePriceAdapter | None], Awaitable[TreasurySnapshot]
]
SnapshotListener = Callable[[TreasurySnapshot], None]


class RefreshScheduler:
    """Owns the current treasury snapshot and keeps it fresh.

    A background task runs one aggregation immediately and then one every
    ``config.refresh_interval`` seconds. Cycles never overlap: a manual
    :meth:`refresh` issued while a cycle is in flight waits for that cycle.

    The snapshot is replaced by a single attribute assignment, so readers
    see either the previous or the next snapshot, never a partial one. A
    failed cycle keeps the previous snapshot (flagged ``stale``), or the
    all-zero default if no cycle has succeeded yet.
    """

    def __init__(
        self,
        config: TreasuryConfig,
        price_adapter: BasePriceAdapter | None = None,
        *,
        collector: Collector = collect_snapshot,
        on_update: SnapshotListener | None = None,
    ):
        self.config = config
        self.price_adapter = price_adapter or get_price_adapter(config)
        self._collector = collector
        self._on_update = on_update

        self._snapshot = default_snapshot(config)
        self._has_succeeded = False
        self._loading = True
        self.last_error: Exception | None = None

        self._inflight: asyncio.Task[TreasurySnapshot] | None = None
        self._periodic: asyncio.Task[None] | None = None

    @property
    def snapshot(self) -> TreasurySnapshot:
        """Latest published snapshot."""
        return self._snapshot

    @property
    def loading(self) -> bool:
        """True until the first refresh cycle has settled."""
        return self._loading

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def is_running(self) -> bool:
        return self._periodic is not None and not self._periodic.done()

    async def refresh(self) -> TreasurySnapshot:
        """Run one aggregation cycle, or join the one already in flight."""
        if not self.is_refreshing:
            self._inflight = asyncio.create_task(self._run_cycle())
        assert self._inflight is not None
        return await asyncio.shield(self._inflight)

    async def _run_cycle(self) -> TreasurySnapshot:
        try:
            snapshot = await self._collector(self.config, self.price_adapter)
        except Exception as e:
            self.last_error = e
            logger.error(
                "Treasury refresh failed, keeping %s snapshot: %s",
                "previous" if self._has_succeeded else "default",
                e,
                exc_info=True,
            )
            snapshot = self._snapshot
            if self._has_succeeded and not snapshot.stale:
                snapshot = dataclasses.replace(snapshot, stale=True)
        else:
            self.last_error = None
            self._has_succeeded = True

        self._snapshot = snapshot
        self._loading = False

        if self._on_update is not None:
            try:
                self._on_update(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")
        return snapshot

    async def _run_periodic(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self.config.refresh_interval
        next_run = loop.time()
        while True:
            await self.refresh()
            next_run += interval
            now = loop.time()
            if next_run < now:
                # Cycle overran one or more ticks; skip them instead of bursting
                skipped = math.ceil((now - next_run) / interval)
                logger.warning(
                    "Treasury refresh overran the %.1fs interval, skipping %d tick(s)",
                    interval,
                    skipped,
                )
                next_run += skipped * interval
            await asyncio.sleep(next_run - now)

    def start(self) -> None:
        """Start the periodic refresh task. No-op if already running."""
        if self.is_running:
            return
        logger.info(
            "Starting treasury refresh every %.1fs (%s)",
            self.config.refresh_interval,
            self.config.network.value,
        )
        self._periodic = asyncio.create_task(self._run_periodic())

    async def stop(self) -> None:
        """Cancel the periodic task and abandon any in-flight refresh."""
        tasks = [t for t in (self._periodic, self._inflight) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._periodic = None
        self._inflight = None

    async def __aenter__(self) -> RefreshScheduler:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
