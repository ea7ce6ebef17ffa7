"""Periodic sweeps that probe every registered link."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from keepalive.config.models import SchedulerConfig
from keepalive.errors import PersistError
from keepalive.registry.models import Endpoint, ProbeResult, utcnow
from keepalive.registry.registry import LinkRegistry

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Summary of one sweep."""

    started_at: datetime
    finished_at: datetime | None = None
    probed: int = 0
    online: int = 0
    offline: int = 0
    applied: int = 0
    persisted: bool = False

    @property
    def duration_ms(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "durationMs": self.duration_ms,
            "probed": self.probed,
            "online": self.online,
            "offline": self.offline,
            "applied": self.applied,
            "persisted": self.persisted,
        }


class SweepScheduler:
    """Runs an initial sweep after a delay, then one sweep every interval.

    Probes inside a sweep run one at a time with a fixed pacing delay between
    them. Results are applied and persisted once at the end of the sweep, or
    every ``checkpoint_every`` links when that is set.
    """

    def __init__(
        self,
        registry: LinkRegistry,
        config: SchedulerConfig | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._config = config or SchedulerConfig()
        self._sleep = sleep
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._sweep_lock = asyncio.Lock()
        self._last_report: SweepReport | None = None
        self._sweep_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_report(self) -> SweepReport | None:
        return self._last_report

    @property
    def sweep_count(self) -> int:
        return self._sweep_count

    def start(self) -> None:
        if self.running:
            logger.warning("Sweep scheduler is already running")
            return
        self._task = asyncio.create_task(self._run(), name="keepalive-sweeps")
        logger.info(
            "Sweep scheduler started (first sweep in %.0fs, then every %.0fs)",
            self._config.initial_delay,
            self._config.interval,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Sweep scheduler stopped")

    async def _run(self) -> None:
        await self._sleep(self._config.initial_delay)
        while True:
            started = self._clock()
            await self._sweep_logged()
            # fixed rate: a sweep that overruns the interval starts the next one immediately
            elapsed = self._clock() - started
            await self._sleep(max(0.0, self._config.interval - elapsed))

    async def _sweep_logged(self) -> None:
        """Run one sweep; failures are logged and never stop the loop."""
        try:
            await self.run_sweep()
        except PersistError as exc:
            logger.error("Sweep results were not persisted: %s", exc)
        except Exception:
            logger.exception("Sweep failed")

    async def _probe(self, link: Endpoint) -> ProbeResult:
        try:
            return await self._registry.prober.probe(link.url)
        except Exception as exc:
            logger.exception("Probe of %s (%s) raised", link.code, link.url)
            return ProbeResult(success=False, error=str(exc) or type(exc).__name__)

    async def _checkpoint(self, pending: dict[str, ProbeResult], report: SweepReport) -> dict[str, ProbeResult]:
        try:
            report.applied += await self._registry.apply_results(pending)
        except PersistError as exc:
            logger.warning("Checkpoint failed, keeping %d result(s) for the next save: %s", len(pending), exc)
            return pending
        return {}

    async def run_sweep(self) -> SweepReport:
        """Probe every link once in registration order and persist the outcomes."""
        async with self._sweep_lock:
            report = SweepReport(started_at=utcnow())
            self._sweep_count += 1
            document = await self._registry.snapshot()
            if not document.links:
                logger.debug("Sweep skipped: no links registered")
                report.finished_at = utcnow()
                self._last_report = report
                return report

            logger.info("Sweep started: %d link(s)", len(document.links))
            checkpoint_every = self._config.checkpoint_every
            pending: dict[str, ProbeResult] = {}
            try:
                for index, link in enumerate(document.links):
                    if index:
                        await self._sleep(self._config.pacing)
                    result = await self._probe(link)
                    pending[link.code] = result
                    report.probed += 1
                    if result.success:
                        report.online += 1
                    else:
                        report.offline += 1
                    if checkpoint_every and len(pending) >= checkpoint_every:
                        pending = await self._checkpoint(pending, report)

                report.applied += await self._registry.apply_results(pending)
                report.persisted = True
            finally:
                report.finished_at = utcnow()
                self._last_report = report

            logger.info(
                "Sweep finished: %d probed, %d online, %d offline in %.0fms",
                report.probed,
                report.online,
                report.offline,
                report.duration_ms or 0.0,
            )
            return report
