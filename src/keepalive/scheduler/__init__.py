"""Background sweep scheduling."""

from keepalive.scheduler.sweeper import SweepReport, SweepScheduler

__all__ = ["SweepReport", "SweepScheduler"]
