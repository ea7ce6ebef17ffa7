"""Externally visible summaries of links and the registry."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from keepalive.registry.models import Endpoint, Stats, utcnow

NEVER = "Never"


def format_uptime(added_at: datetime, now: datetime | None = None) -> str:
    """Elapsed time since *added_at* as ``"<d>d <h>h <m>m"``."""
    elapsed = max(int(((now or utcnow()) - added_at).total_seconds()), 0)
    days, rem = divmod(elapsed, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    return f"{days}d {hours}h {minutes}m"


def success_rate(total_checks: int, fail_count: int) -> int:
    """Integer percentage of checks not counted as failures."""
    return round((total_checks - fail_count) / max(total_checks, 1) * 100)


def link_summary(link: Endpoint) -> dict[str, Any]:
    return {
        "code": link.code,
        "url": link.url,
        "status": link.status.value,
        "responseTime": link.response_time,
        "statusCode": link.status_code,
        "lastCheck": link.last_check.isoformat(),
        "failCount": link.fail_count,
        "totalChecks": link.total_checks,
        "successRate": f"{success_rate(link.total_checks, link.fail_count)}%",
    }


def link_status(link: Endpoint, now: datetime | None = None) -> dict[str, Any]:
    """Full status of one link, including uptime and success rate."""
    return {
        "code": link.code,
        "url": link.url,
        "status": link.status.value,
        "responseTime": link.response_time,
        "statusCode": link.status_code,
        "lastCheck": link.last_check.isoformat(),
        "lastSuccess": link.last_success.isoformat() if link.last_success else NEVER,
        "lastError": link.last_error,
        "addedAt": link.added_at.isoformat(),
        "uptime": format_uptime(link.added_at, now),
        "failCount": link.fail_count,
        "totalChecks": link.total_checks,
        "successRate": f"{success_rate(link.total_checks, link.fail_count)}%",
    }


def registry_summary(links: list[Endpoint], stats: Stats) -> dict[str, Any]:
    return {
        "stats": {
            "totalLinks": stats.total_links,
            "activeLinks": stats.active_links,
            "offlineLinks": stats.total_links - stats.active_links,
            "lastUpdate": stats.last_update.isoformat(),
        },
        "links": [link_summary(link) for link in links],
    }


def health_summary(uptime_seconds: float, stats: Stats) -> dict[str, Any]:
    return {
        "status": "ok",
        "uptimeSeconds": round(uptime_seconds, 1),
        "totalLinks": stats.total_links,
        "activeLinks": stats.active_links,
    }
