"""Data models for monitored links, the registry document, and probe results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(UTC)


class LinkStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class _CamelModel(BaseModel):
    """Persisted models use camelCase keys on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Endpoint(_CamelModel):
    """A monitored URL and its accumulated health state."""

    code: str
    url: str
    status: LinkStatus = LinkStatus.OFFLINE
    last_check: datetime = Field(default_factory=utcnow)
    last_success: datetime | None = None
    last_error: str | None = None
    response_time: int = 0  # ms
    status_code: int = 0
    fail_count: int = 0
    total_checks: int = 0
    added_at: datetime = Field(default_factory=utcnow)

    @property
    def is_online(self) -> bool:
        return self.status == LinkStatus.ONLINE


class Stats(_CamelModel):
    """Registry-wide aggregate counts derived from the link collection."""

    total_links: int = 0
    active_links: int = 0
    last_update: datetime = Field(default_factory=utcnow)


class RegistryDocument(_CamelModel):
    """The single persisted document: ordered links plus aggregate stats."""

    links: list[Endpoint] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)

    def find(self, code: str) -> Endpoint | None:
        """Look up a link by code, case-insensitively."""
        wanted = code.strip().upper()
        for link in self.links:
            if link.code.upper() == wanted:
                return link
        return None

    def find_by_url(self, url: str) -> Endpoint | None:
        for link in self.links:
            if link.url == url:
                return link
        return None

    def codes(self) -> set[str]:
        return {link.code.upper() for link in self.links}

    def recompute_stats(self) -> Stats:
        self.stats.total_links = len(self.links)
        self.stats.active_links = sum(1 for link in self.links if link.is_online)
        return self.stats

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class ProbeResult:
    """Outcome of a single bounded HTTP GET."""

    success: bool
    response_time: int = 0  # ms, measured even on failure
    status_code: int = 0  # 0 when no response was received
    error: str | None = None
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def status(self) -> LinkStatus:
        return LinkStatus.ONLINE if self.success else LinkStatus.OFFLINE

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.value,
            "responseTime": self.response_time,
            "statusCode": self.status_code,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }
