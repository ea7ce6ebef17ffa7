"""Pydantic models for keepalive configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = "keepalive-monitor/0.1 (+https://github.com/keepalive-monitor)"


class Identity(BaseModel):
    """Top-level identity metadata."""

    name: str = "keepalive"
    version: str = "0.1.0"


class StoreConfig(BaseModel):
    """Where the registry document lives."""

    path: str = "links.json"  # empty = in-memory only


class ProberConfig(BaseModel):
    """Settings for a single probe."""

    timeout: float = Field(default=15.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    server_error_offline: bool = False  # count 5xx responses as offline


class SchedulerConfig(BaseModel):
    """Background sweep timing."""

    enabled: bool = True
    initial_delay: float = Field(default=30.0, ge=0)
    interval: float = Field(default=600.0, gt=0)
    pacing: float = Field(default=1.0, ge=0)
    checkpoint_every: int = Field(default=0, ge=0)  # 0 = persist once per sweep


class HistoryConfig(BaseModel):
    """In-memory per-link probe history."""

    max_per_link: int = Field(default=50, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class KeepAliveConfig(BaseModel):
    """Root configuration model for .keepalive.yaml."""

    identity: Identity = Field(default_factory=Identity)
    store: StoreConfig = Field(default_factory=StoreConfig)
    prober: ProberConfig = Field(default_factory=ProberConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
