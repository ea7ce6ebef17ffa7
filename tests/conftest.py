"""Shared fixtures for keepalive tests."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from keepalive.config.models import KeepAliveConfig
from keepalive.errors import PersistError
from keepalive.registry.history import ProbeHistory
from keepalive.registry.models import ProbeResult, RegistryDocument, utcnow
from keepalive.registry.registry import LinkRegistry
from keepalive.registry.store import InMemoryStore

SAMPLE_CONFIG: Dict[str, Any] = {
    "identity": {"name": "keepalive", "version": "0.1.0"},
    "store": {"path": "links.json"},
    "prober": {"timeout": 5, "user_agent": "keepalive-test/1.0"},
    "scheduler": {"enabled": False, "initial_delay": 30, "interval": 600, "pacing": 1},
    "history": {"max_per_link": 10},
    "logging": {"level": "DEBUG"},
}

OK = ProbeResult(success=True, response_time=42, status_code=200)
DOWN = ProbeResult(success=False, response_time=15000, status_code=0, error="Timeout after 15.0s")


class FakeProber:
    """Returns queued results per URL, falling back to a default result."""

    def __init__(self, default: ProbeResult = OK) -> None:
        self.default = default
        self.queued: dict[str, list[ProbeResult | Exception]] = {}
        self.calls: list[str] = []
        self.timeout = 15.0

    def queue(self, url: str, *results: ProbeResult | Exception) -> None:
        self.queued.setdefault(url, []).extend(results)

    async def probe(self, url: str) -> ProbeResult:
        self.calls.append(url)
        pending = self.queued.get(url)
        outcome = pending.pop(0) if pending else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return replace(outcome, timestamp=utcnow())


class CountingStore(InMemoryStore):
    """In-memory store that counts saves and can be told to fail them."""

    def __init__(self) -> None:
        super().__init__()
        self.saves = 0
        self.fail_saves = False

    def save(self, document: RegistryDocument) -> None:
        if self.fail_saves:
            raise PersistError("disk full")
        self.saves += 1
        super().save(document)


@pytest.fixture()
def sample_config() -> KeepAliveConfig:
    return KeepAliveConfig(**SAMPLE_CONFIG)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write sample config to a temp .keepalive.yaml and return the path."""
    path = tmp_path / ".keepalive.yaml"
    with path.open("w") as fh:
        yaml.dump(SAMPLE_CONFIG, fh)
    return path


@pytest.fixture()
def prober() -> FakeProber:
    return FakeProber()


@pytest.fixture()
def store() -> CountingStore:
    return CountingStore()


@pytest.fixture()
def registry(store: CountingStore, prober: FakeProber) -> LinkRegistry:
    return LinkRegistry(store, prober, history=ProbeHistory(max_per_link=10))  # type: ignore[arg-type]
