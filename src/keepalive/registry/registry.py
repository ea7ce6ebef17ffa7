"""Link registry: owns the monitored link collection and its mutation rules."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from urllib.parse import urlparse

import httpx

from keepalive.config.models import KeepAliveConfig
from keepalive.errors import DuplicateURLError, InvalidURLError, LinkNotFoundError, PersistError
from keepalive.registry.codes import generate_unique_code
from keepalive.registry.history import ProbeHistory
from keepalive.registry.models import Endpoint, ProbeResult, RegistryDocument, Stats, utcnow
from keepalive.registry.prober import Prober
from keepalive.registry.store import DocumentStore, InMemoryStore, JsonFileStore

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """Return the stripped URL, or raise InvalidURLError unless it is absolute http(s)."""
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
        port = parsed.port
        httpx.URL(candidate)
    except (ValueError, httpx.InvalidURL) as exc:
        raise InvalidURLError(candidate) from exc
    if parsed.scheme not in ("http", "https") or not host or port == 0:
        raise InvalidURLError(candidate)
    if any(ch.isspace() for ch in parsed.netloc):
        raise InvalidURLError(candidate)
    return candidate


def apply_probe(link: Endpoint, result: ProbeResult) -> Endpoint:
    """Apply a probe outcome to *link*. The only place a link's status changes."""
    link.last_check = result.timestamp
    link.status = result.status
    link.response_time = result.response_time
    link.status_code = result.status_code
    if result.success:
        link.last_success = result.timestamp
        link.fail_count = 0
    else:
        link.fail_count += 1
        link.last_error = result.error or "Unknown error"
    link.total_checks += 1
    return link


class LinkRegistry:
    """Registry of monitored links backed by a DocumentStore.

    Every write reloads the document, mutates it and saves it inside a single
    lock, so overlapping requests and sweeps cannot lose each other's updates.
    Probes run outside the lock and their results are applied afterwards.
    """

    def __init__(
        self,
        store: DocumentStore,
        prober: Prober,
        history: ProbeHistory | None = None,
    ) -> None:
        self._store = store
        self._prober = prober
        self._history = history
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: KeepAliveConfig) -> LinkRegistry:
        """Build a registry with the store, prober and history the config describes."""
        store: DocumentStore
        if config.store.path:
            store = JsonFileStore(config.store.path)
        else:
            store = InMemoryStore()
        return cls(
            store,
            Prober(config.prober),
            history=ProbeHistory(config.history.max_per_link),
        )

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def prober(self) -> Prober:
        return self._prober

    @property
    def history(self) -> ProbeHistory | None:
        return self._history

    def _persist(self, document: RegistryDocument) -> None:
        document.recompute_stats()
        try:
            self._store.save(document)
        except PersistError:
            logger.error("Failed to persist registry document", exc_info=True)
            raise

    async def _record(self, code: str, result: ProbeResult) -> None:
        if self._history is not None:
            await self._history.record(code, result)

    async def snapshot(self) -> RegistryDocument:
        async with self._lock:
            return self._store.load()

    async def add(self, url: str) -> Endpoint:
        """Register *url*, probe it once, and persist the new link."""
        url = validate_url(url)
        async with self._lock:
            existing = self._store.load().find_by_url(url)
        if existing is not None:
            raise DuplicateURLError(url, existing.code)

        result = await self._prober.probe(url)

        async with self._lock:
            document = self._store.load()
            existing = document.find_by_url(url)
            if existing is not None:
                raise DuplicateURLError(url, existing.code)
            link = Endpoint(code=generate_unique_code(document.codes()), url=url, added_at=utcnow())
            apply_probe(link, result)
            document.links.append(link)
            self._persist(document)

        logger.info("Registered %s as %s (%s)", url, link.code, link.status.value)
        await self._record(link.code, result)
        return link

    async def get(self, code: str) -> Endpoint:
        async with self._lock:
            link = self._store.load().find(code)
        if link is None:
            raise LinkNotFoundError(code)
        return link

    async def refresh(self, code: str) -> Endpoint:
        """Probe the link now and persist the outcome."""
        link = await self.get(code)
        result = await self._prober.probe(link.url)

        async with self._lock:
            document = self._store.load()
            current = document.find(code)
            if current is None:
                raise LinkNotFoundError(code)
            apply_probe(current, result)
            self._persist(document)

        await self._record(current.code, result)
        return current

    async def list_links(self) -> tuple[list[Endpoint], Stats]:
        """Links in registration order plus freshly derived stats."""
        async with self._lock:
            document = self._store.load()
        stats = document.recompute_stats()
        return document.links, stats

    async def remove(self, code: str) -> Endpoint:
        async with self._lock:
            document = self._store.load()
            link = document.find(code)
            if link is None:
                raise LinkNotFoundError(code)
            document.links.remove(link)
            self._persist(document)

        logger.info("Removed %s (%s)", link.code, link.url)
        if self._history is not None:
            await self._history.forget(link.code)
        return link

    async def apply_results(self, results: Mapping[str, ProbeResult]) -> int:
        """Apply a batch of sweep results and persist once.

        Links deleted since they were probed are skipped. A result older than
        the link's last check only counts towards ``total_checks``, so an
        on-demand refresh made during the sweep is not rolled back. Returns
        the number of links updated.
        """
        if not results:
            return 0
        applied: list[tuple[str, ProbeResult]] = []
        async with self._lock:
            document = self._store.load()
            for code, result in results.items():
                link = document.find(code)
                if link is None:
                    logger.debug("Skipping result for %s: link was removed during the sweep", code)
                    continue
                if link.last_check is not None and result.timestamp < link.last_check:
                    logger.debug("Stale result for %s: link was checked after this probe", code)
                    link.total_checks += 1
                    continue
                apply_probe(link, result)
                applied.append((link.code, result))
            self._persist(document)

        for code, result in applied:
            await self._record(code, result)
        return len(applied)
