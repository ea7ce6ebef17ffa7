"""Link registry, prober, store and reporting."""

from keepalive.registry.history import ProbeHistory
from keepalive.registry.models import Endpoint, LinkStatus, ProbeResult, RegistryDocument, Stats
from keepalive.registry.prober import Prober, probe_url
from keepalive.registry.registry import LinkRegistry, apply_probe, validate_url
from keepalive.registry.store import DocumentStore, InMemoryStore, JsonFileStore

__all__ = [
    "DocumentStore",
    "Endpoint",
    "InMemoryStore",
    "JsonFileStore",
    "LinkRegistry",
    "LinkStatus",
    "ProbeHistory",
    "ProbeResult",
    "Prober",
    "RegistryDocument",
    "Stats",
    "apply_probe",
    "probe_url",
    "validate_url",
]
