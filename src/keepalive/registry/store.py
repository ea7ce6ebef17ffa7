"""Durable storage for the registry document."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable
from uuid import uuid4

from pydantic import ValidationError

from keepalive.errors import PersistError
from keepalive.registry.models import RegistryDocument, utcnow

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Whole-document load/save persistence."""

    def load(self) -> RegistryDocument: ...
    def save(self, document: RegistryDocument) -> None: ...


class InMemoryStore:
    """Keeps a private copy of the last saved document."""

    def __init__(self, document: RegistryDocument | None = None) -> None:
        self._document = document.model_copy(deep=True) if document else None

    def load(self) -> RegistryDocument:
        if self._document is None:
            return RegistryDocument()
        return self._document.model_copy(deep=True)

    def save(self, document: RegistryDocument) -> None:
        document.stats.last_update = utcnow()
        self._document = document.model_copy(deep=True)


class JsonFileStore:
    """Registry document stored as a single JSON file.

    A missing or unparseable file loads as an empty document. Writes go
    through a temp file and ``os.replace`` so a crash never leaves a
    half-written document behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RegistryDocument:
        if not self._path.exists():
            return RegistryDocument()
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read %s, starting empty: %s", self._path, exc)
            return RegistryDocument()
        if not raw.strip():
            return RegistryDocument()
        try:
            return RegistryDocument.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Could not parse %s, starting empty: %s", self._path, exc)
            return RegistryDocument()

    def save(self, document: RegistryDocument) -> None:
        document.stats.last_update = utcnow()
        payload = json.dumps(document.to_json_dict(), indent=2)
        tmp_path = self._path.parent / f".{self._path.name}.{uuid4().hex}.tmp"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise PersistError(f"Failed to write {self._path}: {exc}") from exc
