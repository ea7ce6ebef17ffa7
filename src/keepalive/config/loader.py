"""Locate, read and validate .keepalive.yaml."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from keepalive.config.models import KeepAliveConfig

CONFIG_FILENAME = ".keepalive.yaml"

# ${KEEPALIVE_STORE} or ${KEEPALIVE_STORE:-links.json}
_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+?)\s*(?::-(?P<default>[^}]*))?\}")


def _expand(value: str) -> str:
    """Substitute environment references in one string.

    Unset variables without a default are left as written so the validation
    error points at the unexpanded reference.
    """

    def _lookup(match: re.Match[str]) -> str:
        name = match.group("name").strip()
        default = match.group("default")
        if default is not None:
            return os.environ.get(name, default)
        return os.environ.get(name, match.group(0))

    return _ENV_REF.sub(_lookup, value)


def _expand_all(node: Any) -> Any:
    if isinstance(node, str):
        return _expand(node)
    if isinstance(node, dict):
        return {key: _expand_all(item) for key, item in node.items()}
    if isinstance(node, list):
        return [_expand_all(item) for item in node]
    return node


def _resolve_store_path(config: KeepAliveConfig, base: Path) -> None:
    # links.json next to the config file, not next to wherever serve was started
    store_path = config.store.path
    if store_path and not Path(store_path).is_absolute():
        config.store.path = str(base / store_path)


def find_config_file(start: Path | None = None) -> Path | None:
    """Return the nearest .keepalive.yaml in *start* (default cwd) or its parents."""
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> KeepAliveConfig:
    """Load the monitor configuration.

    Environment references are expanded before validation, and a relative
    ``store.path`` is taken relative to the config file. Raises
    ``FileNotFoundError`` when no file is found and ``ValueError`` when the
    file does not describe a valid configuration.
    """
    config_path = path or find_config_file()
    if config_path is None or not config_path.exists():
        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found. Copy .keepalive.yaml.example or pass --config."
        )

    with config_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"{config_path} must contain a mapping of settings, got {type(raw).__name__}")

    try:
        config = KeepAliveConfig(**_expand_all(raw))
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration in {config_path}: {exc}") from exc

    _resolve_store_path(config, config_path.parent)
    return config
