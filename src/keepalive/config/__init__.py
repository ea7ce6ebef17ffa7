"""keepalive configuration system."""

from keepalive.config.loader import find_config_file, load_config
from keepalive.config.models import (
    HistoryConfig,
    KeepAliveConfig,
    LoggingConfig,
    ProberConfig,
    SchedulerConfig,
    StoreConfig,
)

__all__ = [
    "HistoryConfig",
    "KeepAliveConfig",
    "LoggingConfig",
    "ProberConfig",
    "SchedulerConfig",
    "StoreConfig",
    "load_config",
    "find_config_file",
]
