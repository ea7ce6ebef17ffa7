"""FastAPI application factory for keepalive."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from keepalive import __version__
from keepalive.api.routes import health, links
from keepalive.config.loader import load_config
from keepalive.config.models import KeepAliveConfig
from keepalive.registry.registry import LinkRegistry
from keepalive.scheduler.sweeper import SweepScheduler

logger = logging.getLogger(__name__)


def create_app(config: KeepAliveConfig | None = None, registry: LinkRegistry | None = None) -> FastAPI:
    if config is None:
        try:
            config = load_config()
        except (FileNotFoundError, ValueError) as exc:
            # No usable config file: run on defaults
            logger.info("Using default configuration: %s", exc)
            config = KeepAliveConfig()

    registry = registry or LinkRegistry.from_config(config)
    scheduler = SweepScheduler(registry, config.scheduler)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if config.scheduler.enabled:
            scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()

    app = FastAPI(
        title=config.identity.name,
        version=__version__,
        description="Keep-alive monitor for HTTP(S) endpoints",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.registry = registry
    app.state.scheduler = scheduler
    app.state.started_at = time.monotonic()

    app.include_router(health.router)
    app.include_router(links.router, prefix="/api")

    return app


app = create_app()
