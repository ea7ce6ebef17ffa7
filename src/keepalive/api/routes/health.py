"""Monitor self-health endpoints."""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request

from keepalive.registry.report import health_summary

router = APIRouter(tags=["meta"])


@router.get("/health")
@router.get("/ping")
async def healthcheck(request: Request) -> dict[str, Any]:
    _, stats = await request.app.state.registry.list_links()
    uptime = time.monotonic() - request.app.state.started_at
    return health_summary(uptime, stats)
