"""Link registration, status, listing and deletion endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from keepalive.errors import (
    CodeSpaceExhausted,
    DuplicateURLError,
    InvalidURLError,
    LinkNotFoundError,
    PersistError,
)
from keepalive.registry.registry import LinkRegistry
from keepalive.registry.report import link_status, registry_summary

router = APIRouter(tags=["links"])


class AddLinkRequest(BaseModel):
    url: str


def _get_registry(request: Request) -> LinkRegistry:
    return request.app.state.registry


@router.post("/links", status_code=201, response_model=None)
async def add_link(request: Request, body: AddLinkRequest) -> dict[str, Any] | JSONResponse:
    try:
        link = await _get_registry(request).add(body.url)
    except InvalidURLError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DuplicateURLError as exc:
        return JSONResponse(status_code=409, content={"detail": str(exc), "code": exc.code})
    except PersistError as exc:
        raise HTTPException(status_code=500, detail="Failed to save link") from exc
    except CodeSpaceExhausted as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {
        "code": link.code,
        "status": link.status.value,
        "responseTime": link.response_time,
    }


@router.get("/links")
async def list_links(request: Request) -> dict[str, Any]:
    links, stats = await _get_registry(request).list_links()
    return registry_summary(links, stats)


@router.get("/links/{code}")
async def get_link_status(request: Request, code: str) -> dict[str, Any]:
    """Probe the link now and return its full status."""
    try:
        link = await _get_registry(request).refresh(code)
    except LinkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistError as exc:
        raise HTTPException(status_code=500, detail="Failed to save probe result") from exc
    return link_status(link)


@router.delete("/links/{code}")
async def delete_link(request: Request, code: str) -> dict[str, Any]:
    try:
        link = await _get_registry(request).remove(code)
    except LinkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistError as exc:
        raise HTTPException(status_code=500, detail="Failed to delete link") from exc
    return {"code": link.code, "deletedUrl": link.url}


@router.get("/links/{code}/history")
async def get_link_history(
    request: Request, code: str, limit: int = Query(default=20, ge=1, le=500)
) -> list[dict[str, Any]]:
    """Recent probe results for a link, most recent first."""
    registry = _get_registry(request)
    try:
        link = await registry.get(code)
    except LinkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if registry.history is None:
        return []
    results = await registry.history.get_recent(link.code, limit=limit)
    return [r.to_dict() for r in results]


@router.post("/sweep")
async def run_sweep(request: Request) -> dict[str, Any]:
    """Run one sweep now and return its report."""
    scheduler = request.app.state.scheduler
    try:
        report = await scheduler.run_sweep()
    except PersistError as exc:
        raise HTTPException(status_code=500, detail="Sweep results were not persisted") from exc
    return report.to_dict()
