"""FastAPI routes exposing model depths to editor overlays."""

from __future__ import annotations

import asyncio
import contextlib

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from dbt_depthy.analysis.depth import DepthTable
from dbt_depthy.annotate import annotate
from dbt_depthy.service import DepthService

router = APIRouter(prefix="/api")


# --- Response models ---

class DepthResponse(BaseModel):
    name: str
    depth: int
    tier: str
    color: str
    label: str
    hover: str


class StatusResponse(BaseModel):
    project_root: str
    manifest_path: str | None
    models: int
    max_depth: int
    last_error: str | None


class RefreshResponse(BaseModel):
    ok: bool
    models: int


def _service(request: Request) -> DepthService:
    return request.app.state.depth_service


def _snapshot(table: DepthTable) -> dict[str, int]:
    return dict(table.items())


# --- Endpoints ---

@router.get("/status", response_model=StatusResponse)
async def status(request: Request):
    service = _service(request)
    table = service.table
    return StatusResponse(
        project_root=str(service.project_root),
        manifest_path=str(service.manifest_path) if service.manifest_path else None,
        models=table.model_count,
        max_depth=table.max_depth,
        last_error=service.last_error,
    )


@router.get("/depths")
async def list_depths(request: Request):
    return {"depths": _snapshot(_service(request).table)}


@router.get("/depths/{name}", response_model=DepthResponse)
async def get_depth(name: str, request: Request):
    service = _service(request)
    result = annotate(name, service.table, service.config)
    if result is None:
        raise HTTPException(404, f"Unknown model: {name}")
    return DepthResponse(
        name=result.name,
        depth=result.depth,
        tier=result.tier.value,
        color=result.color,
        label=result.label,
        hover=result.hover,
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(request: Request):
    service = _service(request)
    ok = await service.arefresh()
    if not ok:
        raise HTTPException(503, service.last_error or "Refresh failed")
    return RefreshResponse(ok=True, models=service.table.model_count)


@router.websocket("/ws/depths")
async def depths_feed(websocket: WebSocket):
    """Push the full depth table now and after every successful refresh."""
    service: DepthService = websocket.app.state.depth_service
    await websocket.accept()

    await websocket.send_json({"depths": _snapshot(service.table)})

    loop = asyncio.get_running_loop()
    updates: asyncio.Queue[DepthTable] = asyncio.Queue()
    unsubscribe = service.subscribe(
        lambda table: loop.call_soon_threadsafe(updates.put_nowait, table)
    )

    async def push_updates() -> None:
        while True:
            table = await updates.get()
            await websocket.send_json({"depths": _snapshot(table)})

    sender = asyncio.create_task(push_updates())
    try:
        # Client messages are ignored; receiving only surfaces the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await sender
