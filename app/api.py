"""HTTP and WebSocket route definitions for the service."""

from __future__ import annotations

import logging
from contextlib import aclosing

import anyio
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from app.schemas import RunStateRequest, SnapshotResponse
from models.records import RunState
from services.monitor import SensorMonitor, build_default_monitor

logger = logging.getLogger(__name__)

router = APIRouter()

_WS_COMMANDS = {
    "toggle": SensorMonitor.toggle,
    "pause": SensorMonitor.pause,
    "resume": SensorMonitor.resume,
}


def get_monitor() -> SensorMonitor:
    return build_default_monitor()


@router.get(
    "/snapshot",
    response_model=SnapshotResponse,
    summary="Current window, aggregates and run state.",
)
async def get_snapshot(
    monitor: SensorMonitor = Depends(get_monitor),
) -> SnapshotResponse:
    return SnapshotResponse.from_snapshot(monitor.snapshot)


@router.post(
    "/toggle",
    response_model=SnapshotResponse,
    summary="Pause a running simulation or resume a paused one.",
)
async def toggle_run_state(
    monitor: SensorMonitor = Depends(get_monitor),
) -> SnapshotResponse:
    monitor.toggle()
    return SnapshotResponse.from_snapshot(monitor.snapshot)


@router.put(
    "/run-state",
    response_model=SnapshotResponse,
    summary="Set the run state explicitly.",
)
async def put_run_state(
    payload: RunStateRequest,
    monitor: SensorMonitor = Depends(get_monitor),
) -> SnapshotResponse:
    monitor.set_run_state(payload.state)
    return SnapshotResponse.from_snapshot(monitor.snapshot)


@router.websocket("/ws")
async def stream_snapshots(
    websocket: WebSocket,
    monitor: SensorMonitor = Depends(get_monitor),
) -> None:
    await websocket.accept()
    async with anyio.create_task_group() as task_group:
        task_group.start_soon(
            _forward_snapshots, websocket, monitor, task_group.cancel_scope
        )
        task_group.start_soon(
            _listen_for_commands, websocket, monitor, task_group.cancel_scope
        )


async def _forward_snapshots(
    websocket: WebSocket, monitor: SensorMonitor, cancel_scope: anyio.CancelScope
) -> None:
    try:
        async with aclosing(monitor.updates()) as updates:
            async for snapshot in updates:
                payload = SnapshotResponse.from_snapshot(snapshot).model_dump(mode="json")
                await websocket.send_json(payload)
    except WebSocketDisconnect:
        cancel_scope.cancel()


async def _listen_for_commands(
    websocket: WebSocket, monitor: SensorMonitor, cancel_scope: anyio.CancelScope
) -> None:
    try:
        while True:
            message = (await websocket.receive_text()).strip().lower()
            command = _WS_COMMANDS.get(message)
            if command is None:
                logger.warning("Ignoring unknown websocket command %r", message)
                continue
            run_state: RunState = command(monitor)
            logger.debug("Websocket command applied", extra={"run_state": run_state})
    except WebSocketDisconnect:
        logger.debug("Websocket client disconnected")
    # the forwarder only ends when cancelled
    cancel_scope.cancel()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /snapshot for the live sensor window."}
