import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from oneuptime.notifications.realtime import RealtimeService, realtime_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_realtime_service() -> RealtimeService:
    return realtime_service


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        await websocket.send_json(message)


@router.websocket("/projects/{project_id}/realtime")
async def project_events(
    websocket: WebSocket,
    project_id: int,
    realtime: Annotated[RealtimeService, Depends(get_realtime_service)],
) -> None:
    queue = realtime.subscribe(project_id)
    await websocket.accept()
    logger.info("Realtime client connected to project %s", project_id)
    sender = asyncio.create_task(_forward_events(websocket, queue))
    try:
        # clients only listen; reading just waits for the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Realtime client disconnected from project %s", project_id)
    finally:
        sender.cancel()
        realtime.unsubscribe(project_id, queue)
