"""Realtime Endpoint — one websocket per editor, frames handed to the dispatcher.

Invariants:
    - A socket is registered with the broadcaster only after accept()
    - Frames are handled strictly in arrival order, one at a time per socket
    - Non-JSON text and binary frames are answered with a VALIDATION_ERROR frame;
      the socket stays open
    - Disconnect (clean or not) always unsubscribes the socket from every room
"""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from pixelcanvas.schemas.realtime import validation_error_message

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["realtime"])


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket) -> None:
    broadcaster = websocket.app.state.broadcaster
    dispatcher = websocket.app.state.dispatcher

    await websocket.accept()
    broadcaster.connect(websocket)
    connection_id = id(websocket)
    logger.info("Realtime connection opened", extra={"connection_id": connection_id})
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                await broadcaster.send_to(
                    websocket, validation_error_message("Binary frames are not supported"),
                )
                continue
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                await broadcaster.send_to(
                    websocket, validation_error_message("Frame is not valid JSON"),
                )
                continue
            await dispatcher.dispatch(websocket, payload)
    except WebSocketDisconnect:
        logger.info(
            "Realtime connection closed", extra={"connection_id": connection_id},
        )
    finally:
        broadcaster.disconnect(websocket)
