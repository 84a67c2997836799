"""WebSocket channel for live occurrence, photo and share events.

Clients send and receive JSON text frames shaped {"event": ..., "data": ...};
binary and unparseable frames are skipped.
Joining a user room with "user:login" is not authenticated.
"""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from cleancity_api.events import RELAYED_EVENTS, USER_LOGIN, manager, notifier, user_room

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def events_socket(websocket: WebSocket):
    await manager.connect(websocket)
    logger.info("Client connected to real-time updates")
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except (ValueError, KeyError):
                # KeyError: binary frame, receive_json only reads "text"
                logger.warning("Ignoring malformed socket frame")
                continue
            if not isinstance(message, dict):
                continue

            event = message.get("event")
            data = message.get("data") or {}
            if not isinstance(data, dict):
                continue

            if event == USER_LOGIN and data.get("userId"):
                manager.join(websocket, user_room(data["userId"]))
                logger.info(f"User {data['userId']} joined real-time updates")
            elif event in RELAYED_EVENTS:
                await notifier.relay(event, data)
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        manager.disconnect(websocket)
