"""Real-time event fanout to connected WebSocket clients.

Delivery is fire-and-forget: no acknowledgement, no replay. A client that
is not connected when an event is sent simply misses it.
"""
import logging

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

OCCURRENCE_NEW = "occurrence:new"
OCCURRENCE_CHANGED = "occurrence:changed"
OCCURRENCE_REMOVED = "occurrence:removed"
PHOTO_NEW = "photo:new"
SHARE_RECEIVED = "share:received"

USER_LOGIN = "user:login"

# Client-emitted event -> outbound event
RELAYED_EVENTS = {
    "occurrence:created": OCCURRENCE_NEW,
    "occurrence:updated": OCCURRENCE_CHANGED,
    "occurrence:deleted": OCCURRENCE_REMOVED,
    "photo:uploaded": PHOTO_NEW,
    "share:created": SHARE_RECEIVED,
}


def user_room(user_id) -> str:
    return f"user:{user_id}"


class ConnectionManager:
    def __init__(self):
        self.connections: list[WebSocket] = []
        self.rooms: dict[str, list[WebSocket]] = {}  # room -> connections

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.connections.append(websocket)

    def join(self, websocket: WebSocket, room: str):
        members = self.rooms.setdefault(room, [])
        if websocket not in members:
            members.append(websocket)

    def disconnect(self, websocket: WebSocket):
        self.connections = [ws for ws in self.connections if ws is not websocket]
        for room in list(self.rooms):
            members = [ws for ws in self.rooms[room] if ws is not websocket]
            if members:
                self.rooms[room] = members
            else:
                del self.rooms[room]

    async def _send(self, targets: list[WebSocket], event: str, data):
        message = {"event": event, "data": jsonable_encoder(data)}
        dead = []
        for ws in targets:
            try:
                await ws.send_json(message)
            except Exception:
                dead.append(ws)
        for ws in dead:
            logger.warning(f"Dropping dead socket while sending {event}")
            self.disconnect(ws)

    async def broadcast(self, event: str, data):
        await self._send(list(self.connections), event, data)

    async def send_to_room(self, room: str, event: str, data):
        await self._send(list(self.rooms.get(room, [])), event, data)


class EventNotifier:
    """Domain events -> socket events, with the routing each event requires."""

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    async def occurrence_created(self, occurrence):
        await self.manager.broadcast(OCCURRENCE_NEW, occurrence)

    async def occurrence_updated(self, occurrence):
        await self.manager.broadcast(OCCURRENCE_CHANGED, occurrence)

    async def occurrence_deleted(self, occurrence_id: str):
        await self.manager.broadcast(OCCURRENCE_REMOVED, {"id": occurrence_id})

    async def photo_uploaded(self, user_id: str, photo):
        await self.manager.send_to_room(user_room(user_id), PHOTO_NEW, photo)

    async def share_created(self, shared_with_id: str, share):
        await self.manager.send_to_room(user_room(shared_with_id), SHARE_RECEIVED, share)

    async def relay(self, client_event: str, data: dict):
        """Re-emit a client-originated event under its outbound name."""
        if client_event == "photo:uploaded":
            await self.photo_uploaded(data.get("userId"), data)
        elif client_event == "share:created":
            await self.share_created(data.get("sharedWithId"), data)
        else:
            await self.manager.broadcast(RELAYED_EVENTS[client_event], data)


manager = ConnectionManager()
notifier = EventNotifier(manager)


def get_notifier() -> EventNotifier:
    return notifier
