# backend/utils/events.py
import logging
from typing import Any

import socketio
from fastapi import Request

logger = logging.getLogger(__name__)

# Event names on the default Socket.IO namespace
NEW_REPORT = "newReport"
REPORT_UPDATED = "reportUpdated"
REPORT_DELETED = "reportDeleted"
NEW_HELP_REQUEST = "newHelpRequest"
HELP_REQUEST_UPDATED = "helpRequestUpdated"
HELP_REQUEST_DELETED = "helpRequestDeleted"

# Reserved for the volunteer directory, nothing emits them yet
NEW_VOLUNTEER = "newVolunteer"
VOLUNTEER_UPDATED = "volunteerUpdated"
VOLUNTEER_DELETED = "volunteerDeleted"


class EventPublisher:
    """Broadcasts an already-serialized record to every connected client."""

    async def publish(self, event: str, payload: Any) -> None:
        raise NotImplementedError


class SocketIOPublisher(EventPublisher):
    def __init__(self, sio: socketio.AsyncServer):
        self.sio = sio

    async def publish(self, event: str, payload: Any) -> None:
        # Fire-and-forget: a failed broadcast must not fail the request that caused it
        try:
            await self.sio.emit(event, payload)
        except Exception:
            logger.exception("Failed to emit %s", event)
            return
        logger.debug("Emitted %s", event)


def create_socket_server(allowed_origins) -> socketio.AsyncServer:
    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=allowed_origins)

    @sio.event
    async def connect(sid, environ):
        logger.info("Socket.IO client connected: %s", sid)

    @sio.event
    async def disconnect(sid, reason=None):
        logger.info("Socket.IO client disconnected: %s", sid)

    return sio


# FastAPI dependency; the publisher is attached to the app at startup
def get_publisher(request: Request) -> EventPublisher:
    return request.app.state.publisher
