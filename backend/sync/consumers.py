import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from . import events
from .coordinator import get_coordinator
from .exceptions import BadRequest, SessionError

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "internal-error"


class RoomSyncConsumer(AsyncWebsocketConsumer):
    """
    One websocket connection. The channel name is the connection identity;
    the room a connection is in is tracked by the session store.
    """

    async def connect(self):
        self.coordinator = get_coordinator()
        self.closed = False
        self.handlers = {
            events.JOIN_ROOM: self.handle_join,
            events.LEAVE_ROOM: self.handle_leave,
            events.PLAY_VIDEO: self.handle_play,
            events.PAUSE_VIDEO: self.handle_pause,
            events.SEEK_VIDEO: self.handle_seek,
            events.CHANGE_VIDEO: self.handle_change_video,
            events.CHAT_MESSAGE: self.handle_chat,
            events.SYNC_REQUEST: self.handle_sync_request,
            events.KICK_USER: self.handle_kick,
            events.CLOSE_ROOM: self.handle_close_room,
        }

        await self.accept()
        self.coordinator.sweeper.ensure_started()

    async def disconnect(self, close_code):
        self.closed = True
        try:
            await self.coordinator.membership.disconnect(self.channel_name)
        except Exception:
            logger.exception("Cleanup failed for connection %s", self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if self.closed:
            return

        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            return

        if not isinstance(data, dict):
            return

        event_type = data.get("type")
        try:
            handler = self.handlers.get(event_type)
            if handler is None:
                raise BadRequest(f"Unknown event type: {event_type}")
            await handler(data)
        except SessionError as exc:
            logger.info(
                "Rejected %s from %s: %s", event_type, self.channel_name, exc.code
            )
            await self.send_error(exc.code, exc.message, event_type)
        except Exception:
            logger.exception("Unhandled error processing %s", event_type)
            await self.send_error(INTERNAL_ERROR, "Internal server error", event_type)

    # ---------------- MEMBERSHIP ----------------

    async def handle_join(self, data):
        await self.coordinator.membership.join(
            data.get("roomCode"), data.get("userName"), self.channel_name
        )

    async def handle_leave(self, data):
        await self.coordinator.membership.leave(self.channel_name, data.get("roomCode"))

    async def handle_kick(self, data):
        await self.coordinator.membership.kick(
            self.channel_name, data.get("roomCode"), data.get("participantId")
        )

    async def handle_close_room(self, data):
        await self.coordinator.membership.close_room(
            self.channel_name, data.get("roomCode")
        )

    # ---------------- PLAYBACK (ADMIN ONLY) ----------------

    async def handle_play(self, data):
        await self.coordinator.playback.set_playing(
            data.get("roomCode"), self.channel_name, True, data.get("currentTime")
        )

    async def handle_pause(self, data):
        await self.coordinator.playback.set_playing(
            data.get("roomCode"), self.channel_name, False, data.get("currentTime")
        )

    async def handle_seek(self, data):
        await self.coordinator.playback.seek(
            data.get("roomCode"), self.channel_name, data.get("currentTime")
        )

    async def handle_change_video(self, data):
        await self.coordinator.playback.change_video(
            data.get("roomCode"),
            self.channel_name,
            data.get("videoUrl"),
            data.get("videoTitle"),
        )

    async def handle_sync_request(self, data):
        snapshot = await self.coordinator.playback.sync_request(
            data.get("roomCode"), self.channel_name, data.get("currentTime")
        )
        await self.send_json({"type": events.SYNC_STATE, **snapshot})

    # ---------------- CHAT ----------------

    async def handle_chat(self, data):
        await self.coordinator.chat.send(
            data.get("roomCode"), self.channel_name, data.get("message")
        )

    # ---------------- OUTBOUND ----------------

    async def send_json(self, content):
        if self.closed:
            return
        await self.send(text_data=json.dumps(content))

    async def send_error(self, code, message, event_type=None):
        await self.send_json({
            "type": events.ERROR,
            "code": code,
            "message": message,
            "event": event_type,
        })

    async def room_event(self, message):
        """
        Deliver a room notification, skipping the connection that caused it.
        """
        if message.get("exclude") == self.channel_name:
            return
        await self.send_json({"type": message["event"], **message["payload"]})
