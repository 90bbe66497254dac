import logging

from channels.exceptions import ChannelFull
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

# Handled by RoomSyncConsumer.room_event
MESSAGE_TYPE = "room.event"


def room_group_name(room_code: str) -> str:
    return f"room_{room_code}"


class BroadcastRouter:
    """
    Fan-out of room notifications over the channel layer.

    Delivery is best-effort and at most once: every connection has its own
    bounded channel queue, a full or dead queue drops the event and the
    connection recovers with ``sync-request``.
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        return self._channel_layer or get_channel_layer()

    async def subscribe(self, room_code, channel_name):
        await self.channel_layer.group_add(room_group_name(room_code), channel_name)

    async def unsubscribe(self, room_code, channel_name):
        await self.channel_layer.group_discard(room_group_name(room_code), channel_name)

    async def publish(self, room_code, event, payload, exclude=None):
        message = {
            "type": MESSAGE_TYPE,
            "event": event,
            "payload": payload,
            "exclude": exclude,
        }
        try:
            await self.channel_layer.group_send(room_group_name(room_code), message)
        except Exception:
            logger.exception("Broadcast of %s to room %s failed", event, room_code)

    async def send_private(self, channel_name, event, payload):
        message = {
            "type": MESSAGE_TYPE,
            "event": event,
            "payload": payload,
            "exclude": None,
        }
        try:
            await self.channel_layer.send(channel_name, message)
        except ChannelFull:
            logger.warning("Dropped %s for %s: channel full", event, channel_name)
        except Exception:
            logger.exception("Private send of %s to %s failed", event, channel_name)
