import asyncio

from channels.db import database_sync_to_async

from rooms.models import Room


async def wait_for_event(comm, expected_type, timeout=1.0):
    """
    Consume messages until expected_type is found or timeout expires.
    """
    try:
        while True:
            event = await comm.receive_json_from(timeout=timeout)
            if event.get("type") == expected_type:
                return event
    except asyncio.TimeoutError as exc:
        raise AssertionError(f"Did not receive event {expected_type}") from exc


@database_sync_to_async
def fetch_room(room_id):
    return Room.objects.get(id=room_id)


class RecordingRouter:
    """Stands in for BroadcastRouter and keeps everything it was asked to send."""

    def __init__(self):
        self.published = []
        self.private = []
        self.subscriptions = set()

    async def subscribe(self, room_code, channel_name):
        self.subscriptions.add((room_code, channel_name))

    async def unsubscribe(self, room_code, channel_name):
        self.subscriptions.discard((room_code, channel_name))

    async def publish(self, room_code, event, payload, exclude=None):
        self.published.append((room_code, event, payload, exclude))

    async def send_private(self, channel_name, event, payload):
        self.private.append((channel_name, event, payload))

    def published_events(self):
        return [event for _, event, _, _ in self.published]

    def last_published(self, event):
        for entry in reversed(self.published):
            if entry[1] == event:
                return entry
        return None

    def private_to(self, channel_name):
        return [(event, payload) for name, event, payload in self.private if name == channel_name]
