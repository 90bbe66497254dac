import logging

from django.conf import settings
from django.utils import timezone
from redis.exceptions import RedisError

from common.rate_limit import check_and_update_rate_limit
from rooms.services import normalize_room_code
from sync import events
from sync.exceptions import BadRequest, RateExceeded
from sync.state import server_timestamp

logger = logging.getLogger(__name__)


def message_max_length() -> int:
    return getattr(settings, "CHAT_MESSAGE_MAX_LENGTH", 500)


class ChatRelay:
    """
    Relays chat text to every member of a room, sender included.

    Messages are never stored. The sender's name comes from the participant
    bound to the connection, not from the payload.
    """

    def __init__(self, store, router, membership):
        self.store = store
        self.router = router
        self.membership = membership

    async def send(self, room_code, channel_name, message):
        text = message.strip() if isinstance(message, str) else ""
        if not text:
            return None

        max_length = message_max_length()
        if len(text) > max_length:
            raise BadRequest(f"Message too long (max {max_length} characters)")

        code = normalize_room_code(room_code)
        lock = self.store.lock(code)
        if getattr(settings, "CHAT_RATE_LIMIT_ENABLED", True):
            await self._check_rate(code, channel_name)

        async with lock:
            room = await self.membership.active_room(code)
            sender = self.membership.require_member(room, channel_name)

            now = timezone.now()
            self.store.touch(code, now)
            payload = {
                "userName": sender.user_name,
                "message": text,
                "timestamp": server_timestamp(now),
            }
            await self.router.publish(code, events.CHAT_MESSAGE, payload)

        logger.debug("Chat message from %s in room %s", sender.user_name, code)
        return payload

    async def _check_rate(self, code, channel_name):
        try:
            blocked = await check_and_update_rate_limit(code, channel_name)
        except RedisError as exc:
            # Chat stays available when the limiter backend is down.
            logger.warning("Chat rate limiter unavailable: %s", exc)
            return

        if blocked:
            raise RateExceeded("Rate limit exceeded. Please wait before sending more messages.")
