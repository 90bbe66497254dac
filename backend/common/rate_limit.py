import time

from django.conf import settings

from common.redis_client import get_redis_client
from common.redis_keys import chat_cooldown_key, chat_rate_window_key


def _limits():
    return (
        getattr(settings, "CHAT_RATE_LIMIT_COUNT", 5),
        getattr(settings, "CHAT_RATE_LIMIT_WINDOW", 3),
        getattr(settings, "CHAT_COOLDOWN_SECONDS", 10),
    )


async def is_chat_blocked(client, room_code: str, sender: str) -> bool:
    """
    Returns True if sender is currently in cooldown.
    """
    return bool(await client.exists(chat_cooldown_key(room_code, sender)))


async def check_and_update_rate_limit(room_code: str, sender: str) -> bool:
    """
    Record one chat message and report whether it should be blocked.

    Sliding window of CHAT_RATE_LIMIT_COUNT messages per
    CHAT_RATE_LIMIT_WINDOW seconds; exceeding it starts a cooldown.
    """
    limit_count, window, cooldown = _limits()
    client = get_redis_client()

    try:
        if await is_chat_blocked(client, room_code, sender):
            return True

        key = chat_rate_window_key(room_code, sender)
        now = time.time()

        await client.zadd(key, {str(now): now})
        await client.zremrangebyscore(key, 0, now - window)

        count = await client.zcard(key)

        if count > limit_count:
            await client.set(chat_cooldown_key(room_code, sender), "1", ex=cooldown)
            await client.delete(key)
            return True

        await client.expire(key, window)
        return False
    finally:
        await client.aclose()
