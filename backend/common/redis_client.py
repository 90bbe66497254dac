import redis.asyncio as redis
from django.conf import settings


def get_redis_url():
    return getattr(settings, "REDIS_URL", "redis://127.0.0.1:6379/0")


def get_redis_timeout():
    return getattr(settings, "REDIS_SOCKET_TIMEOUT", 0.5)


def get_redis_client():
    """
    Fresh client per call; async clients are bound to the running event loop.

    Short socket timeouts keep an unreachable Redis from holding up chat.
    The caller closes the client with ``aclose()``.
    """
    timeout = get_redis_timeout()
    return redis.from_url(
        get_redis_url(),
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
