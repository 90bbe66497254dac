import asyncio
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from rooms.services import is_valid_room_code

from .exceptions import TransientStoreError

logger = logging.getLogger(__name__)

IDLE_REASON = "idle"


def idle_timeout() -> timedelta:
    return timedelta(seconds=getattr(settings, "ROOM_IDLE_TIMEOUT_SECONDS", 86400))


def sweep_interval():
    return getattr(settings, "ROOM_SWEEP_INTERVAL_SECONDS", 21600)


class IdleRoomSweeper:
    """
    Deactivates rooms whose last activity is older than the idle timeout.

    Rooms held in memory are checked against their live activity clock and
    have it written back, so the durable pass (and the management command,
    which runs in another process) only closes rooms nobody is using.
    """

    def __init__(self, store, membership):
        self.store = store
        self.membership = membership
        self._task = None

    async def sweep(self, now=None):
        now = now or timezone.now()
        cutoff = now - idle_timeout()
        closed = []

        await self._retry_pending_leaves()

        for code in self.store.cached_codes():
            try:
                if await self._sweep_cached(code, cutoff):
                    closed.append(code)
            except TransientStoreError:
                logger.warning("Skipping idle check for room %s: store unavailable", code)

        cached = set(self.store.cached_codes())
        for code in await self.store.idle_room_codes(cutoff):
            if code in cached or not is_valid_room_code(code):
                continue
            async with self.store.lock(code):
                if self.store.peek(code) is not None:
                    continue
                if await self.store.deactivate_if_idle(code, cutoff):
                    closed.append(code)

        if closed:
            logger.info("Closed %d idle room(s): %s", len(closed), ", ".join(closed))
        return closed

    async def _sweep_cached(self, code, cutoff):
        async with self.store.lock(code):
            room = self.store.peek(code)
            if room is None:
                return False

            if not room.is_active:
                if not room.participants:
                    self.store.evict(code)
                return False

            if room.last_activity >= cutoff:
                await self.store.flush_activity(room)
                return False

            await self.membership.close(room, IDLE_REASON)
            return True

    async def _retry_pending_leaves(self):
        for participant_id, code in self.store.pending_leaves():
            async with self.store.lock(code):
                try:
                    await self.store.retry_leave(participant_id)
                except TransientStoreError:
                    logger.warning(
                        "Durable removal of %s from room %s still failing",
                        participant_id,
                        code,
                    )

    def ensure_started(self):
        interval = sweep_interval()
        if not interval:
            return
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._run(interval))

    async def _run(self, interval):
        while True:
            await asyncio.sleep(interval)
            try:
                await self.sweep()
            except Exception:
                logger.exception("Idle room sweep failed")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
