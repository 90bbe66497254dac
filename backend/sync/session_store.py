import asyncio
import logging
import weakref

from channels.db import database_sync_to_async
from django.db import DatabaseError
from django.utils import timezone

from rooms.services import is_valid_room_code, normalize_room_code

from . import persistence
from .exceptions import RoomNotFound, TransientStoreError
from .state import PAUSED

logger = logging.getLogger(__name__)


class SessionStore:
    """
    In-memory authoritative state for active rooms.

    Every mutation for a room runs while its lock from ``lock(code)`` is held.
    Mutations write the durable store first and only touch memory once the
    write succeeded, so a failed write leaves the room unchanged. The one
    exception is a forced removal for a connection that has already closed.
    """

    def __init__(self):
        self._rooms = {}
        # Only locks someone holds or waits on stay alive.
        self._locks = weakref.WeakValueDictionary()
        self._channels = {}  # channel name -> room code
        self._pending_leaves = {}  # participant id -> (room code, room id, deactivate)

    def lock(self, code) -> asyncio.Lock:
        code = normalize_room_code(code)
        if not is_valid_room_code(code):
            raise RoomNotFound()

        lock = self._locks.get(code)
        if lock is None:
            lock = self._locks[code] = asyncio.Lock()
        return lock

    async def _run(self, func, *args, **kwargs):
        try:
            return await database_sync_to_async(func)(*args, **kwargs)
        except DatabaseError as exc:
            logger.warning(
                "Durable store call %s for %s failed: %s",
                getattr(func, "__name__", func),
                args[0] if args else "-",
                exc,
            )
            raise TransientStoreError() from exc

    # ---------- reads ----------

    async def get(self, code):
        code = normalize_room_code(code)
        room = self._rooms.get(code)
        if room is not None:
            return room

        if not is_valid_room_code(code):
            raise RoomNotFound()

        room = await self._run(persistence.load_room, code)
        if room is None:
            raise RoomNotFound()

        logger.debug("Room %s loaded from durable store", code)
        return self._rooms.setdefault(code, room)

    def peek(self, code):
        return self._rooms.get(normalize_room_code(code))

    def cached_codes(self):
        return list(self._rooms)

    def list_participants(self, code):
        room = self.peek(code)
        if room is None:
            return []
        return list(room.participants)

    def room_code_for(self, channel_name):
        return self._channels.get(channel_name)

    def participant_for(self, channel_name):
        code = self._channels.get(channel_name)
        if code is None:
            return None
        room = self._rooms.get(code)
        if room is None:
            return None
        return room.participant_for_channel(channel_name)

    # ---------- mutations ----------

    def touch(self, code, at=None):
        room = self.peek(code)
        if room is not None:
            room.last_activity = at or timezone.now()

    async def upsert_participant(self, room, participant, *, activate=False):
        existing = self.participant_for(participant.channel_name)
        if existing is not None:
            return existing

        now = timezone.now()
        await self._run(
            persistence.write_join,
            room.id,
            participant,
            activate=activate,
            at=now,
        )

        if activate:
            room.is_active = True
            room.video_state = PAUSED
            room.position_updated_at = now
        room.participants.append(participant)
        room.last_activity = now
        self._channels[participant.channel_name] = room.code
        return participant

    async def remove_participant(
        self, room, participant, *, promote=None, deactivate=False, force=False
    ):
        """
        Drop ``participant`` from ``room``.

        With ``force`` the in-memory removal happens even when the durable
        write fails; the write is queued for ``retry_leave``. Used when the
        connection is already gone and the failure cannot be reported.
        """
        now = timezone.now()
        try:
            await self._run(
                persistence.write_leave,
                room.id,
                participant.id,
                promote_id=promote.id if promote else None,
                deactivate=deactivate,
                at=now,
            )
        except TransientStoreError:
            if not force:
                raise
            self._pending_leaves[participant.id] = (room.code, room.id, deactivate)
            logger.warning(
                "Queued durable removal of %s from room %s", participant.id, room.code
            )

        room.participants = [p for p in room.participants if p is not participant]
        self._channels.pop(participant.channel_name, None)
        if promote is not None:
            promote.is_admin = True
        room.last_activity = now

        if deactivate:
            room.is_active = False
            self.evict(room.code)

    async def save_playback(self, room, *, video_state, current_time, video=None, history=None):
        now = timezone.now()
        await self._run(
            persistence.write_playback,
            room.id,
            video_state=video_state,
            current_time=current_time,
            at=now,
            video=video,
            history=history,
        )

        room.video_state = video_state
        room.current_time = current_time
        room.position_updated_at = now
        room.last_activity = now
        if video is not None:
            room.video = video
        return now

    async def deactivate(self, room):
        await self._run(persistence.write_deactivation, room.id)

        removed = list(room.participants)
        for participant in removed:
            self._channels.pop(participant.channel_name, None)
        room.participants = []
        room.is_active = False
        self.evict(room.code)
        return removed

    async def flush_activity(self, room):
        await self._run(persistence.write_activity, room.id, room.last_activity)

    async def idle_room_codes(self, cutoff):
        return await self._run(persistence.idle_room_codes, cutoff)

    async def deactivate_if_idle(self, code, cutoff):
        return await self._run(persistence.deactivate_if_idle, code, cutoff)

    def pending_leaves(self):
        return [(pid, code) for pid, (code, _, _) in self._pending_leaves.items()]

    async def retry_leave(self, participant_id):
        """
        Replay a queued durable removal against the current live state.

        Run while the room's lock is held. A room that was rejoined in the
        meantime is cached again, so it keeps its active flag and its
        current admin is written back.
        """
        code, room_id, deactivate = self._pending_leaves[participant_id]
        room = self.peek(code)
        admin = room.admin if room is not None else None

        await self._run(
            persistence.write_leave,
            room_id,
            participant_id,
            promote_id=admin.id if admin else None,
            deactivate=deactivate and room is None,
            at=room.last_activity if room is not None else timezone.now(),
        )
        self._pending_leaves.pop(participant_id, None)

    def evict(self, code):
        self._rooms.pop(normalize_room_code(code), None)
