import logging
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.utils import timezone

from rooms.permissions import PermissionService
from rooms.services import normalize_room_code

from . import events
from .exceptions import BadRequest, Forbidden, InvalidTarget, RoomNotFound
from .state import ParticipantState

logger = logging.getLogger(__name__)

KICKED_MESSAGE = "You have been removed from the room by the admin"
CLOSED_BY_ADMIN = "closed"


@dataclass(frozen=True)
class JoinResult:
    room_code: str
    participant: ParticipantState
    is_admin: bool
    created: bool


class MembershipManager:
    """
    Join, leave and kick, plus the single-admin rule.

    The first participant of an empty room becomes admin. When the admin
    leaves, the longest-standing remaining participant takes over. The admin
    can never be kicked.
    """

    def __init__(self, store, router):
        self.store = store
        self.router = router

    # ---------- lookups shared with playback and chat ----------

    async def active_room(self, room_code):
        room = await self.store.get(room_code)
        if not room.is_active:
            raise RoomNotFound()
        return room

    def require_member(self, room, channel_name):
        participant = room.participant_for_channel(channel_name)
        if participant is None:
            raise Forbidden("You are not in this room")
        return participant

    def require_admin(
        self,
        room,
        channel_name,
        message="Only the room admin can do that",
        check=PermissionService.is_admin,
    ):
        participant = self.require_member(room, channel_name)
        if not check(participant):
            raise Forbidden(message)
        return participant

    # ---------- commands ----------

    async def join(self, room_code, user_name, channel_name) -> JoinResult:
        code = normalize_room_code(room_code)
        user_name = self._clean_user_name(user_name)
        if not code or not user_name:
            raise BadRequest("Room code and username are required")

        lock = self.store.lock(code)

        current = self.store.room_code_for(channel_name)
        if current is not None and current != code:
            await self.leave(channel_name)

        async with lock:
            room = await self.store.get(code)

            existing = room.participant_for_channel(channel_name)
            if existing is not None:
                await self.router.send_private(
                    channel_name,
                    events.ROOM_SNAPSHOT,
                    self._snapshot(room, existing),
                )
                return JoinResult(code, existing, existing.is_admin, created=False)

            is_admin = not room.participants
            participant = ParticipantState(
                id=str(uuid.uuid4()),
                user_name=user_name,
                channel_name=channel_name,
                is_admin=is_admin,
                joined_at=timezone.now(),
            )

            # First member of an empty room (re)activates it, paused.
            await self.store.upsert_participant(room, participant, activate=is_admin)
            await self.router.subscribe(code, channel_name)

            await self.router.send_private(
                channel_name,
                events.ROOM_SNAPSHOT,
                self._snapshot(room, participant),
            )
            await self.router.publish(
                code,
                events.PARTICIPANT_JOINED,
                {
                    "userName": participant.user_name,
                    "participants": room.roster(),
                },
                exclude=channel_name,
            )

        logger.info(
            "%s joined room %s (admin=%s)", participant.user_name, code, is_admin
        )
        return JoinResult(code, participant, is_admin, created=True)

    async def leave(self, channel_name, room_code=None, *, force=False):
        """
        Remove the participant bound to ``channel_name``.

        Returns the removed participant, or None when the connection was not
        in a room (leaving twice is a no-op). ``force`` removes the live
        participant even if the durable write fails.
        """
        code = self.store.room_code_for(channel_name)
        if code is None:
            return None

        if room_code is not None and normalize_room_code(room_code) != code:
            raise Forbidden("You are not in this room")

        async with self.store.lock(code):
            room = self.store.peek(code)
            participant = room.participant_for_channel(channel_name) if room else None
            if participant is None:
                return None

            promoted = await self._remove(room, participant, force=force)
            await self.router.unsubscribe(code, channel_name)

            if room.is_active:
                await self.router.publish(
                    code,
                    events.PARTICIPANT_LEFT,
                    {
                        "userName": participant.user_name,
                        "kicked": False,
                        "participants": room.roster(),
                    },
                )

        logger.info("%s left room %s", participant.user_name, code)
        if promoted is not None:
            logger.info("%s is now admin of room %s", promoted.user_name, code)
        elif not room.is_active:
            logger.info("Room %s is empty and was deactivated", code)
        return participant

    async def disconnect(self, channel_name):
        # The connection is gone, so the participant goes regardless.
        return await self.leave(channel_name, force=True)

    async def kick(self, channel_name, room_code, target_id):
        code = normalize_room_code(room_code)
        if not code or not target_id:
            raise BadRequest("Room code and participant ID are required")

        async with self.store.lock(code):
            room = await self.active_room(code)
            requester = self.require_admin(
                room,
                channel_name,
                "Only the room admin can kick users",
                check=PermissionService.can_moderate,
            )

            target = room.participant_by_id(target_id)
            if target is None:
                raise InvalidTarget("Participant not found")
            if not PermissionService.can_be_kicked(target):
                raise InvalidTarget("Cannot kick the room admin")

            await self._remove(room, target)
            await self.router.unsubscribe(code, target.channel_name)

            await self.router.send_private(
                target.channel_name,
                events.USER_KICKED,
                {"message": KICKED_MESSAGE, "roomCode": code},
            )
            await self.router.publish(
                code,
                events.USER_LEFT,
                {
                    "userName": target.user_name,
                    "kicked": True,
                    "participants": room.roster(),
                },
            )

        logger.info(
            "%s was kicked from room %s by %s",
            target.user_name,
            code,
            requester.user_name,
        )
        return target

    async def close_room(self, channel_name, room_code):
        """Admin-only: deactivate the room and detach everyone in it."""
        code = normalize_room_code(room_code)
        if not code:
            raise BadRequest("Room code is required")

        async with self.store.lock(code):
            room = await self.active_room(code)
            requester = self.require_admin(
                room,
                channel_name,
                "Only the room admin can close the room",
                check=PermissionService.can_moderate,
            )
            removed = await self.close(room, CLOSED_BY_ADMIN)

        logger.info(
            "Room %s closed by %s (%d participant(s) detached)",
            code,
            requester.user_name,
            len(removed),
        )
        return removed

    async def close(self, room, reason):
        """
        Deactivate ``room`` and tell each participant why.

        The caller holds the room's lock.
        """
        removed = await self.store.deactivate(room)
        for participant in removed:
            await self.router.unsubscribe(room.code, participant.channel_name)
            await self.router.send_private(
                participant.channel_name,
                events.ROOM_CLOSED,
                {"roomCode": room.code, "reason": reason},
            )
        return removed

    # ---------- helpers ----------

    async def _remove(self, room, participant, force=False):
        # participants are in join order, so the head is the earliest joiner
        remaining = [p for p in room.participants if p is not participant]
        promote = remaining[0] if participant.is_admin and remaining else None

        await self.store.remove_participant(
            room,
            participant,
            promote=promote,
            deactivate=not remaining,
            force=force,
        )
        return promote

    def _clean_user_name(self, user_name):
        if not isinstance(user_name, str):
            return ""
        user_name = user_name.strip()
        max_length = getattr(settings, "USER_NAME_MAX_LENGTH", 50)
        if len(user_name) > max_length:
            raise BadRequest(f"Username must be at most {max_length} characters")
        return user_name

    def _snapshot(self, room, participant):
        return {
            "room": room.as_dict(),
            "participants": room.roster(),
            "participantId": participant.id,
            "isAdmin": participant.is_admin,
        }
