import logging
import math

from django.utils import timezone

from providers.base import UnsupportedVideoUrl
from providers.resolver import classify
from rooms.permissions import PermissionService
from rooms.services import normalize_room_code

from . import events
from .exceptions import BadRequest
from .reconciliation import needs_resync, sync_tolerance
from .state import PAUSED, PLAYING, server_timestamp

logger = logging.getLogger(__name__)

VIDEO_TITLE_MAX_LENGTH = 200


def parse_position(value, field="currentTime") -> float:
    if value is None:
        raise BadRequest(f"{field} is required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BadRequest(f"{field} must be a number")

    position = float(value)
    if math.isnan(position) or math.isinf(position) or position < 0:
        raise BadRequest(f"{field} must be a non-negative number")
    return position


class PlaybackCoordinator:
    """
    Admin-only playback commands and the read-only sync snapshot.

    Play, pause and seek were already applied by the admin's own player, so
    they go to everyone except the sender. A video change resets every player
    including the sender's.
    """

    def __init__(self, store, router, membership):
        self.store = store
        self.router = router
        self.membership = membership

    async def set_playing(self, room_code, channel_name, playing, position):
        position = parse_position(position)
        code = normalize_room_code(room_code)
        state = PLAYING if playing else PAUSED
        event = events.VIDEO_PLAY if playing else events.VIDEO_PAUSE

        async with self.store.lock(code):
            room = await self.membership.active_room(code)
            self.membership.require_admin(
                room,
                channel_name,
                "Only the room admin can control playback",
                check=PermissionService.can_control_playback,
            )

            at = await self.store.save_playback(
                room, video_state=state, current_time=position
            )
            await self.router.publish(
                code,
                event,
                {
                    "currentTime": position,
                    "state": state,
                    "serverTimestamp": server_timestamp(at),
                },
                exclude=channel_name,
            )

        logger.info("Room %s %s at %.2fs", code, state, position)

    async def seek(self, room_code, channel_name, position):
        position = parse_position(position)
        code = normalize_room_code(room_code)

        async with self.store.lock(code):
            room = await self.membership.active_room(code)
            self.membership.require_admin(
                room,
                channel_name,
                "Only the room admin can control playback",
                check=PermissionService.can_control_playback,
            )

            at = await self.store.save_playback(
                room, video_state=room.video_state, current_time=position
            )
            await self.router.publish(
                code,
                events.VIDEO_SEEK,
                {
                    "currentTime": position,
                    "state": room.video_state,
                    "serverTimestamp": server_timestamp(at),
                },
                exclude=channel_name,
            )

        logger.info("Room %s seeked to %.2fs", code, position)

    async def change_video(self, room_code, channel_name, video_url, video_title=None):
        try:
            video = classify(video_url)
        except UnsupportedVideoUrl as exc:
            raise BadRequest(str(exc)) from exc

        title = video_title.strip() if isinstance(video_title, str) else ""
        title = title[:VIDEO_TITLE_MAX_LENGTH] or video.url
        code = normalize_room_code(room_code)

        async with self.store.lock(code):
            room = await self.membership.active_room(code)
            admin = self.membership.require_admin(
                room,
                channel_name,
                "Only the room admin can change the video",
                check=PermissionService.can_control_playback,
            )

            at = await self.store.save_playback(
                room,
                video_state=PAUSED,
                current_time=0.0,
                video=video,
                history=(title, admin.user_name),
            )
            await self.router.publish(
                code,
                events.VIDEO_CHANGED,
                {
                    "videoUrl": video.url,
                    "videoTitle": title,
                    "addedBy": admin.user_name,
                    "videoInfo": video.as_dict(),
                    "state": PAUSED,
                    "currentTime": 0.0,
                    "serverTimestamp": server_timestamp(at),
                },
            )

        logger.info("Video changed in room %s by %s: %s", code, admin.user_name, video.url)
        return video

    async def sync_request(self, room_code, channel_name, local_position=None):
        if local_position is not None:
            local_position = parse_position(local_position)
        code = normalize_room_code(room_code)

        async with self.store.lock(code):
            room = await self.membership.active_room(code)
            self.membership.require_member(room, channel_name)

            now = timezone.now()
            self.store.touch(code, now)
            snapshot = room.playback_snapshot(now)

        if local_position is not None:
            tolerance = sync_tolerance()
            snapshot["resync"] = needs_resync(
                local_position, snapshot["currentTime"], tolerance
            )
            snapshot["tolerance"] = tolerance

        return snapshot
