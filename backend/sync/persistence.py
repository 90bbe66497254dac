"""
Durable side of the session store.

Plain synchronous ORM functions; the session store runs them through
``database_sync_to_async`` so they execute on the database worker pool.
Each mutation is one transaction.
"""

from django.db import transaction
from django.utils import timezone

from providers.base import UnsupportedVideoUrl, VideoReference
from providers.resolver import classify
from rooms.models import Participant, Room, VideoHistory

from .state import PAUSED, RoomState


def _reference_from_row(room):
    if not room.current_video_url:
        return None
    try:
        return classify(room.current_video_url)
    except UnsupportedVideoUrl:
        url = room.current_video_url
        return VideoReference(
            platform=room.video_platform or "direct",
            video_id=url,
            url=url,
            embed_url=url,
        )


def load_room(code):
    room = Room.objects.filter(code=code).first()
    if room is None:
        return None

    # Rows left behind by connections of a previous server process.
    Participant.objects.filter(room=room).delete()

    return RoomState(
        id=str(room.id),
        code=room.code,
        name=room.name,
        created_by=room.created_by,
        video=_reference_from_row(room),
        video_state=room.video_state,
        current_time=room.current_time,
        is_active=room.is_active,
        last_activity=room.last_activity,
        position_updated_at=room.updated_at,
    )


def write_join(room_id, participant, *, activate, at):
    with transaction.atomic():
        Participant.objects.create(
            id=participant.id,
            room_id=room_id,
            user_name=participant.user_name,
            channel_name=participant.channel_name,
            is_admin=participant.is_admin,
            joined_at=participant.joined_at,
        )

        fields = {"last_activity": at, "updated_at": at}
        if activate:
            fields.update(is_active=True, video_state=PAUSED)
        Room.objects.filter(id=room_id).update(**fields)


def write_leave(room_id, participant_id, *, promote_id, deactivate, at):
    with transaction.atomic():
        Participant.objects.filter(id=participant_id).delete()

        if promote_id:
            Participant.objects.filter(id=promote_id).update(is_admin=True)

        fields = {"last_activity": at, "updated_at": at}
        if deactivate:
            fields["is_active"] = False
        Room.objects.filter(id=room_id).update(**fields)


def write_playback(room_id, *, video_state, current_time, at, video=None, history=None):
    with transaction.atomic():
        fields = {
            "video_state": video_state,
            "current_time": current_time,
            "last_activity": at,
            "updated_at": at,
        }
        if video is not None:
            fields.update(current_video_url=video.url, video_platform=video.platform)
        Room.objects.filter(id=room_id).update(**fields)

        if history is not None:
            title, added_by = history
            VideoHistory.objects.create(
                room_id=room_id,
                video_url=video.url,
                video_platform=video.platform,
                video_title=(title or video.url)[:200],
                added_by=(added_by or "Unknown")[:50],
                added_at=at,
            )


def write_activity(room_id, at):
    Room.objects.filter(id=room_id, last_activity__lt=at).update(last_activity=at)


def write_deactivation(room_id):
    with transaction.atomic():
        Participant.objects.filter(room_id=room_id).delete()
        Room.objects.filter(id=room_id).update(is_active=False, updated_at=timezone.now())


def idle_room_codes(cutoff):
    return list(
        Room.objects
        .filter(is_active=True, last_activity__lt=cutoff)
        .values_list("code", flat=True)
    )


def deactivate_if_idle(code, cutoff):
    with transaction.atomic():
        updated = (
            Room.objects
            .filter(code=code, is_active=True, last_activity__lt=cutoff)
            .update(is_active=False, updated_at=timezone.now())
        )
        if updated:
            Participant.objects.filter(room__code=code).delete()
    return bool(updated)
