import logging

from django.conf import settings
from django.shortcuts import get_object_or_404
from django.utils.crypto import get_random_string

from .models import Room, VideoHistory

logger = logging.getLogger(__name__)

DEFAULT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class RoomCodeExhausted(Exception):
    pass


def _code_alphabet():
    return getattr(settings, "ROOM_CODE_ALPHABET", DEFAULT_CODE_ALPHABET)


def _code_length():
    return getattr(settings, "ROOM_CODE_LENGTH", 8)


def normalize_room_code(code) -> str:
    if not isinstance(code, str):
        return ""
    return code.strip().upper()


def is_valid_room_code(code: str) -> bool:
    alphabet = _code_alphabet()
    return len(code) == _code_length() and all(ch in alphabet for ch in code)


def generate_room_code() -> str:
    return get_random_string(_code_length(), allowed_chars=_code_alphabet())


def generate_unique_room_code(exists, max_attempts=None) -> str:
    """
    Draw codes until ``exists(code)`` says one is free.

    Gives up with RoomCodeExhausted after ``max_attempts`` draws.
    """
    if max_attempts is None:
        max_attempts = getattr(settings, "ROOM_CODE_MAX_ATTEMPTS", 10)

    for _ in range(max_attempts):
        code = generate_room_code()
        if not exists(code):
            return code

    raise RoomCodeExhausted(
        f"Failed to generate a unique room code after {max_attempts} attempts"
    )


def create_room(*, name, created_by):
    code = generate_unique_room_code(
        lambda candidate: Room.objects.filter(code=candidate).exists()
    )

    room = Room.objects.create(
        code=code,
        name=name,
        created_by=created_by,
    )
    logger.info("Room %s created by %s", room.code, created_by)
    return room


def get_room_by_code(room_code):
    return get_object_or_404(
        Room,
        code=normalize_room_code(room_code),
        is_active=True,
    )


def get_video_history(room_code, limit=None):
    room = get_room_by_code(room_code)
    if limit is None:
        limit = getattr(settings, "VIDEO_HISTORY_LIMIT", 50)
    return list(VideoHistory.objects.filter(room=room).order_by("-added_at")[:limit])
