import logging

from django.http import Http404
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.api_response import error, success

from .serializers import (
    CreateRoomSerializer,
    RoomDetailSerializer,
    RoomSerializer,
    VideoHistorySerializer,
)
from .services import (
    RoomCodeExhausted,
    create_room,
    get_room_by_code,
    get_video_history,
)

logger = logging.getLogger(__name__)


def _room_not_found():
    return Response(
        error("not_found", "Room not found"),
        status=status.HTTP_404_NOT_FOUND,
    )


@api_view(["POST"])
def create_room_view(request):
    serializer = CreateRoomSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            error("validation_failed", "Validation failed", serializer.errors),
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        room = create_room(
            name=serializer.validated_data["name"],
            created_by=serializer.validated_data["createdBy"],
        )
    except RoomCodeExhausted as exc:
        logger.error("Room creation failed: %s", exc)
        return Response(
            error("code_exhausted", "Failed to create room"),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return Response(success(RoomSerializer(room).data), status=status.HTTP_201_CREATED)


@api_view(["GET"])
def room_detail_view(request, room_code):
    try:
        room = get_room_by_code(room_code)
    except Http404:
        return _room_not_found()

    return Response(success(RoomDetailSerializer(room).data))


@api_view(["GET"])
def video_history_view(request, room_code):
    try:
        limit = int(request.query_params.get("limit", 50))
    except (TypeError, ValueError):
        limit = 50
    limit = max(1, min(limit, 200))

    try:
        history = get_video_history(room_code, limit=limit)
    except Http404:
        return _room_not_found()

    return Response(success(VideoHistorySerializer(history, many=True).data))
