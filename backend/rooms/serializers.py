import re

from rest_framework import serializers

from .models import Participant, Room, VideoHistory

NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _.\-]+$")
HAS_CONTENT_PATTERN = re.compile(r"[A-Za-z0-9]")


def _validate_name(value, label):
    value = value.strip()
    if len(value) < 2:
        raise serializers.ValidationError(f"{label} must be at least 2 characters")
    if not NAME_PATTERN.match(value):
        raise serializers.ValidationError(
            f"{label} can only contain letters, numbers, spaces, -, _ and ."
        )
    if not HAS_CONTENT_PATTERN.search(value):
        raise serializers.ValidationError(
            f"{label} must contain at least one letter or number"
        )
    return value


class CreateRoomSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50, trim_whitespace=True)
    createdBy = serializers.CharField(max_length=50, trim_whitespace=True)

    def validate_name(self, value):
        return _validate_name(value, "Room name")

    def validate_createdBy(self, value):
        return _validate_name(value, "Your name")


class ParticipantSerializer(serializers.ModelSerializer):
    userName = serializers.CharField(source="user_name")
    isAdmin = serializers.BooleanField(source="is_admin")
    joinedAt = serializers.DateTimeField(source="joined_at")

    class Meta:
        model = Participant
        fields = ["id", "userName", "isAdmin", "joinedAt"]


class RoomSerializer(serializers.ModelSerializer):
    roomCode = serializers.CharField(source="code")
    createdBy = serializers.CharField(source="created_by")
    currentVideoUrl = serializers.CharField(source="current_video_url", allow_null=True)
    videoPlatform = serializers.CharField(source="video_platform")
    videoState = serializers.CharField(source="video_state")
    currentTime = serializers.FloatField(source="current_time")
    lastActivity = serializers.DateTimeField(source="last_activity")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = Room
        fields = [
            "id",
            "roomCode",
            "name",
            "createdBy",
            "currentVideoUrl",
            "videoPlatform",
            "videoState",
            "currentTime",
            "lastActivity",
            "createdAt",
        ]


class RoomDetailSerializer(RoomSerializer):
    participants = ParticipantSerializer(many=True, read_only=True)

    class Meta(RoomSerializer.Meta):
        fields = RoomSerializer.Meta.fields + ["participants"]


class VideoHistorySerializer(serializers.ModelSerializer):
    videoUrl = serializers.CharField(source="video_url")
    videoPlatform = serializers.CharField(source="video_platform")
    videoTitle = serializers.CharField(source="video_title")
    addedBy = serializers.CharField(source="added_by")
    addedAt = serializers.DateTimeField(source="added_at")

    class Meta:
        model = VideoHistory
        fields = ["id", "videoUrl", "videoPlatform", "videoTitle", "addedBy", "addedAt"]
