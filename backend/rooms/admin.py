from django.contrib import admin
from .models import Participant, Room, VideoHistory


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "created_by",
        "video_state",
        "is_active",
        "last_activity",
    )
    search_fields = ("code", "name", "created_by")
    list_filter = ("is_active", "video_state")


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("user_name", "room", "is_admin", "joined_at")
    list_filter = ("is_admin",)
    search_fields = ("user_name",)


@admin.register(VideoHistory)
class VideoHistoryAdmin(admin.ModelAdmin):
    list_display = ("room", "video_platform", "video_title", "added_by", "added_at")
    search_fields = ("video_url", "video_title")
