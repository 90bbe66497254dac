import uuid

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Room(models.Model):
    class VideoState(models.TextChoices):
        PLAYING = "playing"
        PAUSED = "paused"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=8, unique=True)
    name = models.CharField(max_length=100)
    created_by = models.CharField(max_length=50)

    current_video_url = models.TextField(null=True, blank=True)
    video_platform = models.CharField(max_length=20, blank=True, default="")
    video_state = models.CharField(
        max_length=10,
        choices=VideoState.choices,
        default=VideoState.PAUSED,
    )
    current_time = models.FloatField(
        default=0.0,
        validators=[MinValueValidator(0.0)],
    )

    is_active = models.BooleanField(default=True, db_index=True)
    last_activity = models.DateTimeField(default=timezone.now, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Room {self.code}"


class Participant(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="participants",
    )
    user_name = models.CharField(max_length=50)

    # Channels channel name of the owning websocket connection.
    channel_name = models.CharField(max_length=255, unique=True)

    is_admin = models.BooleanField(default=False)
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["joined_at"]

    def __str__(self):
        return f"{self.user_name} in {self.room}"


class VideoHistory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="video_history",
    )
    video_url = models.TextField()
    video_platform = models.CharField(max_length=20, blank=True, default="")
    video_title = models.CharField(max_length=200, blank=True, default="")
    added_by = models.CharField(max_length=50, default="Unknown")
    added_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-added_at"]
        verbose_name_plural = "video history"

    def __str__(self):
        return f"{self.video_url} in {self.room}"
