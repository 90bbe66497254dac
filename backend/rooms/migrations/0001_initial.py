import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=8, unique=True)),
                ("name", models.CharField(max_length=100)),
                ("created_by", models.CharField(max_length=50)),
                ("current_video_url", models.TextField(blank=True, null=True)),
                ("video_platform", models.CharField(blank=True, default="", max_length=20)),
                (
                    "video_state",
                    models.CharField(
                        choices=[("playing", "Playing"), ("paused", "Paused")],
                        default="paused",
                        max_length=10,
                    ),
                ),
                (
                    "current_time",
                    models.FloatField(
                        default=0.0,
                        validators=[django.core.validators.MinValueValidator(0.0)],
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("last_activity", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_name", models.CharField(max_length=50)),
                ("channel_name", models.CharField(max_length=255, unique=True)),
                ("is_admin", models.BooleanField(default=False)),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "ordering": ["joined_at"],
            },
        ),
        migrations.CreateModel(
            name="VideoHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("video_url", models.TextField()),
                ("video_platform", models.CharField(blank=True, default="", max_length=20)),
                ("video_title", models.CharField(blank=True, default="", max_length=200)),
                ("added_by", models.CharField(default="Unknown", max_length=50)),
                ("added_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="video_history",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "ordering": ["-added_at"],
                "verbose_name_plural": "video history",
            },
        ),
    ]
