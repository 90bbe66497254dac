import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from django.utils import timezone

from providers.base import VideoReference

PLAYING = "playing"
PAUSED = "paused"


def server_timestamp(now: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch, as sent on the wire."""
    if now is None:
        return int(time.time() * 1000)
    return int(now.timestamp() * 1000)


@dataclass
class ParticipantState:
    id: str
    user_name: str
    channel_name: str
    is_admin: bool
    joined_at: datetime

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userName": self.user_name,
            "isAdmin": self.is_admin,
            "joinedAt": server_timestamp(self.joined_at),
        }


@dataclass
class RoomState:
    """
    Live view of one room, owned by the session store.

    ``participants`` is kept in join order; the head of the list is the
    longest-standing member.
    """

    id: str
    code: str
    name: str
    created_by: str
    video: Optional[VideoReference] = None
    video_state: str = PAUSED
    current_time: float = 0.0
    is_active: bool = True
    last_activity: datetime = field(default_factory=timezone.now)
    position_updated_at: datetime = field(default_factory=timezone.now)
    participants: List[ParticipantState] = field(default_factory=list)

    @property
    def video_url(self) -> Optional[str]:
        return self.video.url if self.video else None

    @property
    def is_playing(self) -> bool:
        return self.video_state == PLAYING

    @property
    def admin(self) -> Optional[ParticipantState]:
        for participant in self.participants:
            if participant.is_admin:
                return participant
        return None

    def participant_for_channel(self, channel_name) -> Optional[ParticipantState]:
        for participant in self.participants:
            if participant.channel_name == channel_name:
                return participant
        return None

    def participant_by_id(self, participant_id) -> Optional[ParticipantState]:
        participant_id = str(participant_id)
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def position_at(self, now: Optional[datetime] = None) -> float:
        """Authoritative position, advanced by wall clock while playing."""
        if not self.is_playing:
            return self.current_time
        now = now or timezone.now()
        elapsed = (now - self.position_updated_at).total_seconds()
        return self.current_time + max(0.0, elapsed)

    def roster(self) -> list:
        return [participant.as_dict() for participant in self.participants]

    def playback_snapshot(self, now: Optional[datetime] = None) -> dict:
        now = now or timezone.now()
        return {
            "videoUrl": self.video_url,
            "videoInfo": self.video.as_dict() if self.video else None,
            "state": self.video_state,
            "currentTime": self.position_at(now),
            "serverTimestamp": server_timestamp(now),
        }

    def as_dict(self, now: Optional[datetime] = None) -> dict:
        now = now or timezone.now()
        return {
            "id": self.id,
            "roomCode": self.code,
            "name": self.name,
            "createdBy": self.created_by,
            "currentVideoUrl": self.video_url,
            "videoInfo": self.video.as_dict() if self.video else None,
            "videoState": self.video_state,
            "currentTime": self.position_at(now),
        }
