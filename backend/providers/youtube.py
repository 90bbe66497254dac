# providers/youtube.py

import re
from typing import Optional

from providers.base import BaseProvider, VideoReference


YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/"

YOUTUBE_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/)([A-Za-z0-9_-]{11})"),
    re.compile(r"youtube\.com/embed/([A-Za-z0-9_-]{11})"),
    re.compile(r"youtube\.com/v/([A-Za-z0-9_-]{11})"),
]


def build_youtube_reference(video_id: str) -> VideoReference:
    return VideoReference(
        platform="youtube",
        video_id=video_id,
        url=f"{YOUTUBE_WATCH_URL}{video_id}",
        embed_url=f"{YOUTUBE_EMBED_URL}{video_id}",
    )


class YouTubeProvider(BaseProvider):
    name = "youtube"

    def parse(self, url: str) -> Optional[VideoReference]:
        for pattern in YOUTUBE_PATTERNS:
            match = pattern.search(url)
            if match:
                return build_youtube_reference(match.group(1))
        return None
