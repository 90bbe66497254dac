# providers/direct.py

import re
from typing import Optional

from providers.base import BaseProvider, VideoReference


VIDEO_FILE_PATTERN = re.compile(r"\.(mp4|webm|ogg|mov|avi|mkv|flv)(\?.*)?$", re.IGNORECASE)


class DirectFileProvider(BaseProvider):
    """Plain video files served over http(s); the url is its own id."""

    name = "direct"

    def parse(self, url: str) -> Optional[VideoReference]:
        if not VIDEO_FILE_PATTERN.search(url):
            return None
        return VideoReference(
            platform="direct",
            video_id=url,
            url=url,
            embed_url=url,
        )
