# providers/vimeo.py

import re
from typing import Optional

from providers.base import BaseProvider, VideoReference


VIMEO_BASE_URL = "https://vimeo.com/"
VIMEO_PLAYER_URL = "https://player.vimeo.com/video/"

VIMEO_PATTERNS = [
    re.compile(r"player\.vimeo\.com/video/(\d+)"),
    re.compile(r"vimeo\.com/(\d+)"),
]


def build_vimeo_reference(video_id: str) -> VideoReference:
    return VideoReference(
        platform="vimeo",
        video_id=video_id,
        url=f"{VIMEO_BASE_URL}{video_id}",
        embed_url=f"{VIMEO_PLAYER_URL}{video_id}",
    )


class VimeoProvider(BaseProvider):
    name = "vimeo"

    def parse(self, url: str) -> Optional[VideoReference]:
        for pattern in VIMEO_PATTERNS:
            match = pattern.search(url)
            if match:
                return build_vimeo_reference(match.group(1))
        return None
