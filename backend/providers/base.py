# providers/base.py

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class UnsupportedVideoUrl(ValueError):
    pass


@dataclass(frozen=True)
class VideoReference:
    platform: str  # "youtube" | "vimeo" | "direct"
    video_id: str
    url: str
    embed_url: str

    def as_dict(self) -> dict:
        return {
            "platform": self.platform,
            "id": self.video_id,
            "url": self.url,
            "embedUrl": self.embed_url,
        }


class BaseProvider(ABC):
    name: str

    @abstractmethod
    def parse(self, url: str) -> Optional[VideoReference]:
        """
        Return a canonical reference if ``url`` belongs to this platform.
        """
        raise NotImplementedError
