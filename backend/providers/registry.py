from providers.base import BaseProvider
from providers.direct import DirectFileProvider
from providers.vimeo import VimeoProvider
from providers.youtube import YouTubeProvider


# Checked in order; direct files last so platform pages never match as files.
PROVIDERS = {
    "youtube": YouTubeProvider(),
    "vimeo": VimeoProvider(),
    "direct": DirectFileProvider(),
}


def get_provider(name: str) -> BaseProvider:
    provider = PROVIDERS.get(name)
    if not provider:
        raise ValueError(f"Unknown provider: {name}")
    return provider


def iter_providers():
    return iter(PROVIDERS.values())
