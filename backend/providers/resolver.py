# providers/resolver.py

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

from providers.base import UnsupportedVideoUrl, VideoReference
from providers.registry import iter_providers


_validate_url = URLValidator(schemes=["http", "https"])


def classify(url) -> VideoReference:
    """
    Map a user-supplied video URL to its platform and canonical form.

    Raises UnsupportedVideoUrl for malformed URLs and for URLs no provider
    recognises.
    """
    if not url or not isinstance(url, str):
        raise UnsupportedVideoUrl("Invalid URL provided")

    url = url.strip()

    try:
        _validate_url(url)
    except ValidationError as exc:
        raise UnsupportedVideoUrl("Invalid URL format") from exc

    for provider in iter_providers():
        reference = provider.parse(url)
        if reference:
            return reference

    raise UnsupportedVideoUrl(
        "Unsupported video URL. Please use YouTube, Vimeo, or direct video links."
    )


def is_supported_video_url(url) -> bool:
    try:
        classify(url)
    except UnsupportedVideoUrl:
        return False
    return True
