import re
from typing import Optional
from urllib.parse import urlsplit, parse_qs

from tubeaudio.core.entities import MediaReference
from tubeaudio.core.errors import InvalidReference

YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "gaming.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}
SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
PATH_PREFIXES = ("shorts", "embed", "v", "live")

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _video_id(url: str) -> Optional[str]:
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None

    if parts.scheme not in ("http", "https"):
        return None

    host = (parts.hostname or "").lower()
    segments = [s for s in parts.path.split("/") if s]

    candidate = None
    if host in SHORT_HOSTS:
        candidate = segments[0] if segments else None
    elif host in YOUTUBE_HOSTS:
        if segments == ["watch"]:
            values = parse_qs(parts.query).get("v")
            candidate = values[0] if values else None
        elif len(segments) >= 2 and segments[0] in PATH_PREFIXES:
            candidate = segments[1]

    if candidate and VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def parse_reference(url) -> MediaReference:
    """Shape-check `url` and build a MediaReference. Never touches the network."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidReference(f"empty or non-string url: {url!r}")

    video_id = _video_id(url)
    if video_id is None:
        raise InvalidReference(f"not a YouTube video url: {url!r}")
    return MediaReference(url=url.strip(), video_id=video_id)
