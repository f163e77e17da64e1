import logging
from typing import Any, Dict, List

import yt_dlp
from yt_dlp.utils import YoutubeDLError

from tubeaudio.core.entities import AudioRendition, MediaReference, Thumbnail
from tubeaudio.core.errors import ResolutionFailure
from ..base import BaseExtractor
from .models import YouTubeMetadata

logger = logging.getLogger(__name__)


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


class YouTubeExtractor(BaseExtractor):
    """YouTube media extractor backed by yt-dlp."""

    def __init__(self, socket_timeout: float = 30.0):
        self.socket_timeout = socket_timeout

    def _options(self, **extra) -> Dict[str, Any]:
        opts = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'noplaylist': True,
            'socket_timeout': self.socket_timeout,
        }
        opts.update(extra)
        return opts

    def _extract_info(self, url: str, **extra) -> Dict[str, Any]:
        try:
            with yt_dlp.YoutubeDL(self._options(**extra)) as ydl:
                info = ydl.extract_info(url, download=False)
        except YoutubeDLError as e:
            raise ResolutionFailure(f"yt-dlp failed for {url}: {e}") from e

        if not info:
            raise ResolutionFailure(f"yt-dlp returned nothing for {url}")
        # noplaylist should prevent this, but a bare playlist link still comes back as one
        if info.get('_type') == 'playlist':
            raise ResolutionFailure(f"{url} resolved to a playlist, not a video")
        return info

    @staticmethod
    def _thumbnails(info: Dict[str, Any]) -> List[Thumbnail]:
        thumbs = []
        for t in info.get('thumbnails') or []:
            if not t.get('url'):
                continue
            thumbs.append(Thumbnail(
                url=t['url'],
                width=_as_int(t.get('width'), 0) or None,
                height=_as_int(t.get('height'), 0) or None,
                preference=_as_int(t.get('preference'), 0),
            ))
        return thumbs

    def extract(self, ref: MediaReference) -> YouTubeMetadata:
        info = self._extract_info(ref.canonical_url)

        return YouTubeMetadata(
            video_id=info.get('id') or ref.video_id,
            title=info.get('title') or "",
            uploader=info.get('uploader') or info.get('channel') or "",
            duration=_as_int(info.get('duration')),
            view_count=_as_int(info.get('view_count')),
            thumbnails=self._thumbnails(info),
            thumbnail=info.get('thumbnail'),
        )

    def resolve_audio(self, ref: MediaReference) -> AudioRendition:
        """Resolve the direct URL of the best audio-only format."""
        info = self._extract_info(ref.canonical_url, format='bestaudio/best')

        # 1. Single selected format
        fmt = info
        # 2. Merged selection; take the audio half
        if not info.get('url') and info.get('requested_formats'):
            audio = [f for f in info['requested_formats'] if f.get('acodec') not in (None, 'none')]
            fmt = audio[0] if audio else info['requested_formats'][0]

        if not fmt.get('url'):
            raise ResolutionFailure(f"no streamable audio format for {ref.canonical_url}")

        logger.debug(
            "Selected audio format %s (%s, %s kbps) for %s",
            fmt.get('format_id'), fmt.get('ext'), fmt.get('abr'), ref.video_id,
        )
        return AudioRendition(
            url=fmt['url'],
            http_headers=dict(fmt.get('http_headers') or info.get('http_headers') or {}),
            ext=fmt.get('ext'),
            abr=fmt.get('abr'),
            filesize=_as_int(fmt.get('filesize') or fmt.get('filesize_approx')) or None,
        )
