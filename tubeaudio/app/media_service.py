import asyncio
import logging
import re
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from tubeaudio.core.entities import AudioStream, MediaReference, MediaSummary
from tubeaudio.core.errors import (
    DownloadFailure,
    NetworkError,
    ResolutionFailure,
    ServerError,
)
from tubeaudio.core.interfaces import NetworkAdapter
from tubeaudio.extractors.base import BaseExtractor
from tubeaudio.sources.detector import parse_reference

logger = logging.getLogger(__name__)

AUDIO_EXTENSION = "mp3"
AUDIO_CONTENT_TYPE = "audio/mpeg"
FALLBACK_TITLE = "audio"

_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
# Line breaks and other control whitespace are not allowed in a header value
_CONTROL_WHITESPACE = re.compile(r"[\r\n\t\f\v]")


def sanitize_title(title: str) -> str:
    """Strip everything but ASCII word chars, whitespace and hyphens; safe for a header value."""
    cleaned = _DISALLOWED.sub("", title or "")
    cleaned = _CONTROL_WHITESPACE.sub(" ", cleaned).strip()
    return cleaned or FALLBACK_TITLE


@dataclass
class AudioDownload:
    filename: str
    stream: AudioStream
    content_type: str = AUDIO_CONTENT_TYPE


def _close_late_stream(future: Future):
    """Done-callback for an abandoned open_stream: nobody will read it, so close it."""
    if future.cancelled() or future.exception() is not None:
        return
    stream = future.result()
    logger.info("Closing upstream stream that opened after its caller timed out")
    stream.close()


class MediaService:
    """
    Coordinates URL validation, the extractor and the network adapter.

    RESPONSIBILITIES:
    - Validate input before anything touches the network.
    - Bound every blocking collaborator call with `resolve_timeout`.
    - Map collaborator errors onto ResolutionFailure / DownloadFailure.
    - It does NOT write HTTP responses; the web layer does.
    """

    def __init__(self, extractor: BaseExtractor, network: NetworkAdapter, resolve_timeout: float = 30.0):
        self.extractor = extractor
        self.network = network
        self.resolve_timeout = resolve_timeout
        # Own pool so a timed-out call's future stays reachable for cleanup
        self._executor = ThreadPoolExecutor(thread_name_prefix="tubeaudio-io")

    def close(self):
        self._executor.shutdown(wait=False)

    async def _call(self, fn, *args, on_abandon: Optional[Callable[[Future], None]] = None):
        future = self._executor.submit(fn, *args)
        try:
            return await asyncio.wait_for(asyncio.wrap_future(future), timeout=self.resolve_timeout)
        except asyncio.TimeoutError:
            if on_abandon is not None:
                # Runs immediately if the result already landed
                future.add_done_callback(on_abandon)
            raise ResolutionFailure(f"{fn.__name__} timed out after {self.resolve_timeout}s")

    async def get_summary(self, url) -> MediaSummary:
        ref = parse_reference(url)
        logger.info("Resolving info for %s", ref.video_id)
        try:
            meta = await self._call(self.extractor.extract, ref)
        except ResolutionFailure:
            logger.exception("Failed to resolve info for %s", ref.url)
            raise
        except Exception as e:
            logger.exception("Unexpected extractor error for %s", ref.url)
            raise ResolutionFailure(str(e)) from e

        return MediaSummary(
            title=meta.title,
            author=meta.uploader,
            thumbnail=meta.best_thumbnail(),
            duration=meta.duration,
            views=meta.view_count,
        )

    async def open_download(self, url) -> AudioDownload:
        """
        Resolve title and audio rendition, then open the upstream stream.

        Everything that can fail before the first byte fails here, as
        DownloadFailure. The caller owns the returned stream.
        """
        ref = parse_reference(url)
        logger.info("Preparing audio download for %s", ref.video_id)
        try:
            meta = await self._call(self.extractor.extract, ref)
            rendition = await self._call(self.extractor.resolve_audio, ref)
            stream = await self._call(
                self.network.open_stream, rendition.url, rendition.http_headers,
                on_abandon=_close_late_stream,
            )
        except (ResolutionFailure, NetworkError, ServerError) as e:
            logger.error("Download setup failed for %s: %s", ref.url, e)
            raise DownloadFailure(str(e)) from e
        except Exception as e:
            logger.exception("Unexpected error preparing download for %s", ref.url)
            raise DownloadFailure(str(e)) from e

        filename = f"{sanitize_title(meta.title)}.{AUDIO_EXTENSION}"
        logger.info(
            "Streaming %s as %r (%s bytes)",
            ref.video_id, filename,
            stream.content_length if stream.content_length is not None else "unknown",
        )
        return AudioDownload(filename=filename, stream=stream)
