from dataclasses import dataclass, field, asdict
from typing import Callable, Dict, Iterator, Optional


@dataclass(frozen=True)
class MediaReference:
    """A user supplied URL that passed the shape check."""
    url: str
    video_id: str

    @property
    def canonical_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass(frozen=True)
class MediaSummary:
    title: str
    author: str
    thumbnail: str
    duration: int
    views: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Thumbnail:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None
    preference: int = 0

    @property
    def area(self) -> int:
        if self.width and self.height:
            return self.width * self.height
        return 0


@dataclass(frozen=True)
class AudioRendition:
    """The audio-only format yt-dlp picked for a video."""
    url: str
    http_headers: Dict[str, str] = field(default_factory=dict)
    ext: Optional[str] = None
    abr: Optional[float] = None
    filesize: Optional[int] = None


@dataclass
class AudioStream:
    """
    An open upstream byte stream.

    Owned by whoever is forwarding it; `close()` must be called once the
    transfer is finished or abandoned.
    """
    chunks: Iterator[bytes]
    content_length: Optional[int] = None
    content_type: Optional[str] = None
    on_close: Optional[Callable[[], None]] = None
    bytes_sent: int = 0
    _closed: bool = False

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self.on_close:
            self.on_close()

    @property
    def closed(self) -> bool:
        return self._closed
