import threading
import time

import pytest
from fastapi.testclient import TestClient

from tubeaudio.app.media_service import MediaService
from tubeaudio.core.config import Settings
from tubeaudio.core.entities import AudioRendition, AudioStream, Thumbnail
from tubeaudio.core.errors import NetworkError, ResolutionFailure
from tubeaudio.core.interfaces import NetworkAdapter
from tubeaudio.extractors.base import BaseExtractor
from tubeaudio.extractors.youtube.models import YouTubeMetadata
from tubeaudio.web.server import AudioServer


def make_metadata(video_id, title="Some Video", uploader="Some Channel", duration=215, views=1234, thumbnails=None):
    return YouTubeMetadata(
        video_id=video_id,
        title=title,
        uploader=uploader,
        duration=duration,
        view_count=views,
        thumbnails=thumbnails if thumbnails is not None else [
            Thumbnail(url=f"https://i.ytimg.com/vi/{video_id}/default.jpg", width=120, height=90),
            Thumbnail(url=f"https://i.ytimg.com/vi/{video_id}/maxresdefault.jpg", width=1280, height=720),
            Thumbnail(url=f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg", width=320, height=180),
        ],
    )


class FakeExtractor(BaseExtractor):
    """Stands in for yt-dlp; records every call it receives."""

    def __init__(self, videos=None, failing=(), delay=0.0, barrier=None):
        self.videos = dict(videos or {})
        self.failing = set(failing)
        self.delay = delay
        self.barrier = barrier
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, kind, ref):
        with self._lock:
            self.calls.append((kind, ref.video_id))
        if self.barrier is not None and kind == "extract":
            self.barrier.wait()
        if self.delay:
            time.sleep(self.delay)
        if ref.video_id in self.failing:
            raise ResolutionFailure(f"video {ref.video_id} unavailable")

    def extract(self, ref):
        self._record("extract", ref)
        return self.videos.get(ref.video_id) or make_metadata(ref.video_id)

    def resolve_audio(self, ref):
        self._record("resolve_audio", ref)
        return AudioRendition(
            url=f"https://media.example/{ref.video_id}.webm",
            http_headers={"User-Agent": "test"},
            ext="webm",
            abr=160.0,
        )


class FakeNetwork(NetworkAdapter):
    def __init__(self, payloads=None, fail=False, chunk_size=4, delay=0.0):
        self.payloads = dict(payloads or {})
        self.fail = fail
        self.delay = delay
        self.chunk_size = chunk_size
        self.calls = []
        self.streams = []

    def open_stream(self, url, headers=None):
        self.calls.append((url, headers))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise NetworkError("HTTP 503")
        data = self.payloads.get(url, b"ID3fake-audio-bytes")
        chunks = [data[i:i + self.chunk_size] for i in range(0, len(data), self.chunk_size)]
        stream = AudioStream(chunks=iter(chunks), content_length=len(data), content_type="audio/webm")
        self.streams.append(stream)
        return stream


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def settings(tmp_path):
    static = tmp_path / "static"
    static.mkdir()
    (static / "index.html").write_text("<html><body>tubeaudio client</body></html>")
    return Settings(port=0, resolve_timeout=2.0, static_dir=static)


@pytest.fixture
def make_server(settings):
    def _make(extractor, network, **overrides):
        for key, value in overrides.items():
            setattr(settings, key, value)
        service = MediaService(extractor, network, resolve_timeout=settings.resolve_timeout)
        return AudioServer(service, settings)
    return _make


@pytest.fixture
def client(make_server, extractor, network):
    return TestClient(make_server(extractor, network).app)
