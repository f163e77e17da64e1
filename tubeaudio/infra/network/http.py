import logging
from typing import Dict, Iterator, Optional, Tuple

import requests

from tubeaudio.core.entities import AudioStream
from tubeaudio.core.errors import NetworkError, ServerError, StreamTruncated
from tubeaudio.core.interfaces import NetworkAdapter

logger = logging.getLogger(__name__)


class HttpNetworkAdapter(NetworkAdapter):
    def __init__(self, connect_timeout: float = 10.0, read_timeout: float = 30.0, chunk_size: int = 64 * 1024):
        self.timeout: Tuple[float, float] = (connect_timeout, read_timeout)
        self.chunk_size = chunk_size

    def _clean_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        # Host and Content-Length belong to the connection, not to the media host's contract
        final = {
            k: v for k, v in (headers or {}).items()
            if k.lower() not in ("host", "content-length")
        }
        if not any(k.lower() == "accept-encoding" for k in final):
            final["Accept-Encoding"] = "identity"
        return final

    def open_stream(self, url: str, headers: Optional[Dict[str, str]] = None) -> AudioStream:
        s = requests.Session()
        try:
            resp = s.get(url, headers=self._clean_headers(headers), stream=True, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            s.close()
            raise NetworkError(f"Connection failed: {e}") from e

        def _close():
            resp.close()
            s.close()

        if resp.status_code != 200:
            _close()
            if resp.status_code in (401, 403, 410):
                raise ServerError(f"HTTP {resp.status_code}")
            raise NetworkError(f"HTTP {resp.status_code}")

        content_type = resp.headers.get("Content-Type", "").lower()
        if "text/html" in content_type:
            _close()
            raise NetworkError("Server returned HTML instead of media")

        length = resp.headers.get("Content-Length")
        content_length = int(length) if length and length.isdigit() else None
        # requests decodes compressed bodies, so the header no longer counts what we yield
        if resp.headers.get("Content-Encoding", "identity").lower() != "identity":
            content_length = None

        stream = AudioStream(
            chunks=iter(()),
            content_length=content_length,
            content_type=content_type or None,
            on_close=_close,
        )
        stream.chunks = self._iter_chunks(resp, stream)
        return stream

    def _iter_chunks(self, resp: requests.Response, stream: AudioStream) -> Iterator[bytes]:
        try:
            for chunk in resp.iter_content(chunk_size=self.chunk_size):
                if not chunk:
                    continue
                stream.bytes_sent += len(chunk)
                yield chunk
        except requests.exceptions.RequestException as e:
            raise StreamTruncated(
                f"upstream failed after {stream.bytes_sent} bytes: {e}"
            ) from e

        if stream.content_length is not None and stream.bytes_sent < stream.content_length:
            raise StreamTruncated(
                f"upstream ended after {stream.bytes_sent} of {stream.content_length} bytes"
            )
        logger.debug("Upstream stream complete (%d bytes)", stream.bytes_sent)
