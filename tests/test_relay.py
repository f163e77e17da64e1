import asyncio

import pytest

from tubeaudio.core.entities import AudioStream
from tubeaudio.core.errors import DownloadFailure, StreamTruncated
from tubeaudio.web.relay import relay_stream


def _collect(stream):
    async def run():
        return [chunk async for chunk in relay_stream(stream, label="test.mp3")]
    return asyncio.run(run())


def test_forwards_every_chunk_then_closes():
    closed = []
    stream = AudioStream(chunks=iter([b"ab", b"cd", b"ef"]), content_length=6, on_close=lambda: closed.append(True))

    assert _collect(stream) == [b"ab", b"cd", b"ef"]
    assert closed == [True]


def test_truncation_propagates_and_closes():
    def chunks():
        yield b"ab"
        raise StreamTruncated("upstream ended after 2 of 6 bytes")

    stream = AudioStream(chunks=chunks(), content_length=6)

    with pytest.raises(StreamTruncated):
        _collect(stream)
    assert stream.closed


def test_unexpected_upstream_error_becomes_download_failure():
    def chunks():
        yield b"ab"
        raise OSError("connection reset")

    stream = AudioStream(chunks=chunks())

    with pytest.raises(DownloadFailure) as info:
        _collect(stream)
    assert isinstance(info.value, StreamTruncated)
    assert stream.closed


def test_consumer_gates_producer():
    pulled = []

    def chunks():
        for i in range(100):
            pulled.append(i)
            yield bytes([i])

    stream = AudioStream(chunks=chunks())

    async def run():
        agen = relay_stream(stream)
        first = await agen.__anext__()
        second = await agen.__anext__()
        # Client goes away here
        await agen.aclose()
        return first, second

    first, second = asyncio.run(run())

    assert (first, second) == (b"\x00", b"\x01")
    assert pulled == [0, 1]
    assert stream.closed
