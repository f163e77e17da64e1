import logging
import time
from typing import AsyncIterator

from starlette.concurrency import run_in_threadpool

from tubeaudio.core.entities import AudioStream
from tubeaudio.core.errors import StreamTruncated

logger = logging.getLogger(__name__)


async def relay_stream(stream: AudioStream, label: str = "") -> AsyncIterator[bytes]:
    """
    Forward `stream` chunk by chunk.

    Pull based: the next chunk is read from upstream only after the response
    has taken the previous one, so one chunk is in flight at most. The
    upstream is closed on every exit path, including a client disconnect
    (the response cancels this generator).
    """
    started = time.time()
    sent = 0
    completed = False
    try:
        while True:
            chunk = await run_in_threadpool(next, stream.chunks, None)
            if chunk is None:
                break
            sent += len(chunk)
            yield chunk
        completed = True
    except StreamTruncated as e:
        logger.error("Relay %s truncated after %d bytes: %s", label, sent, e)
        raise
    except Exception as e:
        logger.exception("Relay %s failed after %d bytes", label, sent)
        raise StreamTruncated(f"relay failed after {sent} bytes: {e}") from e
    finally:
        stream.close()
        elapsed = time.time() - started
        if completed:
            logger.info("Relay %s finished: %d bytes in %.1fs", label, sent, elapsed)
        else:
            logger.info("Relay %s stopped after %d bytes (%.1fs)", label, sent, elapsed)
