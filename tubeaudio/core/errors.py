from typing import Optional


class TubeAudioError(Exception):
    """Base error. `message` is what the client sees, the cause stays in the logs."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, detail: Optional[str] = None, message: Optional[str] = None):
        super().__init__(detail or message or self.message)
        if message:
            self.message = message


class InvalidReference(TubeAudioError):
    """URL is not a recognizable YouTube video link. No network call was made."""

    status_code = 400
    message = "Invalid YouTube URL"


class ResolutionFailure(TubeAudioError):
    """yt-dlp could not produce metadata (network, region lock, removed video, timeout)."""

    status_code = 500
    message = "Failed to fetch video info"


class DownloadFailure(TubeAudioError):
    status_code = 500
    message = "Failed to download audio"


class StreamTruncated(DownloadFailure):
    """Raised once bytes have already been sent and the upstream broke or ended early."""

    message = "Audio stream ended before completion"


class NetworkError(Exception):
    pass


class ServerError(Exception):
    pass
