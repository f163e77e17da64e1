"""tubeaudio: turn a YouTube link into a streamed audio download."""

__version__ = "1.0.0"
