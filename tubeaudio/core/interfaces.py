from abc import ABC, abstractmethod
from typing import Dict, Optional

from .entities import AudioStream


class NetworkAdapter(ABC):
    @abstractmethod
    def open_stream(self, url: str, headers: Optional[Dict[str, str]] = None) -> AudioStream:
        """
        Open `url` for streaming and return once the response headers are in.

        Raises NetworkError / ServerError if the upstream refuses or fails
        before any body byte is read. Errors while iterating the returned
        stream's chunks surface as StreamTruncated.
        """
        pass
