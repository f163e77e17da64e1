from abc import ABC, abstractmethod

from tubeaudio.core.entities import AudioRendition, MediaReference


class BaseExtractor(ABC):
    """
    Abstract base class for media extractors.

    CRITICAL BOUNDARIES:
    - Extractors ONLY fetch metadata / rendition info for a validated reference.
    - Extractors do NOT download file content; the network adapter does.
    - Extractors do NOT write anything to disk.
    """

    @abstractmethod
    def extract(self, ref: MediaReference):
        """
        Fetch platform metadata for `ref` (e.g. YouTubeMetadata).

        Raises:
            ResolutionFailure: on any collaborator error.
        """
        pass

    @abstractmethod
    def resolve_audio(self, ref: MediaReference) -> AudioRendition:
        """
        Pick the highest quality audio-only rendition for `ref`.

        Raises:
            ResolutionFailure: on any collaborator error, or if there is no
            direct URL to stream from.
        """
        pass
