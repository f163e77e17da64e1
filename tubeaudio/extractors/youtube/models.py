from dataclasses import dataclass, field
from typing import List, Optional

from tubeaudio.core.entities import Thumbnail


@dataclass
class YouTubeMetadata:
    video_id: str
    title: str
    uploader: str
    duration: int
    view_count: int
    thumbnails: List[Thumbnail] = field(default_factory=list)
    thumbnail: Optional[str] = None

    def best_thumbnail(self) -> str:
        """
        Largest thumbnail by pixel area.

        Unsized entries rank below sized ones; ties go to higher preference,
        then to the later entry. Falls back to the single `thumbnail` field.
        """
        if not self.thumbnails:
            return self.thumbnail or ""
        ranked = max(
            enumerate(self.thumbnails),
            key=lambda item: (item[1].area, item[1].preference, item[0]),
        )
        return ranked[1].url
