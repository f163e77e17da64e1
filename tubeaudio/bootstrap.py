import logging
from typing import Optional

from tubeaudio.app.media_service import MediaService
from tubeaudio.core.config import Settings
from tubeaudio.extractors.youtube.extractor import YouTubeExtractor
from tubeaudio.infra.network.http import HttpNetworkAdapter


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    if settings.log_file:
        fh = logging.FileHandler(settings.log_file)
        fh.setLevel(settings.log_level)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s"))
        logging.getLogger().addHandler(fh)


def create_container(settings: Optional[Settings] = None) -> dict:
    # 1. Config
    settings = settings or Settings.from_env()

    # 2. Infra
    extractor = YouTubeExtractor(socket_timeout=settings.resolve_timeout)
    network = HttpNetworkAdapter(
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        chunk_size=settings.chunk_size,
    )

    # 3. Services
    media_service = MediaService(extractor, network, resolve_timeout=settings.resolve_timeout)

    return {
        "settings": settings,
        "extractor": extractor,
        "network": network,
        "media_service": media_service,
    }
