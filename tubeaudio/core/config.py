import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_PORT = 3000
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "web" / "static"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass
class Settings:
    """
    Runtime settings, read from the environment (and a `.env` file if present).

    PORT and HOST keep their bare names; everything else is prefixed
    with TUBEAUDIO_.
    """
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    resolve_timeout: float = 30.0
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    chunk_size: int = 64 * 1024
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    static_dir: Path = DEFAULT_STATIC_DIR
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path)

        origins = os.environ.get("TUBEAUDIO_CORS_ORIGINS", "*")
        static_dir = os.environ.get("TUBEAUDIO_STATIC_DIR")

        port = os.environ.get("PORT")
        if port is not None and port.strip() != "":
            try:
                port = int(port)
            except ValueError:
                raise ValueError(f"PORT must be an integer, got {port!r}")
        else:
            port = DEFAULT_PORT

        return cls(
            host=os.environ.get("HOST", "0.0.0.0"),
            port=port,
            resolve_timeout=_env_float("TUBEAUDIO_RESOLVE_TIMEOUT", 30.0),
            connect_timeout=_env_float("TUBEAUDIO_CONNECT_TIMEOUT", 10.0),
            read_timeout=_env_float("TUBEAUDIO_READ_TIMEOUT", 30.0),
            chunk_size=_env_int("TUBEAUDIO_CHUNK_SIZE", 64 * 1024),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            static_dir=Path(static_dir) if static_dir else DEFAULT_STATIC_DIR,
            log_level=os.environ.get("TUBEAUDIO_LOG_LEVEL", "INFO").upper(),
            log_file=os.environ.get("TUBEAUDIO_LOG_FILE") or None,
        )
