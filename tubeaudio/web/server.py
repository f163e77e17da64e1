import json
import logging
import socket
from contextlib import asynccontextmanager
from typing import Optional

import psutil
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from tubeaudio import __version__
from tubeaudio.app.media_service import MediaService
from tubeaudio.core.config import Settings
from tubeaudio.core.errors import InvalidReference, TubeAudioError
from .relay import relay_stream

logger = logging.getLogger(__name__)


class AudioServer:
    """
    The HTTP surface: owns the FastAPI app and, once running, the uvicorn server.

    Built once at startup; `stop()` is the shutdown path.
    """

    def __init__(self, media_service: MediaService, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.media_service = media_service
        self.host = self.settings.host
        self.port = self.settings.port
        self._server: Optional[uvicorn.Server] = None

        self.app = FastAPI(title="tubeaudio", version=__version__, lifespan=self._lifespan)
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition"],
        )
        self._setup_error_handlers()
        self._setup_routes()
        self._mount_static()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        logger.info("tubeaudio %s listening on %s:%s", __version__, self.host, self.port)
        yield
        logger.info("tubeaudio shutting down")
        self.media_service.close()

    def _setup_error_handlers(self):
        @self.app.exception_handler(TubeAudioError)
        async def handle_app_error(request: Request, exc: TubeAudioError):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

        @self.app.exception_handler(Exception)
        async def handle_unexpected(request: Request, exc: Exception):
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

    def _setup_routes(self):
        @self.app.get("/api/health")
        async def health():
            return {"status": "ok", "app": "tubeaudio", "version": __version__}

        @self.app.post("/api/video-info")
        async def video_info(request: Request):
            try:
                data = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise InvalidReference("request body is not JSON")
            url = data.get("url") if isinstance(data, dict) else None

            summary = await self.media_service.get_summary(url)
            return summary.to_dict()

        @self.app.get("/api/download")
        async def download(request: Request):
            url = request.query_params.get("url")
            dl = await self.media_service.open_download(url)

            headers = {"Content-Disposition": f'attachment; filename="{dl.filename}"'}
            if dl.stream.content_length is not None:
                headers["Content-Length"] = str(dl.stream.content_length)

            return StreamingResponse(
                relay_stream(dl.stream, label=dl.filename),
                media_type=dl.content_type,
                headers=headers,
            )

    def _mount_static(self):
        static_dir = self.settings.static_dir
        if static_dir and static_dir.is_dir():
            # Mounted last so /api/* routes win
            self.app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
        else:
            logger.warning("Static client directory %s not found; serving API only", static_dir)

    def prepare(self) -> dict:
        """Pick a port if 0 and work out the addresses to advertise."""
        if self.port == 0:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.bind((self.host, 0))
            self.port = sock.getsockname()[1]
            sock.close()

        return {
            "local_url": f"http://localhost:{self.port}",
            "lan_url": f"http://{self._get_local_ip()}:{self.port}",
            "port": self.port,
        }

    def run_server(self):
        """Run the server (blocking) until stop() or a signal."""
        level = self.settings.log_level.lower()
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            logging.getLogger(name).setLevel(self.settings.log_level)

        config = uvicorn.Config(self.app, host=self.host, port=self.port, log_level=level, log_config=None)
        self._server = uvicorn.Server(config)
        self._server.run()

    def stop(self):
        """Stop the server."""
        if self._server:
            self._server.should_exit = True

    def _get_local_ip(self) -> str:
        """Best guess at the LAN address, for the startup banner."""
        try:
            # Virtual/VPN interfaces are rarely what a phone on the same Wi-Fi can reach
            blacklist = ['vbox', 'docker', 'virtual', 'wsl', 'tailscale', 'zerotier', 'vpn', 'vmnet']
            candidates = []
            for interface, addrs in psutil.net_if_addrs().items():
                if any(b in interface.lower() for b in blacklist):
                    continue
                for addr in addrs:
                    if addr.family != socket.AF_INET or addr.address.startswith('127.'):
                        continue
                    ip = addr.address
                    score = 70
                    if ip.startswith('192.168.'):
                        score = 100
                    elif ip.startswith('10.'):
                        score = 90
                    elif ip.startswith('172.') and not ip.startswith(('172.17.', '172.18.')):
                        score = 80
                    candidates.append((score, ip))
            if candidates:
                candidates.sort(reverse=True)
                return candidates[0][1]
        except OSError as e:
            logger.debug("psutil interface scan failed: %s", e)

        # Socket trick; nothing is actually sent
        try:
            s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            s.connect(("10.255.255.255", 1))
            ip = s.getsockname()[0]
            s.close()
            return ip
        except OSError:
            return "127.0.0.1"
