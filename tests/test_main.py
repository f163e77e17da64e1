import json
from unittest.mock import patch

import pytest

from tubeaudio import main as cli
from tubeaudio.app.media_service import MediaService
from tests.conftest import FakeExtractor, FakeNetwork


@pytest.fixture
def fake_container():
    extractor = FakeExtractor(failing={"deadbeef"})
    service = MediaService(extractor, FakeNetwork(), resolve_timeout=2.0)
    with patch.object(cli, "create_container", return_value={"media_service": service}):
        yield extractor


def test_info_prints_summary(fake_container, capsys):
    code = cli.main(["info", "https://youtu.be/abc123"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["title"] == "Some Video"
    assert out["thumbnail"].endswith("maxresdefault.jpg")


def test_info_invalid_url(fake_container, capsys):
    code = cli.main(["info", "not-a-url"])

    assert code == 2
    assert "Invalid YouTube URL" in capsys.readouterr().err
    assert fake_container.calls == []


def test_info_resolution_failure(fake_container, capsys):
    code = cli.main(["info", "https://youtu.be/deadbeef"])

    assert code == 1
    assert "Failed to fetch video info" in capsys.readouterr().err


def test_serve_overrides_settings_from_flags(fake_container):
    with patch.object(cli, "AudioServer") as server_cls:
        server_cls.return_value.prepare.return_value = {
            "port": 9999, "local_url": "http://localhost:9999", "lan_url": "http://10.0.0.2:9999",
        }
        code = cli.main(["serve", "--host", "127.0.0.1", "--port", "9999", "--log-level", "warning"])

    assert code == 0
    settings = server_cls.call_args[0][1]
    assert (settings.host, settings.port, settings.log_level) == ("127.0.0.1", 9999, "WARNING")
    server_cls.return_value.run_server.assert_called_once()
    server_cls.return_value.stop.assert_called_once()
