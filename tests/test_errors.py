from tubeaudio.core.errors import DownloadFailure, InvalidReference, StreamTruncated, TubeAudioError


def test_defaults_without_arguments():
    err = InvalidReference()

    assert err.status_code == 400
    assert err.message == "Invalid YouTube URL"
    assert str(err) == "Invalid YouTube URL"


def test_detail_stays_out_of_public_message():
    err = DownloadFailure("HTTP 503 from media host")

    assert str(err) == "HTTP 503 from media host"
    assert err.message == "Failed to download audio"


def test_message_override_is_per_instance():
    err = TubeAudioError(message="Busy")

    assert err.message == "Busy"
    assert TubeAudioError.message == "Internal server error"


def test_truncation_is_a_download_failure():
    assert isinstance(StreamTruncated("short body"), DownloadFailure)
