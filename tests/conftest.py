import pytest

from fakes import FakeImage, FakeText, FakeVideo
from orchestrator import FormatOrchestrator
from progress import ProgressChannel
from settings import Settings


@pytest.fixture
def test_settings():
    return Settings(
        progress_reset_delay=0.0,
        text_timeout=5.0,
        image_timeout=5.0,
        video_timeout=5.0,
        series_timeout=5.0,
        video_series_parts=5,
    )


@pytest.fixture
def backends():
    return FakeText(), FakeImage(), FakeVideo()


@pytest.fixture
def orchestrator(backends, test_settings):
    text, image, video = backends
    return FormatOrchestrator(text, image, video, settings=test_settings, channel=ProgressChannel())
