import httpx
import pytest
from httpx import AsyncClient, ASGITransport

import main
from exceptions import BackendError, ValidationError
from main import app
from video_proxy import VideoFile, extract_file_id, fetch_video_file, proxy_url


GEMINI_URI = "https://generativelanguage.googleapis.com/v1beta/files/abc123xyz:download?alt=media"


def test_file_uri_becomes_proxy_path():
    assert extract_file_id(GEMINI_URI) == "abc123xyz"
    assert proxy_url(GEMINI_URI) == "/video/abc123xyz"


def test_other_uris_pass_through():
    assert extract_file_id("https://cdn.test/clip.mp4") is None
    assert proxy_url("https://cdn.test/clip.mp4") == "https://cdn.test/clip.mp4"


@pytest.mark.asyncio
async def test_fetch_sends_key_and_returns_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params["key"]
        return httpx.Response(200, content=b"\x00\x01mp4", headers={"content-type": "video/mp4"})

    video = await fetch_video_file("abc123xyz", api_key="k-1", transport=httpx.MockTransport(handler))

    assert video.content == b"\x00\x01mp4"
    assert video.mime_type == "video/mp4"
    assert seen == {"path": "/v1beta/files/abc123xyz:download", "key": "k-1"}


@pytest.mark.asyncio
async def test_fetch_upstream_failure_keeps_status():
    transport = httpx.MockTransport(lambda request: httpx.Response(404, text="not found"))

    with pytest.raises(BackendError) as exc_info:
        await fetch_video_file("gone", api_key="k-1", transport=transport)
    assert exc_info.value.context["status_code"] == 404


@pytest.mark.asyncio
async def test_fetch_rejects_unsafe_file_id():
    with pytest.raises(ValidationError):
        await fetch_video_file("../secrets", api_key="k-1")


@pytest.mark.asyncio
async def test_video_endpoint(monkeypatch):
    async def fake_fetch(file_id):
        if file_id == "missing":
            raise BackendError("video", "download failed with status 404", context={"status_code": 404})
        return VideoFile(content=b"clip", mime_type="video/mp4")

    monkeypatch.setattr(main, "fetch_video_file", fake_fetch)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        ok = await client.get("/video/abc123xyz")
        missing = await client.get("/video/missing")

    assert ok.status_code == 200
    assert ok.content == b"clip"
    assert ok.headers["content-type"] == "video/mp4"
    assert missing.status_code == 404
