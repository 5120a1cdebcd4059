import asyncio
import base64
import io

import pytest
from httpx import AsyncClient, ASGITransport
from PIL import Image

import main
from exceptions import ParseError
from fakes import FakeImage, FakeText, FakeVideo
from main import app, get_orchestrator, get_palette_extractor
from models import PaletteEntry, PaletteOutput
from orchestrator import FormatOrchestrator
from providers.base import PaletteExtractionService
from settings import Settings


REQUEST = {
    "path": "🍽️ Cooking",
    "palette": [
        {"hex": "#FF6B35", "name": "Tangerine", "suggestedRole": "Dominant"},
        {"hex": "#004E89", "name": "Deep Blue", "suggestedRole": "Accent"},
    ],
    "customizations": {"dish_type": "Dessert"},
    "imagePromptChoice": "Dish Plated",
    "formats": ["image", "video"],
}


class FakeExtractor(PaletteExtractionService):
    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    async def extract(self, image_data, swatch_count=5):
        self.calls.append(swatch_count)
        if self.error:
            raise self.error
        return PaletteOutput(
            mood_description="Bright and playful.",
            palette=[PaletteEntry(hex="#ff6b35", name="Tangerine", suggested_role="Dominant")],
        )


def _png_base64() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 107, 53)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


def _use(image=None, video=None, reset_delay=0.0, text=None):
    orchestrator = FormatOrchestrator(
        text or FakeText(), image or FakeImage(), video or FakeVideo(),
        settings=Settings(progress_reset_delay=reset_delay),
        channel=main.progress_channel,
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return orchestrator


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()
    main.session_progress.clear()


@pytest.mark.asyncio
async def test_health():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "palette-creative-processor"}


@pytest.mark.asyncio
async def test_domains_endpoint():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/domains")

    assert response.status_code == 200
    domains = [d["domain"] for d in response.json()["domains"]]
    assert "Cooking" in domains
    assert len(domains) == 7


@pytest.mark.asyncio
async def test_generate_creative_success():
    _use()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/generate-creative", json=REQUEST)

    assert response.status_code == 200
    data = response.json()
    assert data["formats_generated"] == ["image", "video"]
    assert data["errors"] == []
    assert data["image_url"].startswith("data:image/png")
    assert data["ideas"]
    assert "series_urls" not in data


@pytest.mark.asyncio
async def test_generate_creative_partial_failure_is_200():
    _use(image=FakeImage(fail=True))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/generate-creative", json=REQUEST)

    assert response.status_code == 200
    data = response.json()
    assert data["formats_generated"] == ["video"]
    assert data["errors"] == ["Failed to generate image: image backend exploded"]
    assert "image_url" not in data


@pytest.mark.asyncio
async def test_generate_creative_total_failure_is_500():
    _use(image=FakeImage(fail=True), video=FakeVideo(fail=True), text=FakeText(error="quota_exceeded"))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/generate-creative", json=REQUEST)

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Failed to generate any content"
    assert len(data["errors"]) == 2
    assert "ideas" not in data


@pytest.mark.asyncio
async def test_ideas_only_result_is_200():
    _use(image=FakeImage(fail=True), video=FakeVideo(fail=True))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/generate-creative", json=REQUEST)

    assert response.status_code == 200
    data = response.json()
    assert data["ideas"] == "A saffron risotto with crimson beet foam"
    assert data["formats_generated"] == []
    assert data["errors"] == [
        "Failed to generate image: image backend exploded",
        "Failed to generate video: video backend exploded",
    ]


@pytest.mark.asyncio
async def test_generate_creative_validation_error_is_400():
    orchestrator = _use()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/generate-creative", json={**REQUEST, "formats": []})

    assert response.status_code == 400
    assert orchestrator.text_service.calls == 0


@pytest.mark.asyncio
async def test_create_series_merges_existing_result():
    _use()
    existing = {"ideas": "Earlier", "image_url": "data:image/png;base64,OLD", "formats_generated": ["image"]}
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/create-series", json={
            **REQUEST,
            "imageSeriesConfig": {"themeId": "recipe-story", "count": 4},
            "existingResult": existing,
        })

    assert response.status_code == 200
    data = response.json()
    assert data["formats_generated"] == ["image", "image-series"]
    assert len(data["image_series_urls"]) == 4
    assert data["image_url"] == "data:image/png;base64,OLD"


@pytest.mark.asyncio
async def test_progress_for_session():
    _use(reset_delay=60.0)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        idle = await client.get("/progress/abc")
        await client.post("/generate-creative", json={**REQUEST, "sessionId": "abc"})
        done = await client.get("/progress/abc")

    assert idle.json() == {"session_id": "abc", "state": "idle", "progress": 0.0, "stage": None}
    assert done.json()["state"] == "completed"
    assert done.json()["progress"] == 100.0
    assert done.json()["stage"] == "finalizing"


@pytest.mark.asyncio
async def test_progress_cleared_for_back_to_back_sessions():
    _use(reset_delay=0.05)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        await client.post("/generate-creative", json={**REQUEST, "sessionId": "first"})
        await client.post("/generate-creative", json={**REQUEST, "sessionId": "second"})
        await asyncio.sleep(0.15)
        first = await client.get("/progress/first")

    assert main.session_progress == {}
    assert first.json() == {"session_id": "first", "state": "idle", "progress": 0.0, "stage": None}


@pytest.mark.asyncio
async def test_extract_palette():
    extractor = FakeExtractor()
    app.dependency_overrides[get_palette_extractor] = lambda: extractor
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/extract-palette", json={"imageBase64": _png_base64(), "swatches": 6})

    assert response.status_code == 200
    assert response.json()["palette"][0]["hex"] == "#ff6b35"
    assert extractor.calls == [6]


@pytest.mark.asyncio
async def test_extract_palette_errors():
    app.dependency_overrides[get_palette_extractor] = lambda: FakeExtractor(ParseError("no json"))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        bad_payload = await client.post("/extract-palette", json={"imageBase64": "%%%"})
        unparsed = await client.post("/extract-palette", json={"imageBase64": _png_base64()})

    assert bad_payload.status_code == 400
    assert unparsed.status_code == 502


@pytest.mark.asyncio
async def test_palette_playground():
    palette = [{"hex": "#ff0000", "name": "Red"}, {"hex": "#0000ff", "name": "Blue"}]
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        harmonies = await client.post("/palette/harmonies", json={"hex": "#ff0000"})
        bad_hex = await client.post("/palette/harmonies", json={"hex": "crimson"})
        mixed = await client.post("/palette/mix", json={"color_a": "#000000", "color_b": "#ffffff"})
        adjusted = await client.post("/palette/adjust", json={
            "palette": palette, "index": 0, "property": "l", "value": 25,
        })
        bad_index = await client.post("/palette/adjust", json={
            "palette": palette, "index": 5, "property": "l", "value": 25,
        })
        exported = await client.post("/palette/export", json={"palette": palette, "format": "tailwind"})

    assert harmonies.status_code == 200
    assert len(harmonies.json()) == 5
    assert bad_hex.status_code == 400
    assert mixed.json() == {"hex": "#808080"}
    assert adjusted.json()["palette"][0]["hex"] == "#800000"
    assert adjusted.json()["palette"][1]["hex"] == "#0000ff"
    assert bad_index.status_code == 400
    assert exported.json()["filename"] == "palette.js"
