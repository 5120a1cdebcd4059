import asyncio
from typing import List, Optional

from models import GenerateCreativeRequest
from providers.base import (
    BackendResponse, ImageGenerationService, TextGenerationService, VideoGenerationService,
)


class FakeText(TextGenerationService):
    def __init__(self, text: str = "A saffron risotto with crimson beet foam", error: Optional[str] = None,
                 raises: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.raises = raises
        self.calls = 0

    async def generate(self, domain, palette, customizations, instructions=None):
        self.calls += 1
        if self.raises:
            raise self.raises
        return BackendResponse(provider="fake_text", text="" if self.error else self.text, error=self.error)


class FakeImage(ImageGenerationService):
    def __init__(self, fail: bool = False, delay: float = 0.0, fail_on: Optional[List[int]] = None):
        self.fail = fail
        self.delay = delay
        self.fail_on = fail_on or []
        self.prompts: List[str] = []
        self.aspects: List[str] = []

    @property
    def name(self) -> str:
        return "fake_image"

    async def generate(self, prompt, aspect_ratio):
        self.prompts.append(prompt)
        self.aspects.append(aspect_ratio)
        call = len(self.prompts)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail or call in self.fail_on:
            return BackendResponse(provider=self.name, error="image backend exploded")
        return BackendResponse(provider=self.name, url=f"data:image/png;base64,IMG{call}")


class FakeVideo(VideoGenerationService):
    def __init__(self, fail: bool = False, delay: float = 0.0, fail_on: Optional[List[int]] = None):
        self.fail = fail
        self.delay = delay
        self.fail_on = fail_on or []
        self.prompts: List[str] = []

    @property
    def name(self) -> str:
        return "fake_video"

    async def generate(self, prompt, aspect_ratio, duration_hint="short", style_hint="cinematic"):
        self.prompts.append(prompt)
        call = len(self.prompts)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail or call in self.fail_on:
            return BackendResponse(provider=self.name, error="video backend exploded")
        return BackendResponse(provider=self.name, url=f"https://videos.test/{call}.mp4")


def make_request(**overrides) -> GenerateCreativeRequest:
    data = {
        "path": "Cooking",
        "palette": [{"hex": "#FF0000", "name": "Red", "suggested_role": "Dominant"}],
        "customizations": {},
        "imagePromptChoice": "Dish Plated",
        "formats": ["image"],
    }
    data.update(overrides)
    return GenerateCreativeRequest.model_validate(data)

