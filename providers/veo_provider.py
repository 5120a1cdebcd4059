"""
Veo Video Provider

Video generation through the google-genai SDK. Veo runs as a long-running
operation, so the provider submits the request and polls until the
operation is done or the wait deadline passes.
"""

import asyncio
import base64
import logging
import time
from typing import Optional, List

from google import genai
from google.genai import types

from settings import get_settings
from video_proxy import proxy_url
from .base import VideoGenerationService, BackendResponse
from .google_keys import KeyRing, is_quota_error

logger = logging.getLogger(__name__)

DURATION_SECONDS = {"short": 5, "medium": 6, "long": 8}

STYLE_PREFIXES = {
    "cinematic": "Professional cinematic photography style, dramatic lighting, shallow depth of field. ",
    "artistic": "Artistic visual style, creative composition, enhanced colors and textures. ",
    "social": "Social media optimized, engaging visual style, trending aesthetics. ",
    "professional": "Professional commercial style, clean composition, product photography quality. ",
}

ORIENTATION = {"9:16": "VERTICAL", "16:9": "HORIZONTAL", "1:1": "SQUARE"}

BASE_NEGATIVE = (
    "low quality, blurry, distorted, pixelated, artifacts, glitches, flickering, unstable motion, "
    "poor lighting, overexposed, underexposed, noisy, grainy, compressed, watermarks, logos, "
    "text overlay, subtitles"
)

STYLE_NEGATIVES = {
    "cinematic": "amateur, handheld camera shake, poor framing, bad composition",
    "artistic": "generic, boring, lifeless, flat colors, mundane",
    "social": "outdated trends, poor engagement, unprofessional",
    "professional": "casual, informal, inconsistent branding, poor production value",
}


def build_enhanced_prompt(prompt: str, aspect_ratio: str, duration_hint: str, style_hint: str) -> str:
    """Wrap a domain prompt with framing, style and duration directives."""
    seconds = DURATION_SECONDS.get(duration_hint, DURATION_SECONDS["short"])
    prefix = f"{ORIENTATION.get(aspect_ratio, 'VERTICAL')} {aspect_ratio} aspect ratio. "
    prefix += STYLE_PREFIXES.get(style_hint, STYLE_PREFIXES["cinematic"])
    return (
        f"{prefix}{prompt} EXACTLY {seconds} SECONDS LONG. "
        "No text overlay, no subtitles, no watermarks. High quality, smooth motion."
    )


def build_negative_prompt(style_hint: str) -> str:
    extra = STYLE_NEGATIVES.get(style_hint)
    return f"{BASE_NEGATIVE}, {extra}" if extra else BASE_NEGATIVE


class VeoVideoProvider(VideoGenerationService):
    """
    Veo video generation with operation polling.

    Returned URLs are data URLs when the SDK hands back bytes, otherwise the
    local proxy path for the remote file.
    """

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        model: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_wait: Optional[float] = None
    ):
        settings = get_settings()
        self.keys = KeyRing(api_keys if api_keys is not None else settings.google_api_keys)
        self.model_name = model or settings.video_model
        self.poll_interval = poll_interval if poll_interval is not None else settings.video_poll_interval
        self.max_wait = max_wait if max_wait is not None else settings.video_max_wait
        logger.info(f"VeoVideoProvider initialized: model={self.model_name}")

    @property
    def name(self) -> str:
        return "veo"

    def is_available(self) -> bool:
        return len(self.keys) > 0

    async def _wait_for(self, client: genai.Client, operation):
        started = time.monotonic()
        while not operation.done:
            if time.monotonic() - started > self.max_wait:
                raise TimeoutError(f"video generation timed out after {self.max_wait:.0f}s")
            await asyncio.sleep(self.poll_interval)
            operation = await client.aio.operations.get(operation)
        return operation

    @staticmethod
    def _video_url(video) -> Optional[str]:
        if getattr(video, "video_bytes", None):
            mime_type = video.mime_type or "video/mp4"
            return f"data:{mime_type};base64,{base64.b64encode(video.video_bytes).decode('utf-8')}"
        uri = getattr(video, "uri", None)
        return proxy_url(uri) if uri else None

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str,
        duration_hint: str = "short",
        style_hint: str = "cinematic"
    ) -> BackendResponse:
        """
        Generate one clip.

        Args:
            prompt: Domain video prompt
            aspect_ratio: '9:16', '16:9' or '1:1'
            duration_hint: short, medium or long
            style_hint: cinematic, artistic, social or professional

        Returns:
            BackendResponse with `url` set on success
        """
        api_key = self.keys.current()
        if not api_key:
            return BackendResponse(provider=self.name, model_used=self.model_name, error="no_api_keys_available")

        enhanced = build_enhanced_prompt(prompt, aspect_ratio, duration_hint, style_hint)

        try:
            logger.info(f"Veo generate: model={self.model_name}, prompt={enhanced[:100]}...")
            client = genai.Client(api_key=api_key)

            operation = await client.aio.models.generate_videos(
                model=self.model_name,
                prompt=enhanced,
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    aspect_ratio=aspect_ratio,
                    duration_seconds=DURATION_SECONDS.get(duration_hint, DURATION_SECONDS["short"]),
                    negative_prompt=build_negative_prompt(style_hint),
                ),
            )
            operation = await self._wait_for(client, operation)

            if operation.error:
                return BackendResponse(provider=self.name, model_used=self.model_name,
                                       error=f"operation_failed: {operation.error}")

            videos = operation.response.generated_videos if operation.response else None
            url = self._video_url(videos[0].video) if videos else None
            if not url:
                return BackendResponse(provider=self.name, model_used=self.model_name, error="no_video_in_response")

            logger.info("Veo video ready")
            return BackendResponse(provider=self.name, url=url, model_used=self.model_name)

        except TimeoutError as e:
            logger.error(f"Veo timeout: {e}")
            return BackendResponse(provider=self.name, model_used=self.model_name, error=f"timeout: {e}")

        except Exception as e:
            if is_quota_error(e):
                self.keys.mark_failed(api_key)
            logger.error(f"Veo error: {e}")
            return BackendResponse(provider=self.name, model_used=self.model_name, error=f"video_error: {e}")
