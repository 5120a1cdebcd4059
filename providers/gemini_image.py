"""
Gemini Image Provider

Still-image generation through a Gemini image model. The generated image
comes back as inline data and is returned as a data URL.
"""

import base64
import logging
from typing import Optional, List

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from settings import get_settings
from .base import ImageGenerationService, BackendResponse
from .google_keys import KeyRing, is_quota_error

logger = logging.getLogger(__name__)


class GeminiImageProvider(ImageGenerationService):

    def __init__(self, api_keys: Optional[List[str]] = None, model: Optional[str] = None):
        settings = get_settings()
        self.keys = KeyRing(api_keys if api_keys is not None else settings.google_api_keys)
        self.model_name = model or settings.image_model
        logger.info(f"GeminiImageProvider initialized: model={self.model_name}, {len(self.keys)} keys")

    @property
    def name(self) -> str:
        return "gemini_image"

    def is_available(self) -> bool:
        return len(self.keys) > 0

    @staticmethod
    def _extract_image(response) -> Optional[str]:
        """Return the first inline image part as a data URL."""
        for candidate in response.candidates or []:
            for part in candidate.content.parts:
                inline = getattr(part, "inline_data", None)
                if inline and inline.mime_type and inline.mime_type.startswith("image/") and inline.data:
                    encoded = base64.b64encode(inline.data).decode("utf-8")
                    return f"data:{inline.mime_type};base64,{encoded}"
        return None

    async def generate(self, prompt: str, aspect_ratio: str) -> BackendResponse:
        """
        Generate one image.

        Args:
            prompt: Full image prompt
            aspect_ratio: '1:1', '16:9' or '9:16'

        Returns:
            BackendResponse with `url` set to a data URL
        """
        api_key = self.keys.current()
        if not api_key:
            return BackendResponse(provider=self.name, model_used=self.model_name, error="no_api_keys_available")

        try:
            logger.info(f"Gemini image: model={self.model_name}, aspect={aspect_ratio}")

            genai.configure(api_key=api_key)
            gmodel = genai.GenerativeModel(self.model_name)
            response = await gmodel.generate_content_async(f"{prompt}\nAspect ratio: {aspect_ratio}.")

            url = self._extract_image(response)
            if not url:
                return BackendResponse(provider=self.name, model_used=self.model_name, error="no_image_in_response")

            logger.info(f"Gemini image success: {len(url)} chars")
            return BackendResponse(provider=self.name, url=url, model_used=self.model_name)

        except Exception as e:
            if isinstance(e, google_exceptions.ResourceExhausted) or is_quota_error(e):
                logger.warning(f"Gemini image rate limited: {e}")
                self.keys.mark_failed(api_key)
                return BackendResponse(provider=self.name, model_used=self.model_name, error=f"rate_limit: {e}")
            logger.error(f"Gemini image error: {e}")
            return BackendResponse(provider=self.name, model_used=self.model_name, error=f"image_error: {e}")
