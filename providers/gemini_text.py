"""
Gemini Text Provider - Fallback text/vision provider

Direct Gemini SDK implementation used when the OpenAI-compatible gateway
is unavailable or has been disabled by the router.
"""

import io
import logging
from typing import Optional, List

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from PIL import Image

from settings import get_settings
from .base import LLMProvider, TaskType, GenerationConfig, LLMResponse
from .google_keys import KeyRing, is_quota_error

logger = logging.getLogger(__name__)


class GeminiTextProvider(LLMProvider):
    """
    Fallback LLM provider using the google-generativeai SDK.

    Rotates across configured API keys between calls.
    """

    def __init__(self, api_keys: Optional[List[str]] = None):
        """
        Args:
            api_keys: List of Gemini API keys (default from settings)
        """
        if api_keys is None:
            api_keys = get_settings().google_api_keys

        self.keys = KeyRing(api_keys)
        logger.info(f"GeminiTextProvider initialized with {len(self.keys)} API keys")

    @property
    def name(self) -> str:
        return "gemini"

    def is_available(self) -> bool:
        return len(self.keys) > 0

    def get_model_for_task(self, task_type: TaskType) -> str:
        if task_type == TaskType.VISION:
            return "gemini-2.0-flash"
        return "gemini-2.5-flash"

    def _no_key(self, model_name: str) -> LLMResponse:
        return LLMResponse(text="", model_used=model_name, provider=self.name, error="no_api_keys_available")

    def _failure(self, model_name: str, api_key: str, error: Exception, kind: str) -> LLMResponse:
        if isinstance(error, google_exceptions.ResourceExhausted) or is_quota_error(error):
            logger.warning(f"Gemini rate limited: {error}")
            self.keys.mark_failed(api_key)
            kind = "rate_limit"
        else:
            logger.error(f"Gemini {kind}: {error}")
        return LLMResponse(text="", model_used=model_name, provider=self.name, error=f"{kind}: {str(error)}")

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        config: Optional[GenerationConfig] = None
    ) -> LLMResponse:
        """
        Generate text using direct Gemini SDK.

        Args:
            prompt: Text prompt
            model: Model name
            config: Generation config

        Returns:
            LLMResponse with generated text
        """
        if config is None:
            config = GenerationConfig()

        model_name = model or self.get_model_for_task(TaskType.TEXT_GENERATION)
        api_key = self.keys.current()
        if not api_key:
            return self._no_key(model_name)

        try:
            logger.info(f"Gemini text: model={model_name}, key=...{api_key[-6:]}")

            genai.configure(api_key=api_key)
            gmodel = genai.GenerativeModel(model_name)

            response = await gmodel.generate_content_async(
                prompt,
                generation_config={
                    "temperature": config.temperature,
                    "top_p": config.top_p,
                    "top_k": config.top_k,
                    "max_output_tokens": config.max_tokens,
                }
            )

            text = (response.text or "").strip()
            if not text:
                return LLMResponse(text="", model_used=model_name, provider=self.name, error="empty_response")

            logger.info(f"Gemini text success: {len(text)} chars")
            return LLMResponse(text=text, model_used=model_name, provider=self.name)

        except Exception as e:
            return self._failure(model_name, api_key, e, "gemini_error")

    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/jpeg",
        model: Optional[str] = None
    ) -> LLMResponse:
        """
        Analyze image using Gemini Vision.

        Args:
            image_data: Raw image bytes
            prompt: Analysis prompt
            mime_type: Unused; the SDK reads the format from the image itself
            model: Vision model

        Returns:
            LLMResponse with analysis result
        """
        model_name = model or self.get_model_for_task(TaskType.VISION)
        api_key = self.keys.current()
        if not api_key:
            return self._no_key(model_name)

        try:
            logger.info(f"Gemini vision: model={model_name}, size={len(image_data)} bytes")

            genai.configure(api_key=api_key)
            gmodel = genai.GenerativeModel(model_name)

            image = Image.open(io.BytesIO(image_data))
            response = await gmodel.generate_content_async([prompt, image])

            text = (response.text or "").strip()
            if not text:
                return LLMResponse(text="", model_used=model_name, provider=self.name, error="empty_response")

            logger.info(f"Gemini vision success: {len(text)} chars")
            return LLMResponse(text=text, model_used=model_name, provider=self.name)

        except Exception as e:
            return self._failure(model_name, api_key, e, "vision_error")
