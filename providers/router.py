"""
Provider Router - picks one LLM provider per call

The gateway provider is preferred; the Gemini SDK provider takes over when
the gateway is unconfigured or its circuit breaker has tripped. Each call
makes exactly one attempt: a failure is recorded and returned, and only the
next call may go to the fallback.
"""

import logging
from typing import Optional

from .base import LLMProvider, TaskType, GenerationConfig, LLMResponse
from .openai_compatible import OpenAICompatibleProvider
from .gemini_text import GeminiTextProvider

logger = logging.getLogger(__name__)


class ProviderRouter:
    """
    Routes LLM requests to a single provider per call.

    Usage:
        router = ProviderRouter()
        response = await router.generate_text(prompt, task_type=TaskType.TEXT_GENERATION)
    """

    def __init__(
        self,
        primary: Optional[LLMProvider] = None,
        fallback: Optional[LLMProvider] = None,
        failure_threshold: int = 3
    ):
        """
        Initialize router with providers.

        Args:
            primary: Primary provider (default: OpenAICompatibleProvider)
            fallback: Fallback provider (default: GeminiTextProvider)
            failure_threshold: Consecutive primary failures before it is disabled
        """
        self.primary = primary or OpenAICompatibleProvider()
        self.fallback = fallback or GeminiTextProvider()

        # Consecutive failures for the circuit breaker
        self._primary_failures = 0
        self._primary_failure_threshold = failure_threshold
        self._primary_disabled = False

        logger.info(f"ProviderRouter initialized: primary={self.primary.name}, fallback={self.fallback.name}")

    def reset_primary(self):
        """Re-enable the primary provider."""
        self._primary_failures = 0
        self._primary_disabled = False
        logger.info("Primary provider reset")

    def _record_result(self, provider: LLMProvider, response: LLMResponse):
        if provider is not self.primary:
            return
        if not response.error:
            self._primary_failures = 0
            return
        self._primary_failures += 1
        if self._primary_failures >= self._primary_failure_threshold:
            self._primary_disabled = True
            logger.warning(f"Primary provider disabled after {self._primary_failures} failures")

    def get_active_provider(self) -> Optional[LLMProvider]:
        """Get the provider the next call will use, or None."""
        if not self._primary_disabled and self.primary.is_available():
            return self.primary
        if self.fallback.is_available():
            return self.fallback
        return None

    @staticmethod
    def _unavailable() -> LLMResponse:
        return LLMResponse(
            text="",
            model_used="none",
            provider="none",
            error="all_providers_unavailable"
        )

    async def generate_text(
        self,
        prompt: str,
        task_type: TaskType = TaskType.TEXT_GENERATION,
        model: Optional[str] = None,
        config: Optional[GenerationConfig] = None
    ) -> LLMResponse:
        """
        Generate text with the active provider.

        Args:
            prompt: Text prompt
            task_type: Task type for model selection
            model: Optional model override
            config: Generation config

        Returns:
            LLMResponse, with `error` set on failure
        """
        provider = self.get_active_provider()
        if provider is None:
            return self._unavailable()

        model_name = model or provider.get_model_for_task(task_type)
        logger.info(f"Routing text to {provider.name} with model {model_name}")

        response = await provider.generate_text(prompt, model_name, config)
        if response.error:
            logger.warning(f"{provider.name} failed: {response.error}")
        self._record_result(provider, response)
        return response

    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/jpeg",
        model: Optional[str] = None
    ) -> LLMResponse:
        """
        Analyze image with the active provider.

        Args:
            image_data: Image bytes
            prompt: Analysis prompt
            mime_type: Detected MIME type
            model: Optional model override

        Returns:
            LLMResponse, with `error` set on failure
        """
        provider = self.get_active_provider()
        if provider is None:
            return self._unavailable()

        model_name = model or provider.get_model_for_task(TaskType.VISION)
        logger.info(f"Routing vision to {provider.name} with model {model_name}")

        response = await provider.analyze_image(image_data, prompt, mime_type, model_name)
        if response.error:
            logger.warning(f"{provider.name} vision failed: {response.error}")
        self._record_result(provider, response)
        return response


# Global router instance (lazy initialization)
_router: Optional[ProviderRouter] = None


def get_router() -> ProviderRouter:
    """Get or create the global provider router."""
    global _router
    if _router is None:
        _router = ProviderRouter()
    return _router
