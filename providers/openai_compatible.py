"""
OpenAI-compatible Provider - Primary text/vision provider

Talks to any gateway exposing the OpenAI chat completions API
(configured through LLM_GATEWAY_BASE_URL / LLM_GATEWAY_API_KEY).
"""

import logging
import base64
from typing import Optional

from openai import AsyncOpenAI
from openai import APIError, APIConnectionError, RateLimitError

from settings import get_settings
from .base import LLMProvider, TaskType, GenerationConfig, LLMResponse

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """
    Primary LLM provider using an OpenAI-compatible gateway.

    Features:
    - Lazy AsyncOpenAI client
    - Task-based model selection
    - Errors returned in LLMResponse.error, never raised
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        models: Optional[dict] = None
    ):
        """
        Initialize provider.

        Args:
            base_url: Gateway base URL (default from settings)
            api_key: API key (default from settings)
            models: Override model mapping per TaskType
        """
        settings = get_settings()
        self.base_url = base_url or settings.llm_gateway_base_url or ""
        self.api_key = api_key or settings.llm_gateway_api_key or ""

        self.models = {
            TaskType.TEXT_GENERATION: settings.text_model,
            TaskType.VISION: settings.vision_model,
        }
        if models:
            self.models.update(models)

        self._client: Optional[AsyncOpenAI] = None

        logger.info(f"OpenAICompatibleProvider initialized with base_url={self.base_url or '<unset>'}")

    @property
    def name(self) -> str:
        return "openai_compatible"

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=self.base_url,
                api_key=self.api_key
            )
        return self._client

    def is_available(self) -> bool:
        return bool(self.base_url and self.api_key)

    def get_model_for_task(self, task_type: TaskType) -> str:
        return self.models.get(task_type, self.models[TaskType.TEXT_GENERATION])

    async def _complete(self, model_name: str, messages: list, **kwargs) -> LLMResponse:
        try:
            response = await self.client.chat.completions.create(
                model=model_name,
                messages=messages,
                **kwargs
            )

            text = response.choices[0].message.content or ""
            tokens = response.usage.total_tokens if response.usage else None

            logger.info(f"Gateway success: model={model_name}, {len(text)} chars, {tokens} tokens")

            return LLMResponse(
                text=text,
                model_used=model_name,
                provider=self.name,
                tokens_used=tokens
            )

        except RateLimitError as e:
            logger.warning(f"Gateway rate limit: {e}")
            return LLMResponse(text="", model_used=model_name, provider=self.name,
                               error=f"rate_limit: {str(e)}")

        except APIConnectionError as e:
            logger.error(f"Gateway connection error: {e}")
            return LLMResponse(text="", model_used=model_name, provider=self.name,
                               error=f"connection_error: {str(e)}")

        except APIError as e:
            logger.error(f"Gateway API error: {e}")
            return LLMResponse(text="", model_used=model_name, provider=self.name,
                               error=f"api_error: {str(e)}")

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        config: Optional[GenerationConfig] = None
    ) -> LLMResponse:
        """
        Generate text through the gateway.

        Args:
            prompt: Text prompt
            model: Model name (default: configured text model)
            config: Generation config

        Returns:
            LLMResponse with generated text
        """
        if config is None:
            config = GenerationConfig()

        model_name = model or self.get_model_for_task(TaskType.TEXT_GENERATION)
        logger.info(f"Gateway generate_text: model={model_name}")

        return await self._complete(
            model_name,
            [{"role": "user", "content": prompt}],
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_tokens,
        )

    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/jpeg",
        model: Optional[str] = None
    ) -> LLMResponse:
        """
        Analyze image through the gateway's vision model.

        Args:
            image_data: Raw image bytes
            prompt: Analysis prompt
            mime_type: Image MIME type for the data URL
            model: Vision model (default: configured vision model)

        Returns:
            LLMResponse with analysis result
        """
        model_name = model or self.get_model_for_task(TaskType.VISION)
        logger.info(f"Gateway analyze_image: model={model_name}, size={len(image_data)} bytes")

        base64_image = base64.b64encode(image_data).decode('utf-8')

        return await self._complete(
            model_name,
            [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{base64_image}"}
                        },
                        {"type": "text", "text": prompt}
                    ]
                }
            ],
            max_tokens=1000,
        )
