# Generation backends: LLM routing, image, video and series adapters

from .base import (
    TaskType,
    GenerationConfig,
    LLMResponse,
    BackendResponse,
    SeriesResponse,
    LLMProvider,
    TextGenerationService,
    ImageGenerationService,
    VideoGenerationService,
    SeriesGenerationService,
    PaletteExtractionService,
)
from .router import ProviderRouter, get_router
from .text_generator import RouterTextGenerator
from .gemini_image import GeminiImageProvider
from .veo_provider import VeoVideoProvider
from .series import OrderedSeriesGenerator

__all__ = [
    "TaskType",
    "GenerationConfig",
    "LLMResponse",
    "BackendResponse",
    "SeriesResponse",
    "LLMProvider",
    "TextGenerationService",
    "ImageGenerationService",
    "VideoGenerationService",
    "SeriesGenerationService",
    "PaletteExtractionService",
    "ProviderRouter",
    "get_router",
    "RouterTextGenerator",
    "GeminiImageProvider",
    "VeoVideoProvider",
    "OrderedSeriesGenerator",
]
