"""
Generation backend interfaces.

LLMProvider covers chat-style text and vision models (used for ideas and
palette extraction). The *Service classes are the adapter seams the
orchestrator talks to; concrete vendors implement them.

Adapters report failures through the `error` field of their response
instead of raising, except PaletteExtractionService which raises
ValidationError / ParseError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Sequence
from enum import Enum

from models import Domain, PaletteEntry, PaletteOutput


class TaskType(Enum):
    """Types of tasks for model selection."""
    TEXT_GENERATION = "text_gen"      # Creative concept text
    VISION = "vision"                  # Palette extraction


@dataclass
class GenerationConfig:
    """Configuration for text generation."""
    temperature: float = 0.8
    top_p: float = 0.95
    top_k: int = 40
    max_tokens: int = 2048


@dataclass
class LLMResponse:
    """Unified response from LLM providers."""
    text: str
    model_used: str
    provider: str
    tokens_used: Optional[int] = None
    error: Optional[str] = None


@dataclass
class BackendResponse:
    """Result of one text, image or video generation call."""
    provider: str
    text: str = ""
    url: Optional[str] = None
    model_used: Optional[str] = None
    error: Optional[str] = None


@dataclass
class SeriesResponse:
    """Ordered series output; urls keep prompt order, skipping failed parts."""
    provider: str
    urls: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class LLMProvider(ABC):
    """
    Abstract base class for chat-style LLM providers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available and configured."""
        pass

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        config: Optional[GenerationConfig] = None
    ) -> LLMResponse:
        """
        Generate text response from prompt.

        Args:
            prompt: Text prompt
            model: Optional model override
            config: Generation configuration

        Returns:
            LLMResponse with generated text
        """
        pass

    @abstractmethod
    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/jpeg",
        model: Optional[str] = None
    ) -> LLMResponse:
        """
        Analyze image and generate response.

        Args:
            image_data: Raw image bytes
            prompt: Analysis prompt
            mime_type: Detected image MIME type
            model: Optional model override

        Returns:
            LLMResponse with analysis result
        """
        pass

    def get_model_for_task(self, task_type: TaskType) -> str:
        """
        Get the best model for a given task type.
        Override in subclasses for provider-specific model selection.
        """
        return "default"


class TextGenerationService(ABC):
    """Produces the creative concept text for a domain."""

    @abstractmethod
    async def generate(
        self,
        domain: Domain,
        palette: Sequence[PaletteEntry],
        customizations: Dict[str, Any],
        instructions: Optional[str] = None
    ) -> BackendResponse:
        pass


class ImageGenerationService(ABC):

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def generate(self, prompt: str, aspect_ratio: str) -> BackendResponse:
        """Generate one image; `url` is a data URL or remote URL."""
        pass


class VideoGenerationService(ABC):

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        aspect_ratio: str,
        duration_hint: str = "short",
        style_hint: str = "cinematic"
    ) -> BackendResponse:
        """Generate one video clip. Long-running."""
        pass


class SeriesGenerationService(ABC):

    @abstractmethod
    async def generate_ordered(
        self,
        prompts: Sequence[str],
        aspect_ratio: str,
        timeout: Optional[float] = None
    ) -> SeriesResponse:
        """Generate one asset per prompt, in prompt order, within an optional overall timeout."""
        pass


class PaletteExtractionService(ABC):

    @abstractmethod
    async def extract(self, image_data: bytes, swatch_count: int = 5) -> PaletteOutput:
        """
        Extract a palette from an image.

        Raises:
            ValidationError: swatch count out of range or unreadable image
            ParseError: model output could not be parsed
        """
        pass
