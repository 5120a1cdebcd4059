import re
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Optional, List, Dict, Any


def _token(value: str) -> str:
    """Lowercase and drop separators so 'Image Series' == 'image-series'."""
    return re.sub(r"[\s_\-/]", "", value).lower()


class Domain(str, Enum):
    """Creative paths a palette can be turned into"""
    COOKING = "Cooking"
    FASHION = "Fashion"
    INTERIOR = "Interior Design"
    ART = "Art/Craft"
    MAKEUP = "Makeup"
    EVENT = "Event Theme"
    DESIGN = "Graphic/Web Design"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        # UI labels carry an emoji prefix, e.g. "🍽️ Cooking"
        wanted = _token(re.sub(r"^[^\w]+", "", value))
        for member in cls:
            if wanted in (_token(member.value), _token(member.name)):
                return member
        return None


class OutputFormat(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    SERIES = "series"
    IMAGE_SERIES = "image-series"
    COMBINED = "combined"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        wanted = _token(value)
        for member in cls:
            if wanted == _token(member.value):
                return member
        return None


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class RunState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIALLY_FAILED = "partially_failed"
    FAILED = "failed"


# ============== Palette Models ==============

class PaletteEntry(BaseModel):
    """One swatch of an extracted palette"""
    hex: str
    name: str
    suggested_role: str = Field(
        default="",
        validation_alias=AliasChoices("suggested_role", "suggestedRole"),
    )


class PaletteOutput(BaseModel):
    """Palette extraction result"""
    mood_description: str = ""
    palette: List[PaletteEntry] = Field(default_factory=list)


class ExtractPaletteRequest(BaseModel):
    image_base64: str = Field(alias="imageBase64")
    swatches: int = 5

    model_config = ConfigDict(populate_by_name=True)


# ============== Generation Models ==============

class SeriesConfig(BaseModel):
    """Image series settings"""
    theme_id: str = Field(default="auto", alias="themeId")
    count: int = 5
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")

    model_config = ConfigDict(populate_by_name=True)


class GenerateCreativeRequest(BaseModel):
    """Request to turn a palette into creative content"""
    path: str  # Domain label, e.g. "🍽️ Cooking" or "Cooking"
    palette: List[PaletteEntry]
    customizations: Dict[str, Any] = Field(default_factory=dict)
    image_prompt_choice: Optional[str] = Field(default=None, alias="imagePromptChoice")
    formats: List[str] = Field(default_factory=lambda: [OutputFormat.IMAGE.value])
    image_aspect_ratio: Optional[str] = Field(default=None, alias="imageAspectRatio")
    video_aspect_ratio: Optional[str] = Field(default=None, alias="videoAspectRatio")
    image_series_config: Optional[SeriesConfig] = Field(default=None, alias="imageSeriesConfig")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    model_config = ConfigDict(populate_by_name=True)


class CreativeResult(BaseModel):
    """Aggregated outcome of one generation run"""
    ideas: str = ""
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    series_urls: Optional[List[str]] = None
    image_series_urls: Optional[List[str]] = None
    formats_generated: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def status(self) -> RunState:
        if not self.formats_generated:
            return RunState.FAILED
        if self.errors:
            return RunState.PARTIALLY_FAILED
        return RunState.COMPLETED

    @property
    def has_content(self) -> bool:
        """True when the ideas text or at least one format was generated."""
        return bool(self.ideas.strip() or self.formats_generated)


class CreateSeriesRequest(GenerateCreativeRequest):
    """Generate an image series and merge it into an earlier result"""
    existing_result: CreativeResult = Field(default_factory=CreativeResult, alias="existingResult")


# ============== Palette Playground Models ==============

class HarmonyRequest(BaseModel):
    hex: str


class HarmonyGroup(BaseModel):
    name: str
    description: str
    colors: List[str]


class MixRequest(BaseModel):
    color_a: str
    color_b: str
    ratio: float = 0.5


class AdjustRequest(BaseModel):
    palette: List[PaletteEntry]
    index: int
    property: str  # h, s or l
    value: float


class ExportRequest(BaseModel):
    palette: List[PaletteEntry]
    format: str = "css"


class ExportResponse(BaseModel):
    content: str
    filename: str


class ProgressResponse(BaseModel):
    session_id: str
    state: RunState
    progress: float
    stage: Optional[str] = None  # analyzing, conceptualizing, creating or finalizing
