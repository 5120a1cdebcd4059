from pydantic import ConfigDict
from pydantic_settings import BaseSettings
from typing import Optional, List


class Settings(BaseSettings):
    """Service configuration, read from the environment or a .env file."""

    # OpenAI-compatible gateway (primary text/vision)
    llm_gateway_base_url: Optional[str] = None
    llm_gateway_api_key: Optional[str] = None
    text_model: str = "gemini-2.5-flash"
    vision_model: str = "gemini-2.5-flash"

    # Google keys (fallback text/vision, image and video generation)
    gemini_api_keys: Optional[str] = None  # Comma-separated API keys
    gemini_api_key: Optional[str] = None
    image_model: str = "gemini-2.5-flash-image"
    video_model: str = "veo-2.0-generate-001"

    # Per-format timeouts in seconds
    text_timeout: float = 90.0
    image_timeout: float = 120.0
    video_timeout: float = 360.0
    series_timeout: float = 900.0

    video_poll_interval: float = 5.0
    video_max_wait: float = 240.0
    video_series_parts: int = 5

    # Delay before a finished run returns to idle
    progress_reset_delay: float = 1.0

    cors_origins: str = "*"

    model_config = ConfigDict(env_file=".env", extra="ignore")

    @property
    def google_api_keys(self) -> List[str]:
        """All configured Google keys, multi-key variable first."""
        if self.gemini_api_keys:
            return [k.strip() for k in self.gemini_api_keys.split(",") if k.strip()]
        return [self.gemini_api_key] if self.gemini_api_key else []

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
