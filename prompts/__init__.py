# Prompt building: per-domain strategy registry, series themes and builders

from .domains import DomainStrategy, get_strategy, get_domain_options
from .themes import SeriesTheme, get_theme
from .builder import (
    build_customization_context,
    resolve_dominant_accent,
    build_domain_prompt,
    build_video_prompt,
    build_ideas_prompt,
    build_video_series_prompts,
    build_image_series_prompts,
)

__all__ = [
    "DomainStrategy",
    "get_strategy",
    "get_domain_options",
    "SeriesTheme",
    "get_theme",
    "build_customization_context",
    "resolve_dominant_accent",
    "build_domain_prompt",
    "build_video_prompt",
    "build_ideas_prompt",
    "build_video_series_prompts",
    "build_image_series_prompts",
]
