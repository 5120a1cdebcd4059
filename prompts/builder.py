"""
Prompt construction for every generation backend.

All functions are pure: the same domain, palette and customizations always
produce the same prompt text.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models import Domain, PaletteEntry
from .domains import get_strategy, TEXT_LENGTH_KEY, DEFAULT_TEXT_LENGTH
from .themes import get_theme

logger = logging.getLogger(__name__)

# Values every domain treats as "no preference"
GENERIC_UNSET = ("Any",)

MAX_SUBJECT_CHARS = 500

VIDEO_SERIES_STAGES = (
    "Color palette inspiration.{context} Beautiful display of colors {colors} in artistic "
    "arrangement. Professional cinematography, clean presentation.",
    "Color transformation begins.{context} Colors start to take shape and form, magical "
    "transition effects. Smooth motion, artistic lighting.",
    "Creative elements emerge.{context} Colors transform into the elements of {subject}, "
    "featuring {colors}. Professional cinematography.",
    "Elements combine and arrange.{context} Creative elements move and arrange themselves "
    "harmoniously. Colors {colors}, elegant choreography.",
    "Final creative presentation.{context} Complete creative concept showcasing {colors} in "
    "perfect harmony. Professional presentation, dramatic finale.",
)

PROGRESSION_STEPS = ("initial", "early stage", "mid-development", "advanced stage", "final result")
SHOT_ANGLES = ("straight-on view", "45-degree angle", "overhead shot", "close-up detail", "wide context shot")
SOCIAL_STYLES = ("candid moment", "stylized shot", "behind-the-scenes", "detailed close-up", "atmospheric wide")
GENERIC_VARIATIONS = (
    "primary focus", "alternative angle", "detail showcase", "context view", "creative interpretation",
)


def _clean_value(value: Any, unset: str) -> Optional[str]:
    """Return the display value, or None when the value means 'unset'."""
    sentinels = (unset,) + GENERIC_UNSET
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value if v is not None]
        items = [v for v in items if v and v not in sentinels]
        return ", ".join(items) if items else None
    text = str(value).strip()
    if not text or text in sentinels:
        return None
    return text


def build_customization_context(domain: Domain, customizations: Dict[str, Any]) -> str:
    """
    Render allow-listed customizations as 'Label: value' pairs.

    Keys are visited in the domain's declared order; unset values and keys
    outside the allow-list are skipped.
    """
    strategy = get_strategy(domain)
    parts = []
    for field_def in strategy.customization_fields:
        value = _clean_value(customizations.get(field_def.key), field_def.unset)
        if value is not None:
            parts.append(f"{field_def.label}: {value}")

    known = {field_def.key for field_def in strategy.customization_fields} | {TEXT_LENGTH_KEY}
    ignored = sorted(set(customizations) - known)
    if ignored:
        logger.debug(f"Ignoring customizations not used by {domain.value}: {ignored}")

    return ", ".join(parts)


def resolve_dominant_accent(palette: Sequence[PaletteEntry]) -> Tuple[str, str]:
    """
    Pick the dominant and accent color names.

    Dominant: first role mentioning 'Dominant', else the first entry.
    Accent: first role mentioning 'Accent' or 'Highlight', else the last entry.
    """
    if not palette:
        return "", ""

    dominant = next((p for p in palette if "Dominant" in p.suggested_role), palette[0])
    accent = next(
        (p for p in palette if "Accent" in p.suggested_role or "Highlight" in p.suggested_role),
        palette[-1],
    )
    return dominant.name, accent.name


def palette_color_names(palette: Sequence[PaletteEntry]) -> str:
    return ", ".join(p.name for p in palette)


def _condense(text: str, limit: int = MAX_SUBJECT_CHARS) -> str:
    text = " ".join(text.split())
    if len(text) > limit:
        return text[:limit].rstrip() + "..."
    return text


def build_domain_prompt(
    domain: Domain,
    image_angle: Optional[str],
    palette: Sequence[PaletteEntry],
    ideas_text: Optional[str] = None
) -> str:
    """
    Build the still-image prompt for a domain and angle.

    Args:
        domain: Creative domain
        image_angle: Angle name; unknown angles use the domain default
        palette: Ordered palette
        ideas_text: Generated concept text used as the subject, if any

    Returns:
        Prompt with a trailing style directive
    """
    strategy = get_strategy(domain)
    angle = strategy.image_angles.get(image_angle or "", strategy.default_image)
    dominant, accent = resolve_dominant_accent(palette)

    if ideas_text and ideas_text.strip():
        subject = _condense(ideas_text)
    else:
        subject = strategy.default_subject

    body = angle.template.format(
        subject=subject,
        dominant=dominant,
        accent=accent,
        colors=palette_color_names(palette),
    )

    return (
        f"{body}\n\n"
        f"Style: {angle.style}, high quality, detailed, professional composition.\n"
        "NO text, watermarks, or logos in the image.\n"
        "Ensure colors are vibrant and true to the description."
    )


def build_video_prompt(
    domain: Domain,
    video_angle: Optional[str],
    palette: Sequence[PaletteEntry],
    customizations: Dict[str, Any]
) -> str:
    """Build the single-video prompt for a domain and angle."""
    strategy = get_strategy(domain)
    template = strategy.video_angles.get(video_angle or "", strategy.default_video)
    dominant, accent = resolve_dominant_accent(palette)
    context = build_customization_context(domain, customizations)

    return template.format(
        context=f" {context}." if context else "",
        shot=f" Shot focus: {video_angle}." if video_angle else "",
        dominant=dominant,
        accent=accent,
        colors=palette_color_names(palette),
    )


def build_ideas_prompt(
    domain: Domain,
    palette: Sequence[PaletteEntry],
    customizations: Dict[str, Any],
    instructions: Optional[str] = None
) -> str:
    """Build the text prompt that produces the creative concept."""
    strategy = get_strategy(domain)
    palette_description = ", ".join(f"{p.name} ({p.hex}) - {p.suggested_role}" for p in palette)
    context = build_customization_context(domain, customizations)
    text_length = _clean_value(customizations.get(TEXT_LENGTH_KEY), "") or DEFAULT_TEXT_LENGTH

    sections = [
        f"You are a creative expert in {strategy.expertise}. "
        "Create inspiring and detailed ideas based on this color palette:",
        f"Color Palette: {palette_description}",
    ]
    if context:
        sections.append(f"Customizations: {context}")
    sections.append(instructions or strategy.ideas_instructions)
    sections.append(
        "Generate creative, detailed, and inspiring ideas that make the most of these colors. "
        "Be specific, creative, and provide actionable concepts. "
        f"The response should be between {text_length} words."
    )
    return "\n\n".join(sections)


def build_video_series_prompts(
    domain: Domain,
    palette: Sequence[PaletteEntry],
    customizations: Dict[str, Any],
    part_count: int = 5
) -> List[str]:
    """
    Build ordered prompts for a multi-part video.

    Part i follows a fixed five-stage progression; with more or fewer parts
    the stage is picked proportionally to the part's position.
    """
    if part_count < 1:
        raise ValueError("part_count must be at least 1")

    strategy = get_strategy(domain)
    context = build_customization_context(domain, customizations)
    values = {
        "context": f" {context}." if context else "",
        "colors": palette_color_names(palette),
        "subject": strategy.default_subject,
    }

    prompts = []
    for i in range(part_count):
        stage = VIDEO_SERIES_STAGES[i * len(VIDEO_SERIES_STAGES) // part_count]
        prompts.append(f"Part {i + 1} of {part_count}: " + stage.format(**values))
    return prompts


def _series_variation(theme_id: str, index: int, count: int) -> str:
    if "transformation" in theme_id or "tutorial" in theme_id:
        return PROGRESSION_STEPS[index * len(PROGRESSION_STEPS) // count]
    if "portfolio" in theme_id or "catalog" in theme_id:
        return f"{SHOT_ANGLES[index % len(SHOT_ANGLES)]}, professional composition"
    if "social" in theme_id:
        return f"{SOCIAL_STYLES[index % len(SOCIAL_STYLES)]}, social media optimized"
    return GENERIC_VARIATIONS[index % len(GENERIC_VARIATIONS)]


def build_image_series_prompts(
    domain: Domain,
    palette: Sequence[PaletteEntry],
    customizations: Dict[str, Any],
    theme_id: str,
    count: int
) -> List[str]:
    """Build ordered prompts for an image series using the domain's theme."""
    if count < 1:
        raise ValueError("count must be at least 1")

    strategy = get_strategy(domain)
    theme = get_theme(domain, theme_id)
    context = build_customization_context(domain, customizations) or f"Featuring {strategy.default_subject}"
    base = theme.template.format(context=context, colors=palette_color_names(palette))

    return [
        f"{base} Image {i + 1} of {count}: {_series_variation(theme.id, i, count)}."
        for i in range(count)
    ]
