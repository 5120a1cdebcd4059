"""
PaletteExtractor - vision-model color palette extraction.

Sends the uploaded image to the active vision provider and parses the
model's JSON answer into a PaletteOutput. Model output is often wrapped in
prose or code fences, so parsing tries, in order:
1. the whole response as JSON
2. a ```json fenced block
3. the outermost {...} span
and raises ParseError when none of them yields a usable palette.
"""

import base64
import binascii
import io
import json
import logging
import re
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError as ModelValidationError

from color_engine import is_valid_hex
from exceptions import ValidationError, ParseError, BackendError
from models import PaletteOutput
from providers.base import PaletteExtractionService
from providers.router import ProviderRouter, get_router

logger = logging.getLogger(__name__)

MIN_SWATCHES = 3
MAX_SWATCHES = 8

SUPPORTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")

DATA_URL_PREFIX = re.compile(r"^data:[^;,]+;base64,")

EXTRACTION_PROMPT = """Analyze this image carefully. Identify the {swatches} most dominant and characteristic colors that define its visual identity.
For each color, determine its approximate hex code, a common descriptive name, and suggest its role based on its visual prominence and usage in the image (e.g., 'Dominant Background', 'Primary Subject', 'Highlight/Accent', 'Neutral Complement', 'Shadow/Depth').
Additionally, provide a single sentence describing the overall mood or feeling conveyed by the image's color scheme.

Return ONLY a valid JSON object adhering strictly to this schema:
{{
  "mood_description": "A single sentence describing the mood.",
  "palette": [
    {{
      "hex": "#RRGGBB",
      "name": "<Descriptive Color Name>",
      "suggested_role": "<Suggested Role>"
    }}
  ]
}}

Ensure hex codes are accurate. Be perceptive in naming colors and suggesting roles."""


def decode_image_payload(payload: str) -> bytes:
    """Decode a base64 image, with or without a data-URL prefix."""
    raw = DATA_URL_PREFIX.sub("", payload.strip())
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Image is not valid base64", cause=e)
    if not data:
        raise ValidationError("Image payload is empty")
    return data


def detect_image_mime(image_data: bytes) -> str:
    """
    Sniff the image format with Pillow.

    Raises:
        ValidationError: unreadable or unsupported image
    """
    try:
        with Image.open(io.BytesIO(image_data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError("Could not detect image type", cause=e)

    mime_type = Image.MIME.get(image_format or "")
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise ValidationError(
            f"Unsupported image type: {mime_type or image_format}",
            context={"supported": list(SUPPORTED_MIME_TYPES)},
        )
    return mime_type


def _load_json(candidate: str) -> Optional[dict]:
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _extract_json_object(response_text: str) -> Optional[dict]:
    text = response_text.strip()

    # Direct parse
    data = _load_json(text)
    if data is not None:
        return data

    # Fenced code block
    fenced = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if fenced:
        data = _load_json(fenced.group(1))
        if data is not None:
            return data

    # Outermost braces anywhere in the text
    span = re.search(r"\{.*\}", text, re.DOTALL)
    if span:
        return _load_json(span.group())

    return None


def parse_palette_response(response_text: str, max_swatches: int = MAX_SWATCHES) -> PaletteOutput:
    """
    Parse a vision model answer into a PaletteOutput.

    Entries beyond max_swatches are dropped, keeping the model's order.

    Raises:
        ParseError: no JSON object found, or fewer than MIN_SWATCHES usable entries
    """
    data = _extract_json_object(response_text)
    if data is None:
        raise ParseError("No JSON object found in model response", raw_output=response_text)

    entries = data.get("palette")
    if not isinstance(entries, list) or not entries:
        raise ParseError("Model response has no palette entries", raw_output=response_text)
    if len(entries) < MIN_SWATCHES:
        raise ParseError(
            f"Model returned {len(entries)} colors, expected at least {MIN_SWATCHES}",
            raw_output=response_text,
        )
    if len(entries) > max_swatches:
        logger.warning(f"Model returned {len(entries)} colors, keeping the first {max_swatches}")
        data["palette"] = entries = entries[:max_swatches]

    for entry in entries:
        if isinstance(entry, dict) and isinstance(entry.get("hex"), str):
            hex_value = entry["hex"].strip()
            entry["hex"] = hex_value if hex_value.startswith("#") else f"#{hex_value}"

    try:
        output = PaletteOutput.model_validate(data)
    except ModelValidationError as e:
        raise ParseError("Palette entries do not match the expected schema", raw_output=response_text, cause=e)

    bad = [p.hex for p in output.palette if not is_valid_hex(p.hex)]
    if bad:
        raise ParseError(f"Invalid hex codes in palette: {bad}", raw_output=response_text)

    return output


class VisionPaletteExtractor(PaletteExtractionService):
    """Palette extraction through the provider router's vision call."""

    def __init__(self, router: Optional[ProviderRouter] = None):
        self.router = router or get_router()

    async def extract(self, image_data: bytes, swatch_count: int = 5) -> PaletteOutput:
        """
        Extract a palette from raw image bytes.

        Args:
            image_data: Raw image bytes
            swatch_count: Number of colors to ask for, 3-8

        Returns:
            PaletteOutput with mood description and swatches
        """
        if not MIN_SWATCHES <= swatch_count <= MAX_SWATCHES:
            raise ValidationError(
                f"Swatch count must be between {MIN_SWATCHES} and {MAX_SWATCHES}",
                context={"swatches": swatch_count},
            )

        mime_type = detect_image_mime(image_data)
        logger.info(f"Extracting {swatch_count} swatches from {mime_type} image ({len(image_data)} bytes)")

        response = await self.router.analyze_image(
            image_data,
            EXTRACTION_PROMPT.format(swatches=swatch_count),
            mime_type,
        )
        if response.error:
            raise BackendError("palette", response.error, context={"provider": response.provider})

        output = parse_palette_response(response.text, swatch_count)
        logger.info(f"Extracted {len(output.palette)} colors via {response.provider}")
        return output
