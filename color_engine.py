"""
Color math for palette editing and default choices.

Pure functions over hex strings and RGB/HSL tuples:
- hex <-> RGB <-> HSL conversion
- linear color mixing
- hue-rotation harmonies
- copy-on-write palette adjustment
- palette export (CSS variables, Tailwind config, JSON)
"""

import json
import math
import re
from dataclasses import dataclass
from typing import List, Tuple

from models import PaletteEntry

HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")

RGB = Tuple[int, int, int]
HSL = Tuple[float, float, float]


@dataclass(frozen=True)
class HarmonySpec:
    """Static definition of a harmony group."""
    name: str
    description: str
    offsets: Tuple[int, ...]


# Offsets are hue rotations in degrees; 0 is the base color itself
HARMONY_INFO = {
    "complementary": HarmonySpec(
        name="Complementary",
        description="Opposite on color wheel - high contrast",
        offsets=(0, 180),
    ),
    "analogous": HarmonySpec(
        name="Analogous",
        description="Adjacent colors - harmonious blend",
        offsets=(-30, 0, 30),
    ),
    "triadic": HarmonySpec(
        name="Triadic",
        description="Evenly spaced - balanced and vibrant",
        offsets=(0, 120, 240),
    ),
    "split_complementary": HarmonySpec(
        name="Split Complementary",
        description="Variation of complementary - softer contrast",
        offsets=(0, 150, 210),
    ),
    "tetradic": HarmonySpec(
        name="Tetradic",
        description="Two complementary pairs - rich palette",
        offsets=(0, 90, 180, 270),
    ),
}

EXPORT_FORMATS = ("css", "tailwind", "json")


@dataclass
class Harmony:
    name: str
    description: str
    colors: List[str]


def is_valid_hex(value: str) -> bool:
    return bool(HEX_PATTERN.match(value or ""))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_channel(value: float) -> int:
    return max(0, min(255, _round_half_up(value)))


def hex_to_rgb(hex_color: str) -> RGB:
    """
    Parse '#RRGGBB' or 'RRGGBB'.

    Unparsable input yields black (0, 0, 0); callers that need strictness
    check is_valid_hex first.
    """
    match = HEX_PATTERN.match(hex_color or "")
    if not match:
        return (0, 0, 0)
    digits = match.group(1)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Round half up, clamp to [0, 255] and format as lowercase '#rrggbb'."""
    return "#" + "".join(f"{_clamp_channel(c):02x}" for c in (r, g, b))


def normalize_hex(hex_color: str) -> str:
    return rgb_to_hex(*hex_to_rgb(hex_color))


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    """Convert RGB to (h in [0, 360), s in [0, 100], l in [0, 100])."""
    rf, gf, bf = r / 255, g / 255, b / 255
    high = max(rf, gf, bf)
    low = min(rf, gf, bf)
    lightness = (high + low) / 2

    if high == low:
        return (0.0, 0.0, lightness * 100)

    delta = high - low
    if lightness > 0.5:
        saturation = delta / (2 - high - low)
    else:
        saturation = delta / (high + low)

    if high == rf:
        hue = (gf - bf) / delta + (6 if gf < bf else 0)
    elif high == gf:
        hue = (bf - rf) / delta + 2
    else:
        hue = (rf - gf) / delta + 4

    return ((hue * 60) % 360, saturation * 100, lightness * 100)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Convert HSL back to rounded, clamped RGB integers."""
    s = max(0.0, min(100.0, s)) / 100
    l = max(0.0, min(100.0, l)) / 100

    # Achromatic: every channel equals lightness, hue is irrelevant
    if s == 0:
        value = _clamp_channel(l * 255)
        return (value, value, value)

    h = (h % 360) / 360
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    return (
        _clamp_channel(_hue_to_channel(p, q, h + 1 / 3) * 255),
        _clamp_channel(_hue_to_channel(p, q, h) * 255),
        _clamp_channel(_hue_to_channel(p, q, h - 1 / 3) * 255),
    )


def mix_colors(color_a: str, color_b: str, ratio: float = 0.5) -> str:
    """
    Linearly mix two hex colors per channel.

    Args:
        color_a: Color returned at ratio 0
        color_b: Color returned at ratio 1
        ratio: Weight of color_b, clamped to [0, 1]

    Returns:
        Normalized lowercase hex
    """
    ratio = max(0.0, min(1.0, ratio))
    rgb_a = hex_to_rgb(color_a)
    rgb_b = hex_to_rgb(color_b)
    mixed = [a * (1 - ratio) + b * ratio for a, b in zip(rgb_a, rgb_b)]
    return rgb_to_hex(*mixed)


def rotate_hue(hex_color: str, degrees: float) -> str:
    h, s, l = rgb_to_hsl(*hex_to_rgb(hex_color))
    return rgb_to_hex(*hsl_to_rgb((h + degrees) % 360, s, l))


def generate_harmonies(base_hex: str) -> List[Harmony]:
    """
    Build the five harmony groups for a base color.

    Saturation and lightness are held fixed; only the hue rotates. The base
    color is returned exactly as given at its offset-0 position.
    """
    harmonies = []
    for info in HARMONY_INFO.values():
        colors = [
            base_hex if offset == 0 else rotate_hue(base_hex, offset)
            for offset in info.offsets
        ]
        harmonies.append(Harmony(name=info.name, description=info.description, colors=colors))
    return harmonies


def adjust_color(
    palette: List[PaletteEntry],
    index: int,
    prop: str,
    value: float
) -> List[PaletteEntry]:
    """
    Return a new palette with one entry's hue, saturation or lightness replaced.

    The input list and its entries are left untouched.

    Raises:
        ValueError: index out of range or prop not one of 'h', 's', 'l'
    """
    if not 0 <= index < len(palette):
        raise ValueError(f"Palette index {index} out of range (size {len(palette)})")
    prop = prop.lower()
    if prop not in ("h", "s", "l"):
        raise ValueError(f"Unknown color property: {prop}")

    h, s, l = rgb_to_hsl(*hex_to_rgb(palette[index].hex))
    if prop == "h":
        h = value % 360
    elif prop == "s":
        s = max(0.0, min(100.0, value))
    else:
        l = max(0.0, min(100.0, value))

    updated = palette[index].model_copy(update={"hex": rgb_to_hex(*hsl_to_rgb(h, s, l))})
    return [updated if i == index else entry for i, entry in enumerate(palette)]


def export_palette(palette: List[PaletteEntry], fmt: str = "css") -> Tuple[str, str]:
    """
    Render a palette for download.

    Returns:
        (content, filename)
    """
    fmt = fmt.lower()
    colors = [
        {"name": entry.name or f"color-{i + 1}", "hex": entry.hex}
        for i, entry in enumerate(palette)
    ]

    if fmt == "css":
        lines = "\n".join(f"  --color-{i + 1}: {c['hex']};" for i, c in enumerate(colors))
        return ":root {\n" + lines + "\n}", "palette.css"

    if fmt == "tailwind":
        lines = "\n".join(f"        'palette-{i + 1}': '{c['hex']}'," for i, c in enumerate(colors))
        content = (
            "module.exports = {\n  theme: {\n    extend: {\n      colors: {\n"
            + lines
            + "\n      }\n    }\n  }\n}"
        )
        return content, "palette.js"

    if fmt == "json":
        return json.dumps(colors, indent=2), "palette.json"

    raise ValueError(f"Unknown export format: {fmt} (expected one of {', '.join(EXPORT_FORMATS)})")
