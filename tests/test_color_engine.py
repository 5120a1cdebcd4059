import json

import pytest

from color_engine import (
    adjust_color, export_palette, generate_harmonies, hex_to_rgb, hsl_to_rgb,
    mix_colors, normalize_hex, rgb_to_hex, rgb_to_hsl,
)
from models import PaletteEntry


def test_hex_rgb_round_trip():
    for r in range(0, 256, 15):
        for g in range(0, 256, 51):
            for b in (0, 7, 128, 255):
                assert hex_to_rgb(rgb_to_hex(r, g, b)) == (r, g, b)


def test_hex_parsing_accepts_missing_hash_and_case():
    assert hex_to_rgb("#FF8000") == (255, 128, 0)
    assert hex_to_rgb("ff8000") == (255, 128, 0)


def test_invalid_hex_falls_back_to_black():
    assert hex_to_rgb("not-a-color") == (0, 0, 0)
    assert hex_to_rgb("#12345") == (0, 0, 0)
    assert hex_to_rgb("") == (0, 0, 0)


def test_rgb_to_hex_rounds_half_up_and_clamps():
    assert rgb_to_hex(127.5, 0, 0) == "#800000"
    assert rgb_to_hex(-10, 300, 254.4) == "#00fffe"


def test_hsl_round_trip_within_one_unit():
    samples = [(255, 0, 0), (12, 200, 99), (250, 250, 250), (33, 33, 34), (128, 64, 192), (0, 0, 0)]
    for rgb in samples:
        back = hsl_to_rgb(*rgb_to_hsl(*rgb))
        assert all(abs(a - b) <= 1 for a, b in zip(rgb, back)), (rgb, back)


def test_zero_saturation_is_gray_regardless_of_hue():
    for hue in (0, 90, 200, 359):
        assert hsl_to_rgb(hue, 0, 50) == (128, 128, 128)


def test_rgb_to_hsl_known_values():
    h, s, l = rgb_to_hsl(255, 0, 0)
    assert (round(h), round(s), round(l)) == (0, 100, 50)
    h, s, l = rgb_to_hsl(0, 0, 255)
    assert round(h) == 240


def test_mix_identities():
    a, b = "#3366CC", "#FFAA00"
    assert mix_colors(a, a, 0.3) == normalize_hex(a)
    assert mix_colors(a, b, 0) == normalize_hex(a)
    assert mix_colors(a, b, 1) == normalize_hex(b)
    assert mix_colors("#000000", "#ffffff", 0.5) == "#808080"


def test_harmony_cardinalities_and_base_color():
    base = "#FF0000"
    harmonies = {h.name: h for h in generate_harmonies(base)}

    assert len(harmonies["Complementary"].colors) == 2
    assert len(harmonies["Analogous"].colors) == 3
    assert len(harmonies["Triadic"].colors) == 3
    assert len(harmonies["Split Complementary"].colors) == 3
    assert len(harmonies["Tetradic"].colors) == 4

    assert harmonies["Complementary"].colors[0] == base
    assert harmonies["Analogous"].colors[1] == base
    assert harmonies["Complementary"].colors[1] == "#00ffff"
    assert harmonies["Triadic"].colors[1:] == ["#00ff00", "#0000ff"]
    assert harmonies["Complementary"].description == "Opposite on color wheel - high contrast"


def test_adjust_color_is_copy_on_write():
    palette = [
        PaletteEntry(hex="#ff0000", name="Red", suggested_role="Dominant"),
        PaletteEntry(hex="#00ff00", name="Green", suggested_role="Accent"),
    ]
    updated = adjust_color(palette, 0, "h", 240)

    assert updated is not palette
    assert palette[0].hex == "#ff0000"
    assert updated[0].hex == "#0000ff"
    assert updated[0].name == "Red"
    assert updated[1] == palette[1]


def test_adjust_color_rejects_bad_input():
    palette = [PaletteEntry(hex="#ff0000", name="Red")]
    with pytest.raises(ValueError):
        adjust_color(palette, 3, "l", 10)
    with pytest.raises(ValueError):
        adjust_color(palette, 0, "x", 10)


def test_export_formats():
    palette = [PaletteEntry(hex="#112233", name="Navy"), PaletteEntry(hex="#ddeeff", name="")]

    css, css_name = export_palette(palette, "css")
    assert css_name == "palette.css"
    assert "--color-1: #112233;" in css and "--color-2: #ddeeff;" in css

    tailwind, tw_name = export_palette(palette, "tailwind")
    assert tw_name == "palette.js"
    assert "'palette-2': '#ddeeff'," in tailwind

    content, json_name = export_palette(palette, "json")
    assert json_name == "palette.json"
    assert json.loads(content) == [
        {"name": "Navy", "hex": "#112233"},
        {"name": "color-2", "hex": "#ddeeff"},
    ]

    with pytest.raises(ValueError):
        export_palette(palette, "scss")
