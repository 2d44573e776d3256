"""Tests for the side-by-side frame compositor."""

import pytest
from PIL import Image

from moonphases.renderers.composite import compose_frame, overlay_position


def _solid(color, size=(400, 400)):
    return Image.new("RGB", size, color)


def test_frame_is_double_width():
    frame = compose_frame(_solid("red"), _solid("blue"), "Phase: Full Moon")
    assert frame.size == (800, 400)
    assert frame.mode == "RGB"


def test_views_land_in_their_halves():
    frame = compose_frame(_solid((255, 0, 0)), _solid((0, 0, 255)), "")
    assert frame.getpixel((200, 100)) == (255, 0, 0)
    assert frame.getpixel((600, 100)) == (0, 0, 255)


def test_overlay_text_is_drawn_at_fixed_position():
    black = _solid((0, 0, 0))
    plain = compose_frame(black, black, "")
    captioned = compose_frame(black, black, "Phase: Full Moon")
    assert overlay_position(400) == (20, 380)

    # Text sits just above the baseline, starting at x = 20.
    region = (20, 355, 260, 385)
    assert plain.crop(region).getbbox() is None
    assert captioned.crop(region).getbbox() is not None
    # Right half is untouched.
    assert captioned.crop((400, 0, 800, 400)).getbbox() is None


def test_mismatched_views_rejected():
    with pytest.raises(ValueError):
        compose_frame(_solid("red"), _solid("blue", (300, 300)), "x")
