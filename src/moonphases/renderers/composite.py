"""Side-by-side frame compositor for the animated export."""

from __future__ import annotations

import os
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

OVERLAY_FONT_SIZE = 20
OVERLAY_COLOR = "white"
# Left margin / distance from the bottom edge: (20, 380) on a 400 px frame.
_OVERLAY_MARGIN = 20


@lru_cache(maxsize=4)
def _overlay_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """TrueType font from $MOONPHASES_FONT, else Pillow's bundled default."""
    path = os.environ.get("MOONPHASES_FONT")
    if path:
        return ImageFont.truetype(path, size)
    return ImageFont.load_default(size=size)


def overlay_position(height: int) -> tuple[int, int]:
    """Baseline-left anchor of the overlay text for a frame of the given height."""
    return (_OVERLAY_MARGIN, height - _OVERLAY_MARGIN)


def compose_frame(view_a: Image.Image, view_b: Image.Image, overlay_text: str) -> Image.Image:
    """Place two equal-size views side by side and draw a caption.

    Args:
        view_a: Left view (the orbit view).
        view_b: Right view (the moon view). Must match view_a's size.
        overlay_text: Caption drawn at the bottom-left of the frame.

    Returns:
        RGB image of size (2 * width, height).

    Raises:
        ValueError: If the views differ in size.
    """
    if view_a.size != view_b.size:
        raise ValueError(f"view sizes differ: {view_a.size} != {view_b.size}")
    width, height = view_a.size
    frame = Image.new("RGB", (width * 2, height), "#020617")
    frame.paste(view_a.convert("RGB"), (0, 0))
    frame.paste(view_b.convert("RGB"), (width, 0))

    draw = ImageDraw.Draw(frame)
    draw.text(
        overlay_position(height),
        overlay_text,
        fill=OVERLAY_COLOR,
        font=_overlay_font(OVERLAY_FONT_SIZE),
        anchor="ls",
    )
    return frame
