"""Matplotlib raster renderer for the orbit and moon views."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Circle, PathPatch, Polygon, Wedge
from matplotlib.path import Path as MplPath
from matplotlib.transforms import Affine2D
from PIL import Image

from moonphases.compute import (
    EARTH_RADIUS,
    MOON_RADIUS,
    ORBIT_RADIUS,
    PHASE_RADIUS,
    SUN_RADIUS,
    VIEW_SIZE,
    build_terminator_path,
    moon_orbit_position,
)
from moonphases.i18n import t
from moonphases.models import Star
from moonphases.renderers.svg_2d import render_moon_svg, render_orbit_svg
from moonphases.state import AngleState

logger = logging.getLogger(__name__)

_BG = "#020617"
_SUN_COLOR = "#fde047"
_ORBIT_COLOR = "#475569"
_EARTH_COLOR = "#1d4ed8"
_ATMOSPHERE_COLOR = "#3b82f6"
_LAND_COLOR = "#15803d"
_MOON_COLOR = "#94a3b8"
_SHADOW_COLOR = "#0f172a"
_DARK_SIDE_COLOR = "#1e293b"
_LIT_COLOR = "#f1f5f9"

_CRATERS: tuple[tuple[float, float, float], ...] = (
    (-30, -40, 15),
    (40, 20, 20),
    (-10, 50, 10),
    (50, -30, 8),
)

# Continent outline, relative to Earth's centre: quadratic Béziers with the
# smooth ("T") control points already reflected.
_LAND_PATH = MplPath(
    [(-10, -5), (0, -20), (15, -10), (30, 0), (20, 5), (10, 10), (5, 20), (0, 30), (-15, 10), (-10, -5)],
    [MplPath.MOVETO] + [MplPath.CURVE3] * 8 + [MplPath.CLOSEPOLY],
)


def _new_view(size: int) -> tuple[Figure, Axes]:
    """Figure whose single axes maps 1:1 onto the 400x400 SVG coordinate space."""
    fig = Figure(figsize=(size / 100, size / 100), dpi=100)
    fig.patch.set_facecolor(_BG)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_facecolor(_BG)
    ax.set_xlim(0, VIEW_SIZE)
    ax.set_ylim(VIEW_SIZE, 0)  # y down, as in SVG
    ax.set_aspect("equal")
    ax.axis("off")
    return fig, ax


def _draw_stars(ax: Axes, stars: tuple[Star, ...]) -> None:
    for s in stars:
        ax.add_patch(Circle((s.x, s.y), s.size, color="white", alpha=s.opacity, lw=0))


def render_orbit_figure(
    angle: float, stars: tuple[Star, ...] = (), size: int = VIEW_SIZE, lang: str = "en"
) -> Figure:
    """Render the top-down orbit view as a matplotlib Figure.

    Args:
        angle: Orbital angle in degrees.
        stars: Decorative background stars.
        size: Output size in px (square).
        lang: Language code for labels.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = _new_view(size)
    _draw_stars(ax, stars)

    cx = cy = VIEW_SIZE / 2
    for i in range(8):
        ax.plot(
            [360, 280], [200, 200 + (i - 3.5) * 20],
            color=_SUN_COLOR, linewidth=1.5, linestyle=(0, (2, 2)), alpha=0.5,
        )
    ax.add_patch(Circle((420, 200), SUN_RADIUS, color=_SUN_COLOR, lw=0))

    ax.add_patch(
        Circle((cx, cy), ORBIT_RADIUS, fill=False, edgecolor=_ORBIT_COLOR,
               linewidth=0.75, linestyle=(0, (3, 3)))
    )
    ax.add_patch(Circle((cx, cy), EARTH_RADIUS + 2, color=_ATMOSPHERE_COLOR, alpha=0.3, lw=0))
    ax.add_patch(Circle((cx, cy), EARTH_RADIUS, color=_EARTH_COLOR, lw=0))
    land = _LAND_PATH.transformed(Affine2D().translate(cx, cy))
    ax.add_patch(PathPatch(land, color=_LAND_COLOR, alpha=0.8, lw=0))

    mx, my = moon_orbit_position(angle)
    ax.add_patch(Circle((mx, my), MOON_RADIUS, color=_MOON_COLOR, lw=0))
    # Sun is always to the right, so the left half of the moon is in shadow.
    ax.add_patch(Wedge((mx, my), MOON_RADIUS, 90, 270, color=_SHADOW_COLOR, alpha=0.9, lw=0))

    ax.text(350, 380, t("label_sun", lang), color=_SUN_COLOR, fontsize=10.5,
            ha="right", va="baseline", fontweight="bold")
    ax.text(cx, cy + EARTH_RADIUS + 20, t("label_earth", lang), color=_ATMOSPHERE_COLOR,
            fontsize=10.5, ha="center", va="baseline", fontweight="bold")
    ax.text(mx, my - MOON_RADIUS - 10, t("label_moon", lang), color="#cbd5e1",
            fontsize=9, ha="center", va="baseline")
    return fig


def render_moon_figure(
    angle: float, stars: tuple[Star, ...] = (), size: int = VIEW_SIZE, lang: str = "en"
) -> Figure:
    """Render the moon as seen from Earth as a matplotlib Figure.

    The terminator path is sampled into a polygon; craters are clipped to it.
    """
    fig, ax = _new_view(size)
    _draw_stars(ax, stars)

    centre = np.array([VIEW_SIZE / 2, VIEW_SIZE / 2])
    ax.add_patch(Circle(tuple(centre), PHASE_RADIUS, color=_DARK_SIDE_COLOR, lw=0))

    vertices = build_terminator_path(angle, PHASE_RADIUS).to_polygon()
    if len(vertices):
        lit = Polygon(vertices + centre, closed=True, color=_LIT_COLOR, lw=0)
        ax.add_patch(lit)
        for x, y, r in _CRATERS:
            crater = Circle((centre[0] + x, centre[1] + y), r, color=_MOON_COLOR, alpha=0.3, lw=0)
            ax.add_patch(crater)
            crater.set_clip_path(lit)

    ax.text(200, 360, t("label_moon_view", lang), color="white", fontsize=12,
            ha="center", va="baseline", fontweight="bold")
    return fig


def figure_to_image(fig: Figure) -> Image.Image:
    """Rasterize a Figure with the Agg backend and return an RGB image."""
    canvas = FigureCanvasAgg(fig)
    canvas.draw()
    rgba = np.asarray(canvas.buffer_rgba())
    return Image.fromarray(rgba, "RGBA").convert("RGB")


def rasterize_views(
    angle: float, stars: tuple[Star, ...] = (), size: int = VIEW_SIZE, lang: str = "en"
) -> tuple[Image.Image, Image.Image]:
    """Return (orbit view, moon view) as size x size RGB images."""
    orbit = figure_to_image(render_orbit_figure(angle, stars, size, lang))
    moon = figure_to_image(render_moon_figure(angle, stars, size, lang))
    return orbit, moon


def save_static_views(angle: float, output_dir: Path, stars: tuple[Star, ...] = ()) -> tuple[Path, Path]:
    """Save both views as PNG files.

    Args:
        angle: Orbital angle in degrees.
        output_dir: Destination directory, created if missing.
        stars: Decorative background stars.

    Returns:
        Paths to the orbit and moon PNGs.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    orbit, moon = rasterize_views(angle, stars)
    orbit_path = output_dir / "orbit-view.png"
    moon_path = output_dir / "moon-view.png"
    orbit.save(orbit_path)
    moon.save(moon_path)
    return orbit_path, moon_path


class ViewRenderer:
    """Rendering subsystem bound to an AngleState.

    Every angle change redraws both views for that angle on a worker thread,
    vector and raster, and only then reports it as drawn through
    ``AngleState.mark_drawn``. ``render`` hands back the rasters stored for
    the acknowledged angle, so a capture gets exactly what was drawn.
    """

    def __init__(
        self,
        state: AngleState,
        stars: tuple[Star, ...] = (),
        size: int = VIEW_SIZE,
        lang: str = "en",
    ) -> None:
        self._state = state
        self._stars = stars
        self._size = size
        self._lang = lang
        self._tasks: set[asyncio.Task[None]] = set()
        self._drawn: tuple[float, Image.Image, Image.Image] | None = None
        self.orbit_svg = render_orbit_svg(state.get(), stars, lang)
        self.moon_svg = render_moon_svg(state.get(), stars, lang)
        self._unsubscribe = state.subscribe(self._on_angle)

    def _on_angle(self, angle: float) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Synchronous caller (UI thread): nobody awaits the signal.
            self.orbit_svg = render_orbit_svg(angle, self._stars, self._lang)
            self.moon_svg = render_moon_svg(angle, self._stars, self._lang)
            return
        task = loop.create_task(self._redraw(angle))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _draw(self, angle: float) -> tuple[str, str, Image.Image, Image.Image]:
        orbit, moon = rasterize_views(angle, self._stars, self._size, self._lang)
        return (
            render_orbit_svg(angle, self._stars, self._lang),
            render_moon_svg(angle, self._stars, self._lang),
            orbit,
            moon,
        )

    async def _redraw(self, angle: float) -> None:
        try:
            orbit_svg, moon_svg, orbit, moon = await asyncio.to_thread(self._draw, angle)
        except Exception as e:
            logger.warning("Redraw failed at %.2f°: %s", angle, e)
            self._state.fail_drawn(angle, e)
            return
        self.orbit_svg, self.moon_svg = orbit_svg, moon_svg
        self._drawn = (angle, orbit, moon)
        self._state.mark_drawn(angle)

    @property
    def drawn_angle(self) -> float | None:
        """Angle of the last completed raster redraw, if any."""
        return None if self._drawn is None else self._drawn[0]

    async def render(self) -> tuple[Image.Image, Image.Image]:
        """Return (orbit view, moon view) for the current angle.

        Reuses the rasters from the redraw that acknowledged the current
        angle. Falls back to a fresh rasterization when the angle has not been
        drawn on the loop, e.g. after a synchronous update.
        """
        angle = self._state.get()
        if self._drawn is not None and self._drawn[0] == angle:
            _, orbit, moon = self._drawn
            return orbit.copy(), moon.copy()
        return await asyncio.to_thread(
            rasterize_views, angle, self._stars, self._size, self._lang
        )

    def close(self) -> None:
        self._unsubscribe()
        for task in self._tasks:
            task.cancel()
