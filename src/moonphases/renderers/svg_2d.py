"""SVG renderer for the orbit view and the moon view.

Both views are standalone 400x400 SVG documents (viewBox="0 0 400 400")
usable inline in the app and as vector downloads.

Coordinate system:
  x → right, y → down (SVG screen coordinates)
  Orbit view: Earth at the centre, Sun off the right edge,
  moon orbiting counter-clockwise (0° = right, 90° = top).
  Moon view: disk centred at (200, 200); lit side on the right while waxing.
"""

from __future__ import annotations

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

XML_DECLARATION = '<?xml version="1.0" standalone="no"?>\r\n'

_BG = "#0f172a"
_SUN_COLOR = "#fde047"
_ORBIT_COLOR = "#475569"
_EARTH_COLOR = "#1d4ed8"
_ATMOSPHERE_COLOR = "#3b82f6"
_LAND_COLOR = "#15803d"
_MOON_COLOR = "#94a3b8"
_SHADOW_COLOR = "#0f172a"
_DARK_SIDE_COLOR = "#1e293b"
_LIT_COLOR = "#f1f5f9"
_CRATER_COLOR = "#94a3b8"

# (cx, cy, r) relative to the disk centre, drawn only on the lit part.
_CRATERS: tuple[tuple[float, float, float], ...] = (
    (-30, -40, 15),
    (40, 20, 20),
    (-10, 50, 10),
    (50, -30, 8),
)


def _stars_svg(stars: tuple[Star, ...], key: str) -> str:
    return "\n  ".join(
        f'<circle id="{key}-{i}" cx="{s.x:.2f}" cy="{s.y:.2f}" r="{s.size:.2f}"'
        f' fill="white" opacity="{s.opacity:.2f}"/>'
        for i, s in enumerate(stars)
    )


def render_orbit_svg(angle: float, stars: tuple[Star, ...] = (), lang: str = "en") -> str:
    """Return the top-down orbit view as an SVG document string.

    Args:
        angle: Orbital angle in degrees.
        stars: Decorative background stars.
        lang: Language code for labels.
    """
    cx = cy = VIEW_SIZE / 2
    mx, my = moon_orbit_position(angle)

    ray_parts = [
        f'<line x1="0" y1="0" x2="-80" y2="{(i - 3.5) * 20:.0f}" stroke="{_SUN_COLOR}"'
        f' stroke-width="2" stroke-dasharray="4 4" opacity="0.5"/>'
        for i in range(8)
    ]
    rays_svg = "\n    ".join(ray_parts)

    return f"""<svg id="orbit-svg" xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {VIEW_SIZE} {VIEW_SIZE}" width="{VIEW_SIZE}" height="{VIEW_SIZE}">
  <defs>
    <filter id="sunGlow" x="-50%" y="-50%" width="200%" height="200%">
      <feGaussianBlur in="SourceGraphic" stdDeviation="5" result="blur"/>
      <feMerge><feMergeNode in="blur"/><feMergeNode in="SourceGraphic"/></feMerge>
    </filter>
  </defs>
  <rect width="{VIEW_SIZE}" height="{VIEW_SIZE}" fill="{_BG}"/>
  {_stars_svg(stars, "os")}
  <g transform="translate(360, 200)">
    {rays_svg}
    <circle cx="60" cy="0" r="{SUN_RADIUS}" fill="{_SUN_COLOR}" filter="url(#sunGlow)"/>
  </g>
  <circle cx="{cx:.0f}" cy="{cy:.0f}" r="{ORBIT_RADIUS}" fill="none" stroke="{_ORBIT_COLOR}" stroke-width="1" stroke-dasharray="4 4"/>
  <g transform="translate({cx:.0f}, {cy:.0f})">
    <circle r="{EARTH_RADIUS + 2}" fill="{_ATMOSPHERE_COLOR}" opacity="0.3"/>
    <circle r="{EARTH_RADIUS}" fill="{_EARTH_COLOR}"/>
    <path d="M -10 -5 Q 0 -20 15 -10 T 20 5 T 5 20 T -15 10 Z" fill="{_LAND_COLOR}" opacity="0.8"/>
  </g>
  <g transform="translate({mx:.3f}, {my:.3f})">
    <circle r="{MOON_RADIUS}" fill="{_MOON_COLOR}"/>
    <path d="M 0 -{MOON_RADIUS} A {MOON_RADIUS} {MOON_RADIUS} 0 0 0 0 {MOON_RADIUS} Z" fill="{_SHADOW_COLOR}" opacity="0.9"/>
  </g>
  <text x="350" y="380" fill="{_SUN_COLOR}" font-size="14" text-anchor="end" font-weight="bold">{t("label_sun", lang)}</text>
  <text x="{cx:.0f}" y="{cy + EARTH_RADIUS + 20:.0f}" fill="{_ATMOSPHERE_COLOR}" font-size="14" text-anchor="middle" font-weight="bold">{t("label_earth", lang)}</text>
  <text x="{mx:.3f}" y="{my - MOON_RADIUS - 10:.3f}" fill="#cbd5e1" font-size="12" text-anchor="middle">{t("label_moon", lang)}</text>
</svg>"""


def render_moon_svg(angle: float, stars: tuple[Star, ...] = (), lang: str = "en") -> str:
    """Return the moon as seen from Earth as an SVG document string.

    The dark disk is drawn first, then the lit region from the terminator
    path, then faint craters clipped to the lit region.

    Args:
        angle: Orbital angle in degrees.
        stars: Decorative background stars.
        lang: Language code for the caption.
    """
    path_data = build_terminator_path(angle, PHASE_RADIUS).to_svg_path()
    craters_svg = "\n      ".join(
        f'<circle cx="{x:.0f}" cy="{y:.0f}" r="{r:.0f}" fill="{_CRATER_COLOR}"/>'
        for x, y, r in _CRATERS
    )
    # New moon: the empty path would clip everything away; skip the lit layers.
    lit_svg = (
        f"""<path d="{path_data}" fill="{_LIT_COLOR}" filter="url(#moonGlow)"/>
    <clipPath id="litClip"><path d="{path_data}"/></clipPath>
    <g clip-path="url(#litClip)" opacity="0.3">
      {craters_svg}
    </g>"""
        if path_data
        else ""
    )

    return f"""<svg id="phase-svg" xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {VIEW_SIZE} {VIEW_SIZE}" width="{VIEW_SIZE}" height="{VIEW_SIZE}">
  <defs>
    <filter id="moonGlow" x="-50%" y="-50%" width="200%" height="200%">
      <feGaussianBlur in="SourceGraphic" stdDeviation="8" result="blur"/>
      <feColorMatrix in="blur" mode="matrix" values="1 0 0 0 0  0 1 0 0 0  0 0 1 0 0  0 0 0 19 -9" result="goo"/>
      <feComposite in="SourceGraphic" in2="goo" operator="atop"/>
    </filter>
  </defs>
  <rect width="{VIEW_SIZE}" height="{VIEW_SIZE}" fill="{_BG}"/>
  {_stars_svg(stars, "ms")}
  <g transform="translate(200, 200)">
    <circle r="{PHASE_RADIUS}" fill="{_DARK_SIDE_COLOR}"/>
    {lit_svg}
  </g>
  <text x="200" y="360" fill="white" font-size="16" text-anchor="middle" font-weight="bold">{t("label_moon_view", lang)}</text>
</svg>"""


def export_svg(svg: str) -> bytes:
    """Serialize an SVG document for download, with the XML declaration prepended."""
    return (XML_DECLARATION + svg).encode("utf-8")
