"""Phase geometry layer: angle normalization, phase classification, and terminator paths."""

import math

import numpy as np

from moonphases.i18n import t
from moonphases.models import (
    ArcSegment,
    PathKind,
    PhaseInfo,
    PhaseType,
    Star,
    TerminatorPath,
)

# Orbit view geometry (px, 400x400 view). Visual only, not to scale.
VIEW_SIZE = 400
ORBIT_RADIUS = 120
MOON_RADIUS = 15
EARTH_RADIUS = 30
SUN_RADIUS = 40

# Moon view disk radius (px)
PHASE_RADIUS = 100

_WINDOW_DEG = 360 / 8
_HALF_WINDOW_DEG = _WINDOW_DEG / 2

# Angles closer than this to 0° / 180° collapse to the new / full moon forms.
_DEGENERATE_EPSILON_DEG = 0.1

# Bucket index -> phase. Bucket i covers [45i - 22.5, 45i + 22.5).
_PHASE_TABLE: tuple[PhaseType, ...] = tuple(PhaseType)


def normalize_angle(angle: float) -> float:
    """Canonicalize an angle in degrees into [0, 360).

    Raises:
        ValueError: If angle is infinite or NaN.
    """
    if not math.isfinite(angle):
        raise ValueError(f"angle must be finite, got {angle!r}")
    a = math.fmod(angle, 360.0)
    if a < 0:
        a += 360.0
    # -1e-20 + 360 rounds to 360.0
    if a >= 360.0:
        a = 0.0
    return a


def phase_index(angle: float) -> int:
    """Return the bucket index (0-7) of the 45° window containing angle.

    Windows are half-open, [center - 22.5, center + 22.5), so 22.5 belongs to
    the waxing crescent and 337.5 to the new moon.
    """
    a = normalize_angle(angle)
    # a - 45 * index is exact, so the half-window test never rounds across an edge
    index = int(a // _WINDOW_DEG)
    if a - index * _WINDOW_DEG >= _HALF_WINDOW_DEG:
        index += 1
    return index % len(_PHASE_TABLE)


def classify_phase(angle: float, lang: str = "en") -> PhaseInfo:
    """Map an orbital angle to its phase.

    Args:
        angle: Orbital angle in degrees (0 = new moon, counter-clockwise).
        lang: Language code ('ja' or 'en') for the name and caption.

    Returns:
        PhaseInfo for the single window that contains the angle.
    """
    index = phase_index(angle)
    phase = _PHASE_TABLE[index]
    return PhaseInfo(
        type=phase,
        angle=index * _WINDOW_DEG,
        name=t(f"phase_{phase.value}_name", lang),
        caption=t(f"phase_{phase.value}_caption", lang),
    )


def illuminated_fraction(angle: float) -> float:
    """Fraction of the visible disk that is lit: 0 at new moon, 1 at full."""
    rad = math.radians(normalize_angle(angle))
    return (1 - math.cos(rad)) / 2


def build_terminator_path(angle: float, radius: float) -> TerminatorPath:
    """Compute the lit-region boundary for the moon as seen from Earth.

    The disk is centred at the origin. The lit region is bounded by the outer
    semicircle on the illuminated side (right while waxing, left while
    waning) and by the terminator, a half-ellipse with x radius
    ``radius * cos(angle)``. The terminator's sweep flips at the quarter
    phases so crescents come out concave and gibbous phases convex.

    Args:
        angle: Orbital angle in degrees (0 = new moon).
        radius: Disk radius in output units.

    Returns:
        TerminatorPath in the empty, full-disk, or two-arc form.
    """
    a = normalize_angle(angle)
    rad = math.radians(a)
    x_radius = radius * math.cos(rad)
    waxing = a < 180
    top = (0.0, -float(radius))
    bottom = (0.0, float(radius))

    if min(a, 360.0 - a) < _DEGENERATE_EPSILON_DEG:
        return TerminatorPath(
            kind=PathKind.EMPTY,
            angle_deg=a,
            radius=radius,
            x_radius=x_radius,
            waxing=waxing,
            arcs=(),
        )

    if abs(a - 180) < _DEGENERATE_EPSILON_DEG:
        return TerminatorPath(
            kind=PathKind.FULL,
            angle_deg=a,
            radius=radius,
            x_radius=x_radius,
            waxing=waxing,
            arcs=(
                ArcSegment(radius, radius, 1, 1, bottom),
                ArcSegment(radius, radius, 1, 1, top),
            ),
        )

    sweep_outer = 1 if waxing else 0
    if (waxing and a < 90) or (not waxing and a < 270):
        sweep_inner = 0
    else:
        sweep_inner = 1

    return TerminatorPath(
        kind=PathKind.PHASE,
        angle_deg=a,
        radius=radius,
        x_radius=x_radius,
        waxing=waxing,
        arcs=(
            ArcSegment(radius, radius, 0, sweep_outer, bottom),
            ArcSegment(abs(x_radius), radius, 0, sweep_inner, top),
        ),
    )


def moon_orbit_position(
    angle: float,
    center: tuple[float, float] = (VIEW_SIZE / 2, VIEW_SIZE / 2),
    orbit_radius: float = ORBIT_RADIUS,
) -> tuple[float, float]:
    """Screen position of the moon in the top-down orbit view.

    The Sun is off to the right, so 0° (new moon) puts the moon between Earth
    and Sun. The orbit runs counter-clockwise, i.e. upwards on screen.
    """
    rad = math.radians(normalize_angle(angle))
    cx, cy = center
    return cx + orbit_radius * math.cos(rad), cy - orbit_radius * math.sin(rad)


def generate_stars(
    count: int = 50, size: int = VIEW_SIZE, seed: int | None = None
) -> tuple[Star, ...]:
    """Scatter decorative background stars over a size x size view.

    Args:
        count: Number of stars.
        size: View width/height in px.
        seed: RNG seed. Pass one to get the same field across reruns.

    Returns:
        Tuple of Star records shared by both views.
    """
    rng = np.random.default_rng(seed)
    xs = rng.random(count) * size
    ys = rng.random(count) * size
    sizes = rng.random(count) * 1.5 + 0.5
    opacities = rng.random(count) * 0.5 + 0.2
    return tuple(
        Star(x=float(x), y=float(y), size=float(s), opacity=float(o))
        for x, y, s, o in zip(xs, ys, sizes, opacities)
    )
