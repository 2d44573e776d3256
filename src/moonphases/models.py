"""Data model definitions: explicit boundaries between geometry, render, and export layers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np


class PhaseType(Enum):
    """The 8 named illumination categories, in orbital order."""

    NEW_MOON = "new_moon"
    WAXING_CRESCENT = "waxing_crescent"
    FIRST_QUARTER = "first_quarter"
    WAXING_GIBBOUS = "waxing_gibbous"
    FULL_MOON = "full_moon"
    WANING_GIBBOUS = "waning_gibbous"
    LAST_QUARTER = "last_quarter"
    WANING_CRESCENT = "waning_crescent"


@dataclass(frozen=True)
class PhaseInfo:
    """A classified phase. Strings are already localized."""

    type: PhaseType
    angle: float  # Canonical center angle (0, 45, ..., 315)
    name: str  # Short name ("Full Moon", "満月 (まんげつ)")
    caption: str  # Long caption for the info panel


class PathKind(Enum):
    EMPTY = "empty"  # New moon: nothing lit
    FULL = "full"  # Full moon: closed circle
    PHASE = "phase"  # Outer semicircle + terminator half-ellipse


@dataclass(frozen=True)
class ArcSegment:
    """One SVG elliptical arc command (``A rx ry 0 large_arc sweep x y``)."""

    rx: float
    ry: float
    large_arc: int
    sweep: int  # 1 = clockwise on screen (SVG y axis points down)
    end: tuple[float, float]


@dataclass(frozen=True)
class TerminatorPath:
    """Lit silhouette of the disk, centred at the origin in SVG coordinates.

    The path starts at the top of the disk ``(0, -radius)``. For ``PHASE``
    paths ``arcs[0]`` is the outer semicircle and ``arcs[1]`` the terminator.
    """

    kind: PathKind
    angle_deg: float  # Normalized angle the path was built for
    radius: float
    x_radius: float  # radius * cos(angle); signed
    waxing: bool
    arcs: tuple[ArcSegment, ...]

    @property
    def start(self) -> tuple[float, float]:
        return (0.0, -self.radius)

    @property
    def outer(self) -> ArcSegment | None:
        return self.arcs[0] if self.kind is PathKind.PHASE else None

    @property
    def inner(self) -> ArcSegment | None:
        return self.arcs[1] if self.kind is PathKind.PHASE else None

    def to_svg_path(self) -> str:
        """Return SVG path data. Empty string for the new-moon form."""
        if self.kind is PathKind.EMPTY:
            return ""
        x0, y0 = self.start
        parts = [f"M {_fmt(x0)} {_fmt(y0)}"]
        for arc in self.arcs:
            ex, ey = arc.end
            parts.append(
                f"A {_fmt(arc.rx)} {_fmt(arc.ry)} 0 {arc.large_arc} {arc.sweep}"
                f" {_fmt(ex)} {_fmt(ey)}"
            )
        parts.append("Z")
        return " ".join(parts)

    def to_polygon(self, samples: int = 64) -> np.ndarray:
        """Sample the closed path into an (N, 2) vertex array.

        Both arcs of every form are half-ellipses centred on the origin, so the
        sweep flag only decides which side (x sign) each half lies on.

        Args:
            samples: Vertices per arc.

        Returns:
            Array of (x, y) points in SVG coordinates; shape (0, 2) when empty.
        """
        if self.kind is PathKind.EMPTY:
            return np.empty((0, 2))
        r = self.radius
        t = np.linspace(0.0, math.pi, samples)
        if self.kind is PathKind.FULL:
            right = np.column_stack((r * np.sin(t), -r * np.cos(t)))
            left = np.column_stack((-r * np.sin(t), r * np.cos(t)))
            return np.vstack((right, left[1:-1]))

        outer, inner = self.arcs
        # Outer arc runs top -> bottom; sweep 1 passes through the right side.
        side = 1.0 if outer.sweep == 1 else -1.0
        outer_pts = np.column_stack((side * r * np.sin(t), -r * np.cos(t)))
        # Inner arc runs bottom -> top; sweep 1 passes through the left side.
        side = -1.0 if inner.sweep == 1 else 1.0
        inner_pts = np.column_stack((side * inner.rx * np.sin(t), r * np.cos(t)))
        return np.vstack((outer_pts, inner_pts[1:-1]))


@dataclass(frozen=True)
class Star:
    """A decorative background star in view pixel coordinates."""

    x: float
    y: float
    size: float  # Circle radius in px
    opacity: float


@dataclass(frozen=True)
class ExportSettings:
    """Fixed parameters of the animated export."""

    total_frames: int = 60
    frame_delay_ms: int = 100  # 10 fps
    width: int = 800
    height: int = 400
    filename: str = "moon-phases.gif"


def _fmt(value: float) -> str:
    """Compact number formatting for path data ("100", "70.7107")."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
