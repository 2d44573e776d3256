"""Plotly chart of illuminated fraction over one orbit.

Marks the 8 phase centres and the current angle.
"""

import numpy as np
import plotly.graph_objects as go

from moonphases.compute import classify_phase, illuminated_fraction, normalize_angle

_BG = "#0f172a"
_CURVE_COLOR = "#a5b4fc"
_MARKER_COLOR = "#fde047"
_GRID_COLOR = "#334155"


def render_fraction_chart(angle: float, lang: str = "en") -> go.Figure:
    """Render illuminated fraction vs. orbital angle with the current angle marked.

    Args:
        angle: Current orbital angle in degrees.
        lang: Language code for the phase names on the x axis.

    Returns:
        Plotly Figure object.
    """
    xs = np.linspace(0, 360, 361)
    ys = (1 - np.cos(np.radians(xs))) / 2

    curve = go.Scatter(
        x=xs,
        y=ys,
        mode="lines",
        line=dict(color=_CURVE_COLOR, width=2),
        hovertemplate="%{x:.0f}°: %{y:.0%}<extra></extra>",
        name="illuminated",
    )

    current = classify_phase(angle, lang)
    marker = go.Scatter(
        x=[normalize_angle(angle)],
        y=[illuminated_fraction(angle)],
        mode="markers",
        marker=dict(size=12, color=_MARKER_COLOR, line=dict(width=0)),
        hovertemplate=f"{current.name}<extra></extra>",
        name="current",
    )

    centres = [i * 45 for i in range(8)]
    tick_text = [classify_phase(c, lang).name for c in centres]

    fig = go.Figure(data=[curve, marker])
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        font=dict(color="#cbd5e1"),
        margin=dict(l=40, r=20, t=20, b=60),
        height=260,
        showlegend=False,
        xaxis=dict(
            range=[0, 360],
            tickvals=centres,
            ticktext=tick_text,
            gridcolor=_GRID_COLOR,
            zeroline=False,
        ),
        yaxis=dict(
            range=[-0.05, 1.05],
            tickformat=".0%",
            gridcolor=_GRID_COLOR,
            zeroline=False,
        ),
    )
    return fig
