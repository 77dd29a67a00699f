"""Plotly 2D interactive star chart renderer.

Draws the dome in the same pixel space the frame was projected into, so
hover points line up with SelectionIndex hits. Wheel zoom and drag panning
are enabled.
"""

import numpy as np
import plotly.graph_objects as go

from skydome.models import FrameGeometry

_BG = "#000511"
_HORIZON_COLOR = "#444444"
_SELECTION_COLOR = "#ffd700"


def render_plotly_chart(frame: FrameGeometry, width: int = 800, height: int = 800) -> go.Figure:
    """Render a FrameGeometry as a Plotly 2D interactive star chart.

    Below-horizon stars are drawn with reduced opacity. Hovering a star shows
    its name, spectral class, magnitude and altitude/azimuth.

    Args:
        frame: Fully computed frame.
        width: Canvas width in pixels.
        height: Canvas height in pixels.

    Returns:
        Plotly Figure object.
    """
    stars = frame.stars
    sizes = np.array([s.size for s in stars]) * 2  # marker size is a diameter

    star_trace = go.Scatter(
        x=[s.x for s in stars],
        y=[s.y for s in stars],
        mode="markers",
        marker=dict(
            size=list(sizes),
            color=[s.color for s in stars],
            opacity=[s.alpha for s in stars],
            line=dict(width=0),
        ),
        text=[
            f"{s.star.name} ({s.star.spectral_class})<br>"
            f"mag {s.star.magnitude:.2f}<br>"
            f"alt {s.altitude:.1f}° az {s.azimuth:.1f}°"
            for s in stars
        ],
        customdata=[s.star.id for s in stars],
        hoverinfo="text",
        name="stars",
    )
    data = [star_trace]
    if frame.selected is not None:
        sel = frame.selected
        data.append(
            go.Scatter(
                x=[sel.x],
                y=[sel.y],
                mode="markers",
                marker=dict(
                    size=50,
                    color="rgba(0,0,0,0)",
                    line=dict(color=_SELECTION_COLOR, width=3),
                ),
                hoverinfo="skip",
                name="selection",
            )
        )

    dome = frame.dome
    fig = go.Figure(data=data)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=width,
        height=height,
        dragmode="pan",
        xaxis=dict(visible=False, range=[0, width], autorange=False, fixedrange=False),
        # Pixel space: y grows downward
        yaxis=dict(
            visible=False,
            range=[height, 0],
            autorange=False,
            fixedrange=False,
            scaleanchor="x",
        ),
        shapes=[
            dict(
                type="circle",
                xref="x",
                yref="y",
                x0=dome.center_x - dome.radius,
                y0=dome.center_y - dome.radius,
                x1=dome.center_x + dome.radius,
                y1=dome.center_y + dome.radius,
                line=dict(color=_HORIZON_COLOR, width=2),
                fillcolor="rgba(0,17,51,0.6)",
                layer="below",
            )
        ],
    )

    fig._config = {"scrollZoom": True, "displayModeBar": False}  # type: ignore[attr-defined]

    return fig
