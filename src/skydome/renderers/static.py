"""Matplotlib static PNG renderer."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from skydome.appearance import alpha_hex
from skydome.models import FrameGeometry

_ROOT = Path(__file__).parent.parent.parent.parent

_BG = "#000511"
_DOME_FILL = "#001133"
_HORIZON_COLOR = "#444444"
_AXIS_COLOR = "#666666"
_RING_COLOR = "#333333"
_COMPASS_COLOR = "#cccccc"
_SELECTION_COLOR = "#ffd700"

_COMPASS_OFFSET = 20
_ALT_RINGS = (0.33, 0.67)


def _draw_dome(ax, frame: FrameGeometry) -> None:
    dome = frame.dome
    cx, cy, r = dome.center_x, dome.center_y, dome.radius
    ax.add_patch(Circle((cx, cy), r, color=_DOME_FILL, fill=True, zorder=0))
    ax.add_patch(Circle((cx, cy), r, edgecolor=_HORIZON_COLOR, fill=False, linewidth=2))
    for factor in _ALT_RINGS:
        ax.add_patch(
            Circle((cx, cy), r * factor, edgecolor=_RING_COLOR, fill=False, linewidth=1)
        )
    ax.plot([cx, cx], [cy - r, cy + r], color=_AXIS_COLOR, linewidth=1, zorder=1)
    ax.plot([cx - r, cx + r], [cy, cy], color=_AXIS_COLOR, linewidth=1, zorder=1)

    # Pixel coordinates, y grows downward: North at the top
    offset = r + _COMPASS_OFFSET
    for label, dx, dy in (("N", 0, -offset), ("S", 0, offset), ("E", offset, 0), ("W", -offset, 0)):
        ax.text(
            cx + dx, cy + dy, label, color=_COMPASS_COLOR, fontsize=12,
            ha="center", va="center",
        )


def render_static_chart(frame: FrameGeometry, width: int = 800, height: int = 800, dpi: int = 100) -> Figure:
    """Render a FrameGeometry as a static matplotlib image.

    Args:
        frame: Fully computed frame.
        width: Canvas width in pixels (the frame's dome lives in this space).
        height: Canvas height in pixels.
        dpi: Output resolution.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
    fig.patch.set_facecolor(_BG)
    ax.set_facecolor(_BG)
    fig.subplots_adjust(left=0, right=1, top=1, bottom=0)

    _draw_dome(ax, frame)

    if frame.stars:
        x_vals = np.array([s.x for s in frame.stars])
        y_vals = np.array([s.y for s in frame.stars])
        # scatter sizes are in points², star sizes are radii in pixels
        px_to_pt = 72 / dpi
        core = (np.array([s.size for s in frame.stars]) * px_to_pt) ** 2 * np.pi
        glow = (np.array([s.glow_radius for s in frame.stars]) * px_to_pt) ** 2 * np.pi
        core_colors = [s.color + alpha_hex(s.alpha) for s in frame.stars]
        glow_colors = [s.color + alpha_hex(s.alpha * 0.25) for s in frame.stars]

        ax.scatter(x_vals, y_vals, s=glow, c=glow_colors, marker="o", linewidths=0, zorder=2)
        ax.scatter(x_vals, y_vals, s=core, c=core_colors, marker="o", linewidths=0, zorder=3)

    for s in frame.stars:
        if s.show_label:
            ax.text(
                s.x + s.size + 6, s.y, s.star.name,
                color="white", alpha=min(s.alpha * 0.9, 0.9), fontsize=8,
                ha="left", va="center", zorder=4,
            )

    if frame.selected is not None:
        sel = frame.selected
        ax.add_patch(Circle((sel.x, sel.y), 25, edgecolor=_SELECTION_COLOR, fill=False, linewidth=3, zorder=5))
        ax.add_patch(
            Circle((sel.x, sel.y), 35, edgecolor=_SELECTION_COLOR, fill=False, linewidth=1, alpha=0.5, zorder=5)
        )

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_aspect("equal")
    ax.axis("off")

    return fig


def save_static_chart(
    frame: FrameGeometry,
    output_path: Path | None = None,
    width: int = 800,
    height: int = 800,
) -> Path:
    """Save a FrameGeometry as a PNG file.

    Args:
        frame: Fully computed frame.
        output_path: Destination path. Auto-generated under results/ if None.
        width: Canvas width in pixels.
        height: Canvas height in pixels.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        obs = frame.observer
        when_str = frame.instant.strftime("%Y_%m_%d_%H_%M")
        filename = f"sky_{obs.latitude:.2f}_{obs.longitude:.2f}__{when_str}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(frame, width=width, height=height)
    fig.savefig(output_path, facecolor=_BG)
    plt.close(fig)
    return output_path
