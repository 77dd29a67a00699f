"""Pointer hit-testing against projected star positions."""

import math
from typing import Iterable

from skydome.appearance import glow_radius
from skydome.models import ProjectedStar, Star

# Faint stars stay selectable
MIN_HIT_RADIUS = 12.0

# Extra tolerance for coarse pointers (touch)
TOUCH_HIT_PADDING = 8.0


def hit_radius(magnitude: float) -> float:
    """Hit radius in pixels: the star's glow radius, never below MIN_HIT_RADIUS."""
    return max(glow_radius(magnitude), MIN_HIT_RADIUS)


def find_at(
    point: tuple[float, float],
    projected: Iterable[ProjectedStar],
    hit_radius_override: float | None = None,
    padding: float = 0.0,
) -> Star | None:
    """Return the first projected star whose hit circle covers ``point``.

    This is first-match, not nearest-match: when hit circles overlap, the star
    earlier in ``projected`` wins even if a later one is closer.

    Args:
        point: Pointer (x, y) in pixels.
        projected: Projected stars in iteration order.
        hit_radius_override: Radius used for every star instead of its own.
        padding: Added to the radius, e.g. TOUCH_HIT_PADDING for touch input.

    Returns:
        The matching star, or None if the point is outside every hit circle.
    """
    px, py = point
    for p in projected:
        radius = p.hit_radius if hit_radius_override is None else hit_radius_override
        if math.hypot(px - p.x, py - p.y) <= radius + padding:
            return p.star
    return None


def is_over_star(point: tuple[float, float], projected: Iterable[ProjectedStar]) -> bool:
    """Hover test for pointer feedback."""
    return find_at(point, projected) is not None
