"""Display attributes derived from catalog values: color, size, glow, opacity, labels."""

from skydome.models import Star

DEFAULT_COLOR = "#ffffff"

# Spectral class letter → display color
SPECTRAL_COLORS: dict[str, str] = {
    "M": "#ffaa77",
    "K": "#ffcc88",
    "G": "#ffff88",
    "F": "#ffffff",
    "A": "#aaccff",
    "B": "#88aaff",
}

BELOW_HORIZON_ALPHA = 0.3
LABEL_MAGNITUDE_LIMIT = 2.5


def color_for(spectral_class: str) -> str:
    """Match on the first character of the spectral class; unknown classes are white."""
    if not spectral_class:
        return DEFAULT_COLOR
    return SPECTRAL_COLORS.get(spectral_class[0], DEFAULT_COLOR)


def star_size(magnitude: float) -> float:
    """Core radius in pixels. Brighter (lower magnitude) stars are larger."""
    return max(1.0, 10 - magnitude * 3)


def glow_radius(magnitude: float) -> float:
    return star_size(magnitude) * 2


def alpha_for(altitude: float) -> float:
    return BELOW_HORIZON_ALPHA if altitude < 0 else 1.0


def alpha_hex(alpha: float) -> str:
    """Two-digit hex suffix for a "#rrggbb" color, e.g. 1.0 → "ff"."""
    return f"{round(max(0.0, min(1.0, alpha)) * 255):02x}"


def show_label(star: Star, selected: Star | None = None) -> bool:
    return star.magnitude <= LABEL_MAGNITUDE_LIMIT or star == selected
