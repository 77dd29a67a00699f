"""Data model definitions — explicit boundaries between catalog, compute, and render layers."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(frozen=True)
class Star:
    """A single catalog entry. Read-mostly; never mutated by the engine."""

    id: str  # Catalog identity
    name: str  # Display name ("Vega", "Betelgeuse", ...)
    ra: float  # Right ascension (degrees, [0, 360))
    dec: float  # Declination (degrees, [-90, 90])
    magnitude: float  # Apparent magnitude (lower = brighter)
    distance: float  # Light-years
    age: float  # Billions of years
    mass: float  # Solar masses
    spectral_class: str  # First character is the classification letter

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Star":
        """Build a Star from a catalog mapping without validating it.

        Accepts both ``spectralClass`` and ``spectral_class`` keys.
        """
        spectral = raw.get("spectral_class", raw.get("spectralClass", ""))
        return cls(
            id=str(raw.get("id", raw.get("name", ""))),
            name=str(raw.get("name", "")),
            ra=raw["ra"],
            dec=raw["dec"],
            magnitude=raw["magnitude"],
            distance=raw["distance"],
            age=raw["age"],
            mass=raw["mass"],
            spectral_class=str(spectral),
        )


@dataclass(frozen=True)
class Observer:
    """Observer location on Earth."""

    latitude: float  # Decimal degrees, [-90, 90]
    longitude: float  # Decimal degrees, east positive

    def normalized(self) -> "Observer":
        """Return the same location with longitude folded into [-180, 180)."""
        lng = (self.longitude + 180.0) % 360.0 - 180.0
        return Observer(latitude=self.latitude, longitude=lng)


@dataclass(frozen=True)
class Range:
    """Inclusive numeric interval. ``min > max`` matches nothing."""

    min: float
    max: float

    @property
    def is_empty(self) -> bool:
        return not self.min <= self.max

    def contains(self, value: float) -> bool:
        # NaN fails both comparisons, so malformed values never match
        return self.min <= value <= self.max


@dataclass(frozen=True)
class RangeFilter:
    """The four independent range constraints applied to the catalog."""

    magnitude: Range = Range(-2.0, 6.0)
    distance: Range = Range(0.0, 3000.0)
    age: Range = Range(0.0, 15.0)
    mass: Range = Range(0.1, 50.0)

    def apply(self, catalog) -> tuple[Star, ...]:
        from skydome.filtering import filter_stars

        return filter_stars(catalog, self.magnitude, self.distance, self.age, self.mass)


@dataclass(frozen=True)
class HorizontalCoords:
    altitude: float  # Degrees, [-90, 90]
    azimuth: float  # Degrees, [0, 360], 0 = North


@dataclass(frozen=True)
class DomeGeometry:
    """Sky dome disk on the drawing surface. Center = zenith, rim = horizon."""

    center_x: float
    center_y: float
    radius: float  # Horizon radius (pixels)

    @classmethod
    def from_canvas(cls, width: float, height: float, margin: float = 30.0) -> "DomeGeometry":
        return cls(
            center_x=width / 2,
            center_y=height / 2,
            radius=min(width, height) / 2 - margin,
        )

    def distance_from_center(self, x: float, y: float) -> float:
        return math.hypot(x - self.center_x, y - self.center_y)

    def contains(self, x: float, y: float, factor: float = 1.0) -> bool:
        """True if (x, y) lies within ``factor`` horizon radii of the center."""
        return self.distance_from_center(x, y) <= self.radius * factor


@dataclass(frozen=True)
class ProjectedStar:
    """Per-frame screen position of a star. Created fresh each pass, never mutated."""

    star: Star
    x: float
    y: float
    hit_radius: float  # Pixels
    altitude: float  # Degrees; negative = below horizon (dimmed)


@dataclass(frozen=True)
class StarGeometry:
    """Everything a renderer needs to draw one visible star."""

    star: Star
    x: float
    y: float
    altitude: float
    azimuth: float
    color: str  # "#rrggbb" from the spectral class table
    alpha: float  # 1.0 above horizon, dimmed below
    size: float  # Core radius (pixels)
    glow_radius: float  # Glow radius (pixels)
    show_label: bool


@dataclass(frozen=True)
class FrameGeometry:
    """The sole input to renderers and hit-testing. Fully computed per pass."""

    instant: datetime  # UTC instant the frame was computed for
    observer: Observer
    dome: DomeGeometry
    lst: float  # Local sidereal time (degrees)
    stars: tuple[StarGeometry, ...]  # Drawable stars, catalog order
    projected: tuple[ProjectedStar, ...]  # Same stars, for hit-testing
    visible_count: int  # Stars passing the range filter
    total_count: int  # Catalog size
    selected: StarGeometry | None = None
