"""Astronomy computation layer — sidereal time, equatorial → horizontal, and dome projection."""

import math
from datetime import datetime

from pytz import utc

from skydome.models import (
    DomeGeometry,
    HorizontalCoords,
    Observer,
    ProjectedStar,
    Star,
)
from skydome.selection import hit_radius

J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=utc)
SECONDS_PER_DAY = 86400.0

# Points farther than this many horizon radii from the center are not drawn
RENDER_CUTOFF = 1.5

# Below this, cos(lat)·cos(alt) is treated as zero (pole observer or zenith/nadir star)
_DEGENERATE_EPS = 1e-12


class InvalidCoordinateError(ValueError):
    """Non-finite input to the coordinate pipeline."""


def _wrap_degrees(value: float) -> float:
    """True modulo 360, strictly within [0, 360)."""
    wrapped = value % 360.0
    # Tiny negative operands round up to exactly 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def to_utc(instant: datetime) -> datetime:
    """Return ``instant`` as an aware UTC datetime. Naive values are taken as UTC."""
    if instant.tzinfo is None:
        return utc.localize(instant)
    return instant.astimezone(utc)


def days_since_j2000(instant: datetime) -> float:
    """Continuous (fractional, possibly negative) days between ``instant`` and J2000.0."""
    return (to_utc(instant) - J2000).total_seconds() / SECONDS_PER_DAY


def local_sidereal_time(instant: datetime, longitude: float) -> float:
    """Local sidereal time in degrees for a UTC instant and observer longitude.

    Args:
        instant: The moment of observation. Naive datetimes are treated as UTC.
        longitude: Observer longitude, east positive. Any real value is accepted;
            [-180, 180] and [0, 360) conventions give the same result.

    Returns:
        LST in degrees, in [0, 360).

    Raises:
        InvalidCoordinateError: If the longitude is not finite.
    """
    if not math.isfinite(longitude):
        raise InvalidCoordinateError(f"longitude is not finite: {longitude!r}")

    t = to_utc(instant)
    days = days_since_j2000(t)
    gst0 = _wrap_degrees(280.46061837 + 360.98564736629 * days)
    hours = t.hour + t.minute / 60 + t.second / 3600
    gst = _wrap_degrees(gst0 + 15.04107 * hours)
    return _wrap_degrees(gst + longitude)


def equatorial_to_horizontal(
    ra: float, dec: float, lst: float, latitude: float
) -> HorizontalCoords:
    """Convert equatorial coordinates to altitude/azimuth for an observer.

    Azimuth is measured from North through East. When the azimuth is undefined
    (observer at a pole, or the star exactly at zenith or nadir) it is 0.0.

    Raises:
        InvalidCoordinateError: If any input is not finite.
    """
    for label, value in (("ra", ra), ("dec", dec), ("lst", lst), ("latitude", latitude)):
        if not math.isfinite(value):
            raise InvalidCoordinateError(f"{label} is not finite: {value!r}")

    hour_angle = _wrap_degrees(lst - ra + 360.0)
    h = math.radians(hour_angle)
    dec_rad = math.radians(dec)
    lat_rad = math.radians(latitude)

    sin_alt = math.sin(dec_rad) * math.sin(lat_rad) + math.cos(dec_rad) * math.cos(
        lat_rad
    ) * math.cos(h)
    sin_alt = max(-1.0, min(1.0, sin_alt))
    alt_rad = math.asin(sin_alt)
    altitude = math.degrees(alt_rad)

    denominator = math.cos(lat_rad) * math.cos(alt_rad)
    if abs(denominator) < _DEGENERATE_EPS:
        return HorizontalCoords(altitude=altitude, azimuth=0.0)

    cos_az = (math.sin(dec_rad) - math.sin(lat_rad) * sin_alt) / denominator
    azimuth = math.degrees(math.acos(max(-1.0, min(1.0, cos_az))))
    # acos is two-fold ambiguous; a western hour angle puts the star in the west
    if math.sin(h) >= 0:
        azimuth = 360.0 - azimuth

    return HorizontalCoords(altitude=altitude, azimuth=azimuth)


def project(altitude: float, azimuth: float, dome: DomeGeometry) -> tuple[float, float]:
    """Map altitude/azimuth onto the dome disk.

    Zenith lands on the center, the horizon on the rim. Negative altitudes use
    the same linear mapping and fall outside the rim. North is at the top.
    """
    radius = dome.radius * (1 - altitude / 90)
    angle = math.radians(azimuth) - math.pi / 2
    x = dome.center_x + radius * math.cos(angle)
    y = dome.center_y + radius * math.sin(angle)
    return x, y


def project_star(
    star: Star, observer: Observer, lst: float, dome: DomeGeometry
) -> tuple[ProjectedStar, HorizontalCoords]:
    """Transform and project a single star for one frame.

    Returns:
        The projected star and the horizontal coordinates it was built from.
    """
    coords = equatorial_to_horizontal(star.ra, star.dec, lst, observer.latitude)
    x, y = project(coords.altitude, coords.azimuth, dome)
    projected = ProjectedStar(
        star=star,
        x=x,
        y=y,
        hit_radius=hit_radius(star.magnitude),
        altitude=coords.altitude,
    )
    return projected, coords


def star_position(
    star: Star, observer: Observer, instant: datetime, dome: DomeGeometry
) -> ProjectedStar:
    """Convenience wrapper: project one star at an explicit instant."""
    lst = local_sidereal_time(instant, observer.longitude)
    projected, _ = project_star(star, observer, lst, dome)
    return projected
