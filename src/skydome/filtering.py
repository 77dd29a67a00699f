"""Catalog filtering by the four inclusive range constraints."""

from typing import Iterable

from skydome.models import Range, Star


def filter_stars(
    catalog: Iterable[Star],
    magnitude: Range,
    distance: Range,
    age: Range,
    mass: Range,
) -> tuple[Star, ...]:
    """Return the stars whose attributes all fall within their ranges.

    Bounds are inclusive. A range with ``min > max`` matches nothing, and a
    star with a non-numeric (NaN) attribute never matches. The catalog is not
    modified and the result keeps catalog order.

    Args:
        catalog: Stars in catalog order.
        magnitude: Apparent magnitude range.
        distance: Distance range (light-years).
        age: Age range (billions of years).
        mass: Mass range (solar masses).

    Returns:
        Tuple of matching stars, a subsequence of ``catalog``.
    """
    ranges = (magnitude, distance, age, mass)
    if any(r.is_empty for r in ranges):
        return ()
    return tuple(
        star
        for star in catalog
        if magnitude.contains(star.magnitude)
        and distance.contains(star.distance)
        and age.contains(star.age)
        and mass.contains(star.mass)
    )
