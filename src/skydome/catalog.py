"""Catalog ingestion of JSON star records, validated before they reach the pipeline."""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from skydome.models import Star

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("ra", "dec", "magnitude", "distance", "age", "mass")


class CatalogError(Exception):
    """Catalog file cannot be read or is not a list of records."""


class MalformedStarError(ValueError):
    """A single star record is missing a field or has an out-of-domain value."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


@dataclass(frozen=True)
class RejectedRecord:
    index: int  # Position in the source array
    name: str
    reason: str


@dataclass(frozen=True)
class CatalogReport:
    stars: tuple[Star, ...]
    rejected: tuple[RejectedRecord, ...]


def _number(raw: Mapping[str, Any], field: str) -> float:
    if field not in raw:
        raise MalformedStarError(field, "missing")
    value = raw[field]
    # bool is an int subclass; "true" is not a magnitude
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedStarError(field, f"not a number: {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise MalformedStarError(field, f"not finite: {value!r}")
    return value


def parse_star(raw: Mapping[str, Any]) -> Star:
    """Validate one catalog mapping and build a Star.

    Raises:
        MalformedStarError: On a missing, non-numeric or out-of-domain field.
    """
    values = {field: _number(raw, field) for field in _NUMERIC_FIELDS}

    if not 0 <= values["ra"] < 360:
        raise MalformedStarError("ra", f"outside [0, 360): {values['ra']}")
    if not -90 <= values["dec"] <= 90:
        raise MalformedStarError("dec", f"outside [-90, 90]: {values['dec']}")
    if values["distance"] < 0:
        raise MalformedStarError("distance", f"negative: {values['distance']}")
    if values["age"] < 0:
        raise MalformedStarError("age", f"negative: {values['age']}")
    if values["mass"] <= 0:
        raise MalformedStarError("mass", f"not positive: {values['mass']}")

    spectral = raw.get("spectral_class", raw.get("spectralClass"))
    if not isinstance(spectral, str) or not spectral.strip():
        raise MalformedStarError("spectral_class", f"empty or missing: {spectral!r}")

    return Star.from_dict({**raw, **values, "spectral_class": spectral.strip()})


def parse_catalog(records: Iterable[Mapping[str, Any]]) -> CatalogReport:
    """Validate records in order, skipping malformed ones with a warning."""
    stars: list[Star] = []
    rejected: list[RejectedRecord] = []
    for index, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            rejected.append(RejectedRecord(index, "", "record is not an object"))
            logger.warning("Skipping catalog record %d: not an object", index)
            continue
        try:
            stars.append(parse_star(raw))
        except MalformedStarError as exc:
            name = str(raw.get("name", ""))
            rejected.append(RejectedRecord(index, name, str(exc)))
            logger.warning("Skipping catalog record %d (%s): %s", index, name, exc)

    logger.info("Loaded %d stars, rejected %d", len(stars), len(rejected))
    return CatalogReport(stars=tuple(stars), rejected=tuple(rejected))


def load_catalog(path: Path) -> CatalogReport:
    """Read a JSON array of star records from ``path``.

    Raises:
        CatalogError: If the file is unreadable, not JSON, or not an array.
    """
    try:
        with path.open(encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc

    # Accept {"stars": [...]} as well as a bare array
    if isinstance(payload, dict):
        payload = payload.get("stars")
    if not isinstance(payload, list):
        raise CatalogError(f"Catalog {path} is not a list of star records")
    return parse_catalog(payload)
