from datetime import datetime
from pathlib import Path

import matplotlib
import pytest
from pytz import utc

matplotlib.use("Agg")

from skydome.models import DomeGeometry, Star  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
SAMPLE_CATALOG = ROOT / "data" / "stars.sample.json"

FIXED_INSTANT = datetime(2024, 8, 12, 21, 30, 0, tzinfo=utc)


def make_star(
    name: str = "Test",
    ra: float = 0.0,
    dec: float = 0.0,
    magnitude: float = 1.0,
    distance: float = 100.0,
    age: float = 5.0,
    mass: float = 1.0,
    spectral_class: str = "G2V",
) -> Star:
    return Star(
        id=name.lower(),
        name=name,
        ra=ra,
        dec=dec,
        magnitude=magnitude,
        distance=distance,
        age=age,
        mass=mass,
        spectral_class=spectral_class,
    )


@pytest.fixture
def star_factory():
    return make_star


@pytest.fixture
def dome() -> DomeGeometry:
    # 800x800 canvas: center (400, 400), horizon radius 370
    return DomeGeometry.from_canvas(800, 800)


@pytest.fixture
def instant() -> datetime:
    return FIXED_INSTANT


@pytest.fixture
def sample_catalog_path() -> Path:
    return SAMPLE_CATALOG
