"""Runtime settings read from the environment (and a local .env file)."""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv


class ConfigError(Exception):
    """An environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    latitude: float = 59.3293  # Stockholm
    longitude: float = 18.0686
    canvas_width: int = 800
    canvas_height: int = 800
    log_level: str = "INFO"


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def load_settings(dotenv: bool = True) -> Settings:
    """Build Settings from SKYDOME_* environment variables.

    Args:
        dotenv: Load a .env file found from the working directory first
            (existing variables win).

    Raises:
        ConfigError: On non-numeric or out-of-range values.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    defaults = Settings()
    latitude = _float_env("SKYDOME_LATITUDE", defaults.latitude)
    if not -90 <= latitude <= 90:
        raise ConfigError(f"SKYDOME_LATITUDE must be within [-90, 90], got {latitude}")
    longitude = _float_env("SKYDOME_LONGITUDE", defaults.longitude)
    if not -180 <= longitude < 360:
        raise ConfigError(
            f"SKYDOME_LONGITUDE must be within [-180, 360), got {longitude}"
        )

    return Settings(
        latitude=latitude,
        longitude=longitude,
        canvas_width=_int_env("SKYDOME_CANVAS_WIDTH", defaults.canvas_width),
        canvas_height=_int_env("SKYDOME_CANVAS_HEIGHT", defaults.canvas_height),
        log_level=os.environ.get("SKYDOME_LOG_LEVEL", defaults.log_level).upper(),
    )
