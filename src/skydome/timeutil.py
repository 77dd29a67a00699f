"""Observer-local wall-clock time → UTC, resolving the timezone from coordinates."""

from datetime import datetime

from pytz import timezone, utc
from timezonefinder import TimezoneFinder

_tf = TimezoneFinder()


class TimezoneLookupError(Exception):
    """No timezone is known for the coordinates."""


def local_to_utc(when: str, latitude: float, longitude: float) -> datetime:
    """Convert a local "YYYY-MM-DD HH:MM" string at the observer's location to UTC.

    Raises:
        ValueError: If ``when`` does not match the format.
        TimezoneLookupError: If no timezone covers the coordinates.
    """
    dt = datetime.strptime(when, "%Y-%m-%d %H:%M")
    tz_str = _tf.timezone_at(lat=latitude, lng=longitude)
    if tz_str is None:
        raise TimezoneLookupError(f"Timezone not found: lat={latitude}, lng={longitude}")
    local_tz = timezone(tz_str)
    return local_tz.localize(dt, is_dst=None).astimezone(utc)
