import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Union

from gps_smoother.errors import InvalidCoordinateError

Timestamp = Union[datetime, float]


@dataclass(frozen=True)
class Fix:
    """
    One timestamped position sample.

    Only latitude, longitude, altitude and timestamp are used by the filter.
    The remaining fields are carried through to the corrected fix; -1 means
    the receiver did not report the value.
    """
    latitude: float
    longitude: float
    altitude: float = 0.0
    timestamp: Timestamp = 0.0
    horizontal_accuracy: float = -1.0
    vertical_accuracy: float = -1.0
    course: float = -1.0
    course_accuracy: float = -1.0
    speed: float = -1.0
    speed_accuracy: float = -1.0

    @property
    def seconds(self):
        return timestamp_seconds(self.timestamp)

    def with_position(self, latitude, longitude, altitude):
        return replace(self, latitude=float(latitude), longitude=float(longitude), altitude=float(altitude))


def timestamp_seconds(timestamp):
    """POSIX seconds for a datetime (naive values are taken as UTC) or a plain number."""
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.timestamp()
    try:
        seconds = float(timestamp)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(f"Unusable timestamp: {timestamp!r}")
    if not math.isfinite(seconds):
        raise InvalidCoordinateError(f"Unusable timestamp: {timestamp!r}")
    return seconds


def validate_fix(fix):
    """Raise InvalidCoordinateError unless lat/lon/alt are finite and the timestamp is usable."""
    for name in ("latitude", "longitude", "altitude"):
        value = getattr(fix, name)
        try:
            ok = math.isfinite(value)
        except TypeError:
            ok = False
        if not ok:
            raise InvalidCoordinateError(f"{name} must be a finite number, got {value!r}")
    timestamp_seconds(fix.timestamp)
