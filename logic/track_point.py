# logic/track_point.py

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# wie strtod: führende Leerzeichen, längstes numerisches Präfix
_DECIMAL_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

# Datum und Uhrzeit, Rest prüft fromisoformat
_DATE_TIME = re.compile(r"^\d{4}-?\d{2}-?\d{2}[T ]\d{2}", re.IGNORECASE)


@dataclass(frozen=True)
class TrackPoint:
    longitude: float
    latitude: float
    elevation: float
    timestamp: datetime


def to_utc(dt):
    # naive Zeiten gelten als UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_decimal(text):
    """Locale-independent decimal parsing. Returns None if text has no numeric prefix."""
    if text is None:
        return None
    m = _DECIMAL_PREFIX.match(text)
    if not m:
        return None
    return float(m.group(1))


def parse_iso8601(text):
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    A timestamp without zone designator is taken as UTC, which is what GPX
    loggers write. Raises ValueError for anything that is not a full
    date-time, including times that leave the datetime range once shifted
    to UTC.
    """
    text = text.strip()
    if not _DATE_TIME.match(text):
        raise ValueError(f"invalid ISO-8601 time: {text!r}")

    dt = datetime.fromisoformat(re.sub(r"[Zz]$", "+00:00", text))
    try:
        return to_utc(dt)
    except OverflowError as e:
        raise ValueError(f"ISO-8601 time out of range: {text!r}") from e


class TrackPointBuilder:
    def __init__(self):
        self._fields = None
        self._invalid = False
        self._has_time = False

    @property
    def in_progress(self):
        return self._fields is not None

    @property
    def invalid(self):
        return self._invalid

    def begin(self, attributes):
        self.discard()

        if hasattr(attributes, "items"):
            attributes = attributes.items()
        attributes = list(attributes)
        if not attributes:
            logger.warning("Defekte GPX-Datei: trkpt-Element ohne lon/lat-Attribute.")
            return False

        longitude = latitude = None
        for name, value in attributes:
            if name == "lon":
                longitude = parse_decimal(value)
            elif name == "lat":
                latitude = parse_decimal(value)

        if longitude is None or latitude is None:
            logger.warning("Defekte GPX-Datei: lon/lat-Werte für trkpt nicht lesbar.")
            self._invalid = True

        self._fields = {
            "longitude": longitude,
            "latitude": latitude,
            "elevation": 0.0,
            "timestamp": EPOCH,
        }
        return True

    def set_time(self, text):
        try:
            self._fields["timestamp"] = parse_iso8601(text)
            self._has_time = True
        except ValueError:
            self._invalid = True
            logger.warning("Defekte GPX-Datei: ISO-8601-Zeit '%s' für trkpt nicht lesbar.", text)

    def set_elevation(self, text):
        elevation = parse_decimal(text)
        if elevation is None:
            logger.warning("Defekte GPX-Datei: Höhe '%s' ist keine Zahl.", text)
            elevation = 0.0
        self._fields["elevation"] = elevation

    def finish(self):
        fields, invalid, has_time = self._fields, self._invalid, self._has_time
        self.discard()
        if fields is None or invalid:
            return None
        if not has_time:
            logger.warning("Defekte GPX-Datei: trkpt ohne Zeitstempel wird verworfen.")
            return None
        return TrackPoint(**fields)

    def discard(self):
        self._fields = None
        self._invalid = False
        self._has_time = False
