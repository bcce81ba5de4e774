# logic/gpx_matcher.py

import calendar
import logging
from typing import NamedTuple

from logic.errors import BufferUnavailable, InsufficientTrackPoints, ResolverError
from logic.gpx_parser import GpxTrack, parse
from logic.track_point import to_utc

logger = logging.getLogger(__name__)


class Location(NamedTuple):
    longitude: float
    latitude: float
    matched: bool


def load_gpx_track(gpx_file):
    try:
        with open(gpx_file, 'rb') as f:
            buffer = f.read()
    except OSError as e:
        logger.error("GPX-Datei %s nicht lesbar: %s", gpx_file, e)
        raise BufferUnavailable(f"GPX-Datei nicht lesbar: {gpx_file}") from e
    return parse(buffer)


def _seconds(dt):
    # verglichen wird sekundengenau
    return calendar.timegm(to_utc(dt).utctimetuple())


def locate(track, timestamp):
    """Find where the track was at `timestamp`.

    Returns the coordinates of the last fix at or before the timestamp with
    matched=True. Outside the recorded time range the closest end point is
    returned with matched=False; a timestamp equal to the first fix also
    counts as outside.
    """
    points = track.points if isinstance(track, GpxTrack) else track
    if len(points) < 2:
        raise InsufficientTrackPoints(
            f"Mindestens 2 Trackpunkte nötig, vorhanden: {len(points)}"
        )

    query = _seconds(timestamp)
    last = len(points) - 1

    for i, point in enumerate(points):
        current = _seconds(point.timestamp)
        logger.debug("Vergleiche %d mit %d (Differenz = %d)", query, current, query - current)

        # außerhalb des Zeitbereichs: nächsten Punkt liefern, aber kein Treffer
        if (i == last and query >= current) or query <= current:
            return Location(point.longitude, point.latitude, False)

        if current <= query <= _seconds(points[i + 1].timestamp):
            return Location(point.longitude, point.latitude, True)

    raise ResolverError(f"Kein Trackpunkt für {timestamp} gefunden")
