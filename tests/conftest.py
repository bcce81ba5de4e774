"""
Shared fixtures: GPX documents and JPEG files with EXIF data.
"""

from datetime import datetime, timezone

import piexif
import pytest
from PIL import Image

from logic.track_point import TrackPoint


GPX_11_TEMPLATE = '''<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Testtrack</name>
    <trkseg>
{points}
    </trkseg>
  </trk>
</gpx>'''


def trkpt(lat=None, lon=None, time=None, ele=None):
    attrs = ""
    if lat is not None:
        attrs += f' lat="{lat}"'
    if lon is not None:
        attrs += f' lon="{lon}"'
    children = ""
    if ele is not None:
        children += f"<ele>{ele}</ele>"
    if time is not None:
        children += f"<time>{time}</time>"
    return f"      <trkpt{attrs}>{children}</trkpt>"


def gpx_document(*points):
    return GPX_11_TEMPLATE.format(points="\n".join(points)).encode("utf-8")


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def point_at(seconds, lon, lat, ele=0.0):
    return TrackPoint(lon, lat, ele, datetime.fromtimestamp(seconds, timezone.utc))


@pytest.fixture
def sample_gpx():
    """Three valid points ten minutes apart on 2011-06-05."""
    return gpx_document(
        trkpt(lat="52.5200", lon="13.4050", time="2011-06-05T12:00:00Z", ele="34.5"),
        trkpt(lat="52.5210", lon="13.4060", time="2011-06-05T12:10:00Z"),
        trkpt(lat="52.5220", lon="13.4070", time="2011-06-05T12:20:00Z", ele="36"),
    )


@pytest.fixture
def sample_gpx_file(tmp_path, sample_gpx):
    path = tmp_path / "track.gpx"
    path.write_bytes(sample_gpx)
    return str(path)


@pytest.fixture
def make_jpeg(tmp_path):
    """Factory creating a small JPEG with optional camera model, capture time and GPS."""

    def _make(name, model=None, taken=None, gps=None):
        exif = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}, "thumbnail": None}
        if model:
            exif["0th"][piexif.ImageIFD.Model] = model.encode("ascii")
        if taken:
            exif["Exif"][piexif.ExifIFD.DateTimeOriginal] = taken.strftime("%Y:%m:%d %H:%M:%S").encode("ascii")
        if gps:
            lat, lon = gps
            exif["GPS"] = {
                piexif.GPSIFD.GPSLatitudeRef: "N",
                piexif.GPSIFD.GPSLatitude: [(int(lat), 1), (0, 1), (0, 1)],
                piexif.GPSIFD.GPSLongitudeRef: "E",
                piexif.GPSIFD.GPSLongitude: [(int(lon), 1), (0, 1), (0, 1)],
            }
        path = tmp_path / name
        Image.new("RGB", (16, 16), "white").save(str(path), "JPEG", exif=piexif.dump(exif))
        return str(path)

    return _make
