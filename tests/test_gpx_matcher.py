from datetime import datetime, timedelta, timezone

import pytest

from conftest import point_at, utc
from logic.errors import BufferUnavailable, InsufficientTrackPoints, XmlSyntaxError
from logic.gpx_matcher import Location, load_gpx_track, locate
from logic.gpx_parser import GpxTrack


A = (10.0, 50.0)
B = (11.0, 51.0)


@pytest.fixture
def two_points():
    return GpxTrack([point_at(100, *A), point_at(200, *B)])


def at(seconds):
    return datetime.fromtimestamp(seconds, timezone.utc)


# ============================================================================
# locate
# ============================================================================

def test_locate_between_points(two_points):
    assert locate(two_points, at(150)) == Location(A[0], A[1], True)


def test_locate_first_timestamp_counts_as_outside(two_points):
    assert locate(two_points, at(100)) == Location(A[0], A[1], False)


def test_locate_before_track(two_points):
    assert locate(two_points, at(50)) == Location(A[0], A[1], False)


def test_locate_after_track(two_points):
    assert locate(two_points, at(250)) == Location(B[0], B[1], False)


def test_locate_last_timestamp_returns_preceding_sample(two_points):
    assert locate(two_points, at(200)) == Location(A[0], A[1], True)


def test_locate_nearest_preceding_sample():
    track = GpxTrack([
        point_at(100, 1.0, 1.0),
        point_at(200, 2.0, 2.0),
        point_at(300, 3.0, 3.0),
    ])
    assert locate(track, at(250)) == Location(2.0, 2.0, True)
    assert locate(track, at(299)) == Location(2.0, 2.0, True)
    # genau auf einem inneren Punkt gewinnt der vorherige Abschnitt
    assert locate(track, at(200)) == Location(1.0, 1.0, True)
    assert locate(track, at(301)) == Location(3.0, 3.0, False)


def test_locate_compares_whole_seconds(two_points):
    query = at(100) + timedelta(milliseconds=500)
    assert locate(two_points, query).matched is False
    assert locate(two_points, query + timedelta(seconds=1)).matched is True


def test_locate_naive_timestamp_is_utc(two_points):
    naive = datetime(1970, 1, 1, 0, 2, 30)  # 150 s
    assert locate(two_points, naive) == Location(A[0], A[1], True)


def test_locate_aware_timestamp_in_other_zone(two_points):
    berlin = timezone(timedelta(hours=1))
    assert locate(two_points, datetime(1970, 1, 1, 1, 2, 30, tzinfo=berlin)).matched


def test_locate_plain_sequence():
    points = [point_at(100, *A), point_at(200, *B)]
    assert locate(points, at(150)) == Location(A[0], A[1], True)


@pytest.mark.parametrize("points", [[], [point_at(100, *A)]])
def test_locate_insufficient_points(points):
    with pytest.raises(InsufficientTrackPoints):
        locate(GpxTrack(points), at(100))


def test_locate_destroyed_track(two_points):
    two_points.close()
    with pytest.raises(ValueError):
        locate(two_points, at(150))


def test_locate_on_real_track(sample_gpx_file):
    track = load_gpx_track(sample_gpx_file)

    location = locate(track, utc(2011, 6, 5, 12, 15))
    assert location == Location(13.406, 52.521, True)

    assert locate(track, utc(2011, 6, 5, 13, 0)) == Location(13.407, 52.522, False)


# ============================================================================
# load_gpx_track
# ============================================================================

def test_load_gpx_track(sample_gpx_file):
    assert len(load_gpx_track(sample_gpx_file)) == 3


def test_load_missing_file(tmp_path):
    with pytest.raises(BufferUnavailable):
        load_gpx_track(str(tmp_path / "fehlt.gpx"))


def test_load_directory(tmp_path):
    with pytest.raises(BufferUnavailable):
        load_gpx_track(str(tmp_path))


def test_load_broken_file(tmp_path):
    path = tmp_path / "kaputt.gpx"
    path.write_text("<gpx><trk><trkseg></trk></gpx>", encoding="utf-8")
    with pytest.raises(XmlSyntaxError):
        load_gpx_track(str(path))
