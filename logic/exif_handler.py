# logic/exif_handler.py

import logging
from datetime import datetime

import piexif
from PIL import Image

logger = logging.getLogger(__name__)

EXIF_IFD_POINTER = 0x8769
TAG_DATETIME = 306
TAG_MODEL = 272
TAG_DATETIME_ORIGINAL = 36867


def _read_exif(img_path):
    with Image.open(img_path) as img:
        exif = img.getexif()
        exif_ifd = exif.get_ifd(EXIF_IFD_POINTER)
        return dict(exif), dict(exif_ifd)


def get_datetime_from_exif(img_path):
    try:
        base, exif_ifd = _read_exif(img_path)
    except OSError as e:
        logger.warning("EXIF von %s nicht lesbar: %s", img_path, e)
        return None

    date_str = exif_ifd.get(TAG_DATETIME_ORIGINAL) or base.get(TAG_DATETIME)  # DateTimeOriginal oder DateTime
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str.strip("\x00 "), "%Y:%m:%d %H:%M:%S")
    except ValueError:
        logger.warning("Ungültiger EXIF-Zeitstempel in %s: %r", img_path, date_str)
        return None


def extract_camera_model(img_path):
    try:
        base, _ = _read_exif(img_path)
    except OSError as e:
        logger.warning("EXIF von %s nicht lesbar: %s", img_path, e)
        return None
    model = base.get(TAG_MODEL)
    return model.strip("\x00 ") if model else None


def has_gps_data(img_path):
    try:
        exif_dict = piexif.load(img_path)
    except (OSError, ValueError) as e:
        logger.warning("EXIF von %s nicht lesbar: %s", img_path, e)
        return False
    return bool(exif_dict.get("GPS", {}).get(piexif.GPSIFD.GPSLatitude))


def deg_to_dms_rational(deg):
    d = int(deg)
    m = int((deg - d) * 60)
    s = int(round(((deg - d) * 60 - m) * 60 * 10000))
    return [(d, 1), (m, 1), (s, 10000)]


def write_gps_to_image(img_path, lat, lon):
    try:
        exif_dict = piexif.load(img_path)
        exif_dict['GPS'] = {
            piexif.GPSIFD.GPSVersionID: (2, 2, 0, 0),
            piexif.GPSIFD.GPSLatitudeRef: 'N' if lat >= 0 else 'S',
            piexif.GPSIFD.GPSLatitude: deg_to_dms_rational(abs(lat)),
            piexif.GPSIFD.GPSLongitudeRef: 'E' if lon >= 0 else 'W',
            piexif.GPSIFD.GPSLongitude: deg_to_dms_rational(abs(lon)),
        }
        exif_bytes = piexif.dump(exif_dict)
        piexif.insert(exif_bytes, img_path)
        return True
    except (OSError, ValueError) as e:
        logger.error("GPS schreiben in %s fehlgeschlagen: %s", img_path, e)
        return False
