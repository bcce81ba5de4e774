# logic/geotagger.py

import logging
import os
from collections import defaultdict
from dataclasses import dataclass
from datetime import timedelta

from logic.config import IMAGE_EXTENSIONS
from logic.errors import InsufficientTrackPoints
from logic.exif_handler import (
    extract_camera_model,
    get_datetime_from_exif,
    has_gps_data,
    write_gps_to_image,
)
from logic.gpx_matcher import locate

logger = logging.getLogger(__name__)

UNKNOWN_CAMERA = "Unbekannte Kamera"


@dataclass
class TagResult:
    tagged: int = 0
    unmatched: int = 0
    failed: int = 0
    cancelled: bool = False


def find_untagged_images(image_folder):
    # Kamera → Liste aller zugehörigen Bilder ohne GPS
    camera_images = defaultdict(list)
    for filename in sorted(os.listdir(image_folder)):
        if not filename.lower().endswith(IMAGE_EXTENSIONS):
            continue
        full_path = os.path.join(image_folder, filename)
        if has_gps_data(full_path):
            continue
        model = extract_camera_model(full_path) or UNKNOWN_CAMERA
        camera_images[model].append(full_path)
    return dict(camera_images)


def locate_image(track, img_path, offset=timedelta()):
    timestamp = get_datetime_from_exif(img_path)
    if not timestamp:
        return None
    return locate(track, timestamp + offset)


def tag_images(track, camera_images, offsets, progress=None):
    """Write GPS coordinates into every image whose corrected time lies on the track.

    `offsets` maps camera model to the timedelta added to its EXIF time.
    `progress(current, total)` is called before each image; returning False
    cancels the run.
    """
    if len(track) < 2:
        raise InsufficientTrackPoints(f"Mindestens 2 Trackpunkte nötig, vorhanden: {len(track)}")

    result = TagResult()
    total = sum(len(images) for images in camera_images.values())
    current = 0

    for model, image_list in camera_images.items():
        offset = offsets.get(model, timedelta())
        for img_path in image_list:
            current += 1
            if progress is not None and progress(current, total) is False:
                logger.info("Verarbeitung abgebrochen nach %d von %d Bildern", current - 1, total)
                result.cancelled = True
                return result

            location = locate_image(track, img_path, offset)
            if location is None:
                logger.warning("Kein EXIF-Zeitstempel für %s", img_path)
                result.failed += 1
            elif not location.matched:
                logger.info("%s liegt außerhalb des GPX-Tracks", img_path)
                result.unmatched += 1
            elif write_gps_to_image(img_path, location.latitude, location.longitude):
                result.tagged += 1
            else:
                result.failed += 1

    logger.info(
        "Geotagging fertig: %d markiert, %d ohne Treffer, %d fehlgeschlagen",
        result.tagged, result.unmatched, result.failed,
    )
    return result
