# logic/config.py

import os

LOG_LEVEL = os.getenv("GPXTAGGER_LOG_LEVEL", "INFO").upper()

# Schrittweite der Zeitversatz-Buttons
OFFSET_STEP_MINUTES = int(os.getenv("GPXTAGGER_OFFSET_STEP_MINUTES", "60"))

# GPX-Punkte +/- dieses Fensters werden im Zeitversatz-Dialog angezeigt
PREVIEW_WINDOW_MINUTES = int(os.getenv("GPXTAGGER_PREVIEW_WINDOW_MINUTES", "10"))

IMAGE_EXTENSIONS = tuple(
    ext.strip().lower()
    for ext in os.getenv("GPXTAGGER_IMAGE_EXTENSIONS", ".jpg,.jpeg").split(",")
    if ext.strip()
)

# kleiner ist kein plausibles XML
MIN_BUFFER_SIZE = 10
