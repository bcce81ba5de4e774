# main.py

import sys
import os
import logging

from PyQt5.QtWidgets import (
    QApplication, QWidget, QFileDialog, QLabel, QPushButton,
    QVBoxLayout, QDialog, QMessageBox, QProgressDialog
)
from PyQt5.QtCore import Qt, QStandardPaths

from logic.config import LOG_LEVEL
from logic.errors import GpxError
from logic.exif_handler import get_datetime_from_exif
from logic.geotagger import find_untagged_images, tag_images
from logic.gpx_matcher import load_gpx_track
from ui.time_offset_widget import TimeOffsetWidget

logger = logging.getLogger(__name__)


class GeoTaggerApp(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("GeoTagger mit GPX")
        self.setMinimumSize(600, 400)

        self.image_folder = ""
        self.gpx_file = ""
        self.track = None
        self.time_offsets = {}

        # UI-Elemente
        self.folder_label = QLabel("📁 Kein Bildordner ausgewählt")
        self.gpx_label = QLabel("🛰️ Keine GPX-Datei ausgewählt")
        self.select_folder_btn = QPushButton("Bildordner auswählen")
        self.select_gpx_btn = QPushButton("GPX-Datei auswählen")
        self.load_btn = QPushButton("Bilder & GPX laden")
        self.load_btn.setEnabled(False)

        self.select_folder_btn.clicked.connect(self.select_folder)
        self.select_gpx_btn.clicked.connect(self.select_gpx)
        self.load_btn.clicked.connect(self.load_data)

        layout = QVBoxLayout()
        layout.addWidget(self.folder_label)
        layout.addWidget(self.select_folder_btn)
        layout.addWidget(self.gpx_label)
        layout.addWidget(self.select_gpx_btn)
        layout.addWidget(self.load_btn)

        self.setLayout(layout)

    def select_folder(self):
        pictures_dir = QStandardPaths.writableLocation(QStandardPaths.PicturesLocation)

        folder = QFileDialog.getExistingDirectory(
            None,
            "Bilderordner auswählen",
            pictures_dir,
            QFileDialog.ShowDirsOnly | QFileDialog.DontResolveSymlinks
        )

        if folder:
            self.image_folder = folder
            self.folder_label.setText(f"📁 Ordner: {os.path.basename(folder)}")
            self.update_load_btn_state()

    def select_gpx(self):
        file, _ = QFileDialog.getOpenFileName(self, "GPX-Datei wählen", filter="GPX Dateien (*.gpx)")
        if file:
            self.gpx_file = file
            self.gpx_label.setText(f"🛰️ GPX: {os.path.basename(file)}")
            self.update_load_btn_state()

    def update_load_btn_state(self):
        self.load_btn.setEnabled(bool(self.image_folder and self.gpx_file))

    def load_track(self):
        if self.track is not None:
            self.track.close()
            self.track = None
        try:
            track = load_gpx_track(self.gpx_file)
        except GpxError as e:
            QMessageBox.critical(self, "Fehler", f"GPX-Datei konnte nicht gelesen werden:\n{e}")
            return None
        if len(track) < 2:
            track.close()
            QMessageBox.critical(self, "Fehler", "Die GPX-Datei enthält weniger als 2 Trackpunkte.")
            return None
        return track

    def load_data(self):
        print("🔄 Lade GPX-Punkte und analysiere Bilder...")
        self.track = self.load_track()
        if self.track is None:
            return
        logger.info("%d Trackpunkte von %s bis %s", len(self.track), self.track.start_time, self.track.end_time)

        camera_image_map = find_untagged_images(self.image_folder)
        if not camera_image_map:
            QMessageBox.information(self, "Hinweis", "Keine Bilder ohne GPS-Daten gefunden.")
            return

        camera_list_str = "\n".join(
            f"{model} ({len(paths)} Bilder)" for model, paths in camera_image_map.items()
        )
        print("📷 Gefundene Kameras:")
        print(camera_list_str)
        QMessageBox.information(self, "Kameras erkannt", f"Folgende Kameramodelle wurden erkannt:\n\n{camera_list_str}")

        self.time_offsets = {}

        # Zeitversatz-Dialog für jede Kamera
        for model, image_paths in camera_image_map.items():
            first_image = image_paths[0]
            exif_time = get_datetime_from_exif(first_image)
            if not exif_time:
                print(f"⚠️ Kein EXIF-Zeitstempel für {first_image}")
                continue

            widget = TimeOffsetWidget(
                camera_model=model,
                image_path=first_image,
                exif_time=exif_time,
                track=self.track,
                parent=self
            )

            if widget.exec_() == QDialog.Accepted:
                offset = widget.get_time_offset()
                print(f"✅ Zeitversatz bestätigt für {model}: {offset}")
                self.time_offsets[model] = offset
            else:
                print(f"⛔ Zeitversatz für {model} abgebrochen.")
                return

        self.process_all_images_with_offsets(camera_image_map)

    def process_all_images_with_offsets(self, camera_image_map):
        total = sum(len(imgs) for imgs in camera_image_map.values())
        progress = QProgressDialog("Schreibe GPS-Daten in Bilder...", "Abbrechen", 0, total, self)
        progress.setWindowTitle("Verarbeitung läuft")
        progress.setWindowModality(Qt.WindowModal)
        progress.show()

        def on_progress(current, _total):
            progress.setValue(current)
            return not progress.wasCanceled()

        result = tag_images(self.track, camera_image_map, self.time_offsets, progress=on_progress)
        progress.close()

        if result.cancelled:
            QMessageBox.warning(self, "Abgebrochen", "Die Verarbeitung wurde abgebrochen.")
            return

        QMessageBox.information(
            self,
            "Fertig",
            f"✅ Erfolgreich bearbeitet: {result.tagged}\n"
            f"🕐 Außerhalb des Tracks: {result.unmatched}\n"
            f"❌ Fehlgeschlagen: {result.failed}"
        )


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    window = GeoTaggerApp()
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
