# ui/time_offset_widget.py

from PyQt5.QtWidgets import (
    QLabel, QPushButton, QVBoxLayout, QHBoxLayout,
    QFileDialog, QSizePolicy, QFrame, QSplitter, QDialog,
    QTableWidget, QTableWidgetItem
)
from PyQt5.QtGui import QPixmap
from PyQt5.QtCore import Qt

from PIL import Image
import io
from datetime import timedelta

from logic.config import OFFSET_STEP_MINUTES, PREVIEW_WINDOW_MINUTES
from logic.exif_handler import get_datetime_from_exif
from logic.geotagger import locate_image
from logic.track_point import to_utc


class TimeOffsetWidget(QDialog):
    def __init__(self, camera_model, image_path, exif_time, track, parent=None):
        super().__init__(parent)
        self.camera_model = camera_model
        self.image_path = image_path
        self.exif_time = exif_time
        self.track = track
        self.offset = timedelta()
        self.step = timedelta(minutes=OFFSET_STEP_MINUTES)

        self.setWindowTitle(f"Zeitversatz für: {camera_model}")
        self.resize(1400, 800)

        # 📷 Bildvorschau
        self.image_label = QLabel()
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setFrameShape(QFrame.Box)
        self.image_label.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        # 🛰️ GPX-Punkte rund um die korrigierte Zeit
        self.points_table = QTableWidget()
        self.points_table.setColumnCount(4)
        self.points_table.setHorizontalHeaderLabels(["Zeit (UTC)", "Breite", "Länge", "Höhe"])
        self.points_table.verticalHeader().setVisible(False)
        self.points_table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.points_table.setSelectionMode(QTableWidget.NoSelection)
        self.points_table.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self.image_label)
        splitter.addWidget(self.points_table)
        splitter.setSizes([700, 500])

        # 📅 Zeit/Koord Anzeige
        self.time_label = QLabel()
        self.gps_label = QLabel()

        # 🕐 Steuerbuttons
        self.minus_btn = QPushButton(f"−{OFFSET_STEP_MINUTES} min")
        self.plus_btn = QPushButton(f"+{OFFSET_STEP_MINUTES} min")
        self.change_img_btn = QPushButton("Anderes Bild wählen")
        self.confirm_btn = QPushButton("Bestätigen")

        self.minus_btn.clicked.connect(self.decrease_offset)
        self.plus_btn.clicked.connect(self.increase_offset)
        self.change_img_btn.clicked.connect(self.select_new_image)
        self.confirm_btn.clicked.connect(self.accept)

        controls_layout = QHBoxLayout()
        controls_layout.addWidget(self.minus_btn)
        controls_layout.addWidget(self.plus_btn)
        controls_layout.addWidget(self.change_img_btn)
        controls_layout.addStretch()
        controls_layout.addWidget(self.confirm_btn)

        main_layout = QVBoxLayout()
        main_layout.addWidget(QLabel(f"Kamera: {camera_model}"))
        main_layout.addWidget(splitter)
        main_layout.setStretch(main_layout.count() - 1, 1)
        main_layout.addWidget(self.time_label)
        main_layout.addWidget(self.gps_label)
        main_layout.addLayout(controls_layout)

        self.setLayout(main_layout)

        self.update_ui()

    def load_image_preview(self, path):
        try:
            with Image.open(path) as img:
                img.thumbnail((800, 800))
                buffer = io.BytesIO()
                img.convert("RGB").save(buffer, format="JPEG")
            pixmap = QPixmap()
            pixmap.loadFromData(buffer.getvalue())
            self.image_label.setPixmap(pixmap)
        except OSError as e:
            self.image_label.setText(f"Fehler beim Laden des Bildes: {e}")

    def update_ui(self):
        self.load_image_preview(self.image_path)
        corrected_time = self.exif_time + self.offset
        self.time_label.setText(
            f"📷 EXIF-Zeit (korrigiert): {corrected_time.strftime('%Y-%m-%d %H:%M:%S')}"
            f"   Versatz: {self.offset}"
        )

        location = locate_image(self.track, self.image_path, self.offset)
        if location is None:
            self.gps_label.setStyleSheet("font-weight: bold; color: red;")
            self.gps_label.setText("⚠️ Kein EXIF-Zeitstempel im Bild.")
        elif location.matched:
            self.gps_label.setStyleSheet("font-weight: bold; color: green;")
            self.gps_label.setText(f"📍 Koordinaten: {location.latitude:.5f}, {location.longitude:.5f}")
        else:
            self.gps_label.setStyleSheet("font-weight: bold; color: orange;")
            self.gps_label.setText(
                f"⚠️ Außerhalb des GPX-Tracks (nächster Punkt: "
                f"{location.latitude:.5f}, {location.longitude:.5f})"
            )

        self.update_points_table(corrected_time)

    def update_points_table(self, corrected_time):
        window = timedelta(minutes=PREVIEW_WINDOW_MINUTES)
        center = to_utc(corrected_time)
        points = self.track.points_between(center - window, center + window)

        self.points_table.setRowCount(len(points))
        for row, p in enumerate(points):
            self.points_table.setItem(row, 0, QTableWidgetItem(p.timestamp.strftime('%Y-%m-%d %H:%M:%S')))
            self.points_table.setItem(row, 1, QTableWidgetItem(f"{p.latitude:.5f}"))
            self.points_table.setItem(row, 2, QTableWidgetItem(f"{p.longitude:.5f}"))
            self.points_table.setItem(row, 3, QTableWidgetItem(f"{p.elevation:.1f} m"))

    def increase_offset(self):
        self.offset += self.step
        self.update_ui()

    def decrease_offset(self):
        self.offset -= self.step
        self.update_ui()

    def select_new_image(self):
        file, _ = QFileDialog.getOpenFileName(self, "Anderes Bild wählen", filter="Bilder (*.jpg *.jpeg)")
        if file:
            new_time = get_datetime_from_exif(file)
            if new_time:
                self.image_path = file
                self.exif_time = new_time
                self.offset = timedelta()
                self.update_ui()
            else:
                self.gps_label.setText("⚠️ Keine gültige EXIF-Zeit in diesem Bild.")

    def get_time_offset(self):
        return self.offset
