from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PyQt5 import QtGui, QtWidgets

from core.detection_worker import DetectionWorker
from core.detections import FrameDetections
from core.pipeline import LightBarPipeline
from core.renderer import Renderer
from core.video_capture import VideoCaptureService
from ui.video_widget import VideoWidget
from utils.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config_manager: ConfigManager, parent=None) -> None:
        super().__init__(parent)
        self.config_manager = config_manager
        self.setWindowTitle("Light Bar Detector")
        self.resize(1200, 800)

        self.video_widget = VideoWidget(self)
        self.start_button = QtWidgets.QPushButton("Start")
        self.stop_button = QtWidgets.QPushButton("Stop")
        self.stop_button.setEnabled(False)

        self.source_edit = QtWidgets.QLineEdit(self.config_manager.get_value("source.uri", ""))
        self.source_edit.setPlaceholderText("video file, camera index or stream URL")
        self.interval_spin = QtWidgets.QSpinBox()
        self.interval_spin.setRange(0, 1000)
        self.interval_spin.setSuffix(" ms")
        self.interval_spin.setValue(int(self.config_manager.get_value("source.frame_interval_ms", 30)))
        self.loop_checkbox = QtWidgets.QCheckBox("Loop file")
        self.loop_checkbox.setChecked(bool(self.config_manager.get_value("source.loop", False)))

        self.source_status = QtWidgets.QLabel("Source: stopped")
        self.detector_status = QtWidgets.QLabel("Detector: idle")
        self.detections_label = QtWidgets.QLabel("Bars: 0  Pairs: 0")
        self.video_enabled_checkbox = QtWidgets.QCheckBox("Render video")
        self.video_enabled_checkbox.setChecked(bool(self.config_manager.get_value("render.enabled", True)))

        self._video_service: Optional[VideoCaptureService] = None
        self._detection_worker: Optional[DetectionWorker] = None

        self._build_layout()
        self._connect_signals()

    def _build_layout(self) -> None:
        control_layout = QtWidgets.QFormLayout()
        control_layout.addRow("Source:", self.source_edit)
        control_layout.addRow("Frame interval:", self.interval_spin)
        control_layout.addRow(self.loop_checkbox)
        control_layout.addRow(self.video_enabled_checkbox)

        buttons_layout = QtWidgets.QHBoxLayout()
        buttons_layout.addWidget(self.start_button)
        buttons_layout.addWidget(self.stop_button)
        buttons_layout.addStretch()

        status_layout = QtWidgets.QVBoxLayout()
        status_layout.addWidget(self.source_status)
        status_layout.addWidget(self.detector_status)
        status_layout.addWidget(self.detections_label)

        right_layout = QtWidgets.QVBoxLayout()
        right_layout.addLayout(control_layout)
        right_layout.addLayout(buttons_layout)
        right_layout.addLayout(status_layout)
        right_layout.addStretch()

        main_layout = QtWidgets.QHBoxLayout()
        main_layout.addWidget(self.video_widget, stretch=3)
        main_layout.addLayout(right_layout, stretch=1)

        central = QtWidgets.QWidget()
        central.setLayout(main_layout)
        self.setCentralWidget(central)

    def _connect_signals(self) -> None:
        self.start_button.clicked.connect(self._on_start_clicked)
        self.stop_button.clicked.connect(self._on_stop_clicked)
        self.source_edit.editingFinished.connect(self._on_source_changed)
        self.interval_spin.valueChanged.connect(self._on_interval_changed)
        self.loop_checkbox.stateChanged.connect(self._on_loop_toggle)
        self.video_enabled_checkbox.stateChanged.connect(self._on_video_toggle)

    def _on_start_clicked(self) -> None:
        try:
            self._start_services()
        except Exception as exc:
            logger.exception("Failed to start: %s", exc)
            self.detector_status.setText(f"Detector error: {exc}")
            self._teardown()
            self.start_button.setEnabled(True)
            self.stop_button.setEnabled(False)

    def _start_services(self) -> None:
        self._teardown()

        pipeline = LightBarPipeline(self.config_manager.detector_config())
        self._detection_worker = DetectionWorker(
            pipeline=pipeline,
            renderer=Renderer(),
            render_output=self.video_enabled_checkbox.isChecked(),
        )
        self._detection_worker.frame_ready.connect(self._on_detection_frame)
        self._detection_worker.detection_data.connect(self._on_detection_data)
        self._detection_worker.error.connect(self._on_detection_error)
        self._detection_worker.start()
        self.detector_status.setText("Detector: running")

        self._video_service = VideoCaptureService(
            uri=self.source_edit.text().strip(),
            frame_interval_ms=int(self.interval_spin.value()),
            loop=self.loop_checkbox.isChecked(),
        )
        self._video_service.frame_ready.connect(self._on_frame)
        self._video_service.state_changed.connect(self._on_source_state)
        self._video_service.error.connect(self._on_source_error)
        self._video_service.start()

        self.start_button.setEnabled(False)
        self.stop_button.setEnabled(True)

    def _on_stop_clicked(self) -> None:
        self._teardown()
        self.video_widget.clear()
        self.start_button.setEnabled(True)
        self.stop_button.setEnabled(False)
        self.source_status.setText("Source: stopped")

    def _on_source_changed(self) -> None:
        self.config_manager.set_value("source.uri", self.source_edit.text().strip())
        self.config_manager.save()

    def _on_interval_changed(self, value: int) -> None:
        self.config_manager.set_value("source.frame_interval_ms", int(value))
        self.config_manager.save()

    def _on_loop_toggle(self) -> None:
        self.config_manager.set_value("source.loop", self.loop_checkbox.isChecked())
        self.config_manager.save()

    def _on_video_toggle(self) -> None:
        enabled = self.video_enabled_checkbox.isChecked()
        self.config_manager.set_value("render.enabled", enabled)
        self.config_manager.save()
        if self._detection_worker:
            self._detection_worker.set_render_output(enabled)

    def _on_frame(self, frame: np.ndarray) -> None:
        if self._detection_worker:
            self._detection_worker.submit_frame(frame)

    def _on_detection_frame(self, image: QtGui.QImage) -> None:
        if self.video_enabled_checkbox.isChecked():
            self.video_widget.set_image(image)

    def _on_detection_data(self, detections: FrameDetections) -> None:
        self.detections_label.setText(f"Bars: {len(detections.bars)}  Pairs: {len(detections.pairs)}")

    def _on_detection_error(self, msg: str) -> None:
        logger.error("Detection error: %s", msg)
        self.detector_status.setText(f"Detector error: {msg}")

    def _on_source_state(self, state: str) -> None:
        self.source_status.setText(f"Source: {state}")
        if state == "eos":
            self.start_button.setEnabled(True)
            self.stop_button.setEnabled(False)

    def _on_source_error(self, msg: str) -> None:
        self.source_status.setText(f"Source error: {msg}")
        logger.error("Source error: %s", msg)
        self._teardown()
        self.start_button.setEnabled(True)
        self.stop_button.setEnabled(False)

    def _teardown(self) -> None:
        if self._video_service:
            self._video_service.stop()
            self._video_service = None
        if self._detection_worker:
            self._detection_worker.stop()
            self._detection_worker = None
        self.detector_status.setText("Detector: idle")
        self.detections_label.setText("Bars: 0  Pairs: 0")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802
        self._teardown()
        super().closeEvent(event)
