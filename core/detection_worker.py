from __future__ import annotations

import logging
import queue
from typing import Optional

import cv2
import numpy as np
from PyQt5 import QtCore, QtGui

from core.pipeline import LightBarPipeline
from core.renderer import Renderer

logger = logging.getLogger(__name__)


class DetectionWorker(QtCore.QObject):
    frame_ready = QtCore.pyqtSignal(QtGui.QImage)
    detection_data = QtCore.pyqtSignal(object)  # FrameDetections
    error = QtCore.pyqtSignal(str)

    def __init__(self, pipeline: LightBarPipeline, renderer: Renderer, render_output: bool = True) -> None:
        super().__init__()
        self.pipeline = pipeline
        self.renderer = renderer
        self.render_output = render_output

        self._frame_queue: queue.Queue[np.ndarray] = queue.Queue(maxsize=1)
        self._thread: Optional[QtCore.QThread] = None
        self._running = False
        self._frame_index = 0

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._frame_index = 0
        self._thread = QtCore.QThread()
        self.moveToThread(self._thread)
        self._thread.started.connect(self._run)
        self._thread.start()
        logger.info("DetectionWorker started")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._thread:
            self._thread.quit()
            self._thread.wait()
        logger.info("DetectionWorker stopped")

    def set_render_output(self, enabled: bool) -> None:
        self.render_output = enabled

    def submit_frame(self, frame: np.ndarray) -> None:
        if not self._running:
            return
        if self._frame_queue.full():
            try:
                self._frame_queue.get_nowait()
            except queue.Empty:
                pass
        try:
            self._frame_queue.put_nowait(frame)
        except queue.Full:
            pass

    def _run(self) -> None:
        while self._running:
            try:
                frame = self._frame_queue.get(timeout=0.5)
            except queue.Empty:
                continue
            if frame is None or frame.size == 0:
                continue
            try:
                detections = self.pipeline.process(frame, frame_index=self._frame_index)
                self._frame_index += 1
                self.detection_data.emit(detections)
                if self.render_output:
                    rendered = self.renderer.render(frame, detections)
                    self.frame_ready.emit(self._to_qimage(rendered))
            except Exception as exc:  # pragma: no cover - runtime safety
                logger.exception("Detection error: %s", exc)
                self.error.emit(str(exc))

    @staticmethod
    def _to_qimage(image_bgr: np.ndarray) -> QtGui.QImage:
        rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
        h, w, _ = rgb.shape
        return QtGui.QImage(rgb.data, w, h, 3 * w, QtGui.QImage.Format_RGB888).copy()
