from __future__ import annotations

import logging
import threading
import time
from typing import Iterator, Optional, Tuple, Union

import cv2
import numpy as np
from PyQt5 import QtCore

logger = logging.getLogger(__name__)

Source = Union[int, str]


def resolve_source(uri: str) -> Source:
    """Camera index for purely numeric URIs, otherwise a file path or stream URL."""
    uri = (uri or "").strip()
    if uri.isdigit():
        return int(uri)
    return uri


def open_capture(source: Source) -> cv2.VideoCapture:
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        cap.release()
        raise RuntimeError(f"Could not open video source: {source}")
    return cap


def iter_frames(uri: str, max_frames: Optional[int] = None) -> Iterator[Tuple[int, np.ndarray]]:
    """Yield (index, BGR frame) until the stream ends or max_frames is reached."""
    cap = open_capture(resolve_source(uri))
    index = 0
    try:
        while max_frames is None or index < max_frames:
            ok, frame = cap.read()
            if not ok or frame is None or frame.size == 0:
                logger.info("End of stream after %d frames", index)
                break
            yield index, frame
            index += 1
    finally:
        cap.release()


class VideoCaptureService(QtCore.QObject):
    """OpenCV capture on a background thread, paced to frame_interval_ms."""

    frame_ready = QtCore.pyqtSignal(np.ndarray)
    state_changed = QtCore.pyqtSignal(str)
    error = QtCore.pyqtSignal(str)

    def __init__(self, uri: str, frame_interval_ms: int = 30, loop: bool = False) -> None:
        super().__init__()
        self.uri = uri
        self.frame_interval_ms = frame_interval_ms
        self.loop = loop

        self._capture: Optional[cv2.VideoCapture] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False

    def start(self) -> None:
        if self._running:
            return
        try:
            self._capture = open_capture(resolve_source(self.uri))
        except RuntimeError as exc:
            logger.error("%s", exc)
            self.error.emit(str(exc))
            return

        self._running = True
        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()
        self.state_changed.emit("playing")
        logger.info("VideoCaptureService started on %s", self.uri)

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=2)
        self.state_changed.emit("stopped")
        logger.info("VideoCaptureService stopped")

    def read_frame(self) -> Optional[np.ndarray]:
        """Next frame, rewinding once when looping; None at end of stream."""
        if self._capture is None:
            return None
        rewound = False
        while True:
            ok, frame = self._capture.read()
            if ok and frame is not None and frame.size > 0:
                return frame
            if not self.loop or rewound or not self._capture.set(cv2.CAP_PROP_POS_FRAMES, 0):
                return None
            rewound = True

    def _run_loop(self) -> None:
        interval_s = max(0, self.frame_interval_ms) / 1000.0
        try:
            while self._running:
                started = time.monotonic()
                frame = self.read_frame()
                if frame is None:
                    logger.info("End of stream reached on %s", self.uri)
                    self.state_changed.emit("eos")
                    self._running = False
                    break
                self.frame_ready.emit(frame)
                remaining = interval_s - (time.monotonic() - started)
                if remaining > 0:
                    time.sleep(remaining)
        except Exception as exc:  # pragma: no cover - runtime dependent
            logger.exception("Capture loop error: %s", exc)
            self.error.emit(str(exc))
            self._running = False
        finally:
            if self._capture is not None:
                self._capture.release()
                self._capture = None
