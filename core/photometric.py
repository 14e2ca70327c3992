"""
Frame-wide photometric statistics.

The baseline is the mean HSV saturation and value over every pixel of a frame
and is used to normalize the brightness check applied to light bar candidates.
"""
from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np

from core.detections import PhotometricBaseline
from core.errors import InvalidInputError

logger = logging.getLogger(__name__)


def check_frame(frame: np.ndarray) -> None:
    """Raise InvalidInputError unless frame is a non-empty 3-channel uint8 image."""
    if frame is None:
        raise InvalidInputError("frame is None")
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise InvalidInputError(f"expected a 3-channel frame, got shape {frame.shape}")
    if frame.shape[0] * frame.shape[1] == 0:
        raise InvalidInputError("frame has zero pixels")
    if frame.dtype != np.uint8:
        raise InvalidInputError(f"expected uint8 frame, got {frame.dtype}")


def to_hsv(frame: np.ndarray) -> np.ndarray:
    check_frame(frame)
    return cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)


def summarize(frame: np.ndarray) -> PhotometricBaseline:
    """
    Compute the mean saturation and brightness of a BGR frame.

    Args:
        frame: HxWx3 uint8 BGR image

    Returns:
        PhotometricBaseline with both averages in the 0..255 channel range

    Raises:
        InvalidInputError: for empty or malformed frames
    """
    hsv = to_hsv(frame)
    # float64 accumulation, uint8 sums would overflow
    saturation = float(hsv[:, :, 1].mean(dtype=np.float64))
    brightness = float(hsv[:, :, 2].mean(dtype=np.float64))
    logger.debug("Frame baseline: saturation=%.2f brightness=%.2f", saturation, brightness)
    return PhotometricBaseline(average_saturation=saturation, average_brightness=brightness)


def sample_saturation_brightness(frame: np.ndarray, point: Tuple[int, int]) -> Tuple[float, float]:
    """Return (saturation, brightness) of the BGR pixel at point=(x, y)."""
    check_frame(frame)
    x, y = int(point[0]), int(point[1])
    h, w = frame.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        raise InvalidInputError(f"point ({x}, {y}) outside frame {w}x{h}")
    pixel = np.ascontiguousarray(frame[y : y + 1, x : x + 1])
    hsv = cv2.cvtColor(pixel, cv2.COLOR_BGR2HSV)[0, 0]
    return float(hsv[1]), float(hsv[2])
