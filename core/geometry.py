"""
Outline extraction and polygon measurements.

Thin wrappers over OpenCV: edge map -> closed outlines, and the per-outline
measurements (perimeter, bounding box, simplified vertex count, area, centroid)
used by the light bar classifier.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from core.detections import BoundingBox, Outline
from core.errors import InvalidInputError
from core.photometric import check_frame

logger = logging.getLogger(__name__)

ASPECT_EPSILON = 1e-6


@dataclass
class EdgeParams:
    blur_kernel: int = 9
    blur_sigma: float = 2.0
    canny_low: float = 40.0
    canny_high: float = 120.0
    canny_aperture: int = 3

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "EdgeParams":
        cfg = config or {}
        return cls(
            blur_kernel=int(cfg.get("blur_kernel", 9)),
            blur_sigma=float(cfg.get("blur_sigma", 2.0)),
            canny_low=float(cfg.get("canny_low", 40.0)),
            canny_high=float(cfg.get("canny_high", 120.0)),
            canny_aperture=int(cfg.get("canny_aperture", 3)),
        )


def detect_edges(frame: np.ndarray, params: Optional[EdgeParams] = None) -> np.ndarray:
    """Grayscale -> Gaussian blur -> Canny. Returns a uint8 edge map."""
    params = params or EdgeParams()
    check_frame(frame)
    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    k = params.blur_kernel | 1  # kernel must be odd
    blurred = cv2.GaussianBlur(gray, (k, k), params.blur_sigma)
    return cv2.Canny(blurred, params.canny_low, params.canny_high, apertureSize=params.canny_aperture)


def extract_outlines(frame: np.ndarray, params: Optional[EdgeParams] = None) -> List[Outline]:
    """Closed outlines of the frame's edge map, in findContours order."""
    edges = detect_edges(frame, params)
    contours, _ = cv2.findContours(edges, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def as_contour(outline: Sequence) -> np.ndarray:
    """Normalize a point sequence to OpenCV's (N, 1, 2) int32 contour layout."""
    pts = np.asarray(outline, dtype=np.int32)
    if pts.size == 0:
        return pts.reshape(0, 1, 2)
    return pts.reshape(-1, 1, 2)


def perimeter(contour: np.ndarray) -> float:
    return float(cv2.arcLength(contour, True))


def bounding_box(contour: np.ndarray) -> BoundingBox:
    x, y, w, h = cv2.boundingRect(contour)
    return BoundingBox(int(x), int(y), int(w), int(h))


def aspect_ratio(box: BoundingBox) -> float:
    return box.height / (box.width + ASPECT_EPSILON)


def simplified_vertex_count(contour: np.ndarray, tolerance_ratio: float = 0.02) -> int:
    """Vertices left after Douglas-Peucker with tolerance proportional to the perimeter."""
    epsilon = tolerance_ratio * perimeter(contour)
    approx = cv2.approxPolyDP(contour, epsilon, True)
    return int(len(approx))


def polygon_area(contour: np.ndarray) -> float:
    return float(cv2.contourArea(contour))


def centroid(contour: np.ndarray) -> Tuple[int, int]:
    """Centroid from first-order moments, rounded half-up to integer pixels."""
    m = cv2.moments(contour)
    if m["m00"] == 0:
        raise InvalidInputError("outline has zero area, centroid undefined")
    cx = m["m10"] / m["m00"]
    cy = m["m01"] / m["m00"]
    return int(np.floor(cx + 0.5)), int(np.floor(cy + 0.5))
