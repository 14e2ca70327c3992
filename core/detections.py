from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

import numpy as np

# Closed polygon as produced by cv2.findContours: (N, 1, 2) or (N, 2) int points.
Outline = np.ndarray


@dataclass(frozen=True)
class BoundingBox:
    x: int
    y: int
    width: int
    height: int

    @property
    def top_left(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return self.x + self.width, self.y + self.height


@dataclass(frozen=True)
class PhotometricBaseline:
    """Frame-wide mean saturation and brightness (HSV S and V, 0..255)."""
    average_saturation: float
    average_brightness: float

    @property
    def is_degenerate(self) -> bool:
        return self.average_saturation == 0 or self.average_brightness == 0


@dataclass(frozen=True)
class LightBarCandidate:
    area: float
    centroid: Tuple[int, int]  # (x, y) in pixels
    bounding_box: BoundingBox
    aspect_ratio: float  # height / width
    vertex_count: int = 0  # vertices of the simplified polygon
    index: int = -1  # position of the source outline
    validated: bool = False

    @property
    def x(self) -> int:
        return self.centroid[0]

    @property
    def y(self) -> int:
        return self.centroid[1]

    def as_validated(self) -> "LightBarCandidate":
        return replace(self, validated=True)


@dataclass(frozen=True)
class PairedMatch:
    first: LightBarCandidate
    second: LightBarCandidate
    area_diff_ratio: float = 0.0  # diagnostic only, never used for gating

    @property
    def centroids(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return self.first.centroid, self.second.centroid


@dataclass
class FrameDetections:
    frame_index: int = 0
    baseline: Optional[PhotometricBaseline] = None
    candidates: List[LightBarCandidate] = field(default_factory=list)
    bars: List[LightBarCandidate] = field(default_factory=list)
    pairs: List[PairedMatch] = field(default_factory=list)
