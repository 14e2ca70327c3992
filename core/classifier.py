"""
Shape heuristics that turn raw outlines into light bar candidates.

Small bars (25 < area < 500) only need a plausible aspect ratio. Large bars
(area >= 500) must be more elongated and must also simplify to a polygon with
3..8 vertices. The vertex bound applies to the large branch only.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from core import geometry
from core.detections import LightBarCandidate, Outline
from core.errors import InvalidInputError

logger = logging.getLogger(__name__)


@dataclass
class ClassifierParams:
    small_min_area: float = 25.0  # exclusive
    large_min_area: float = 500.0  # small branch upper bound (exclusive), large branch lower bound
    small_min_aspect: float = 1.2
    small_max_aspect: float = 3.5
    large_min_aspect: float = 2.0
    large_max_aspect: float = 6.0
    large_min_vertices: int = 3
    large_max_vertices: int = 8
    approx_tolerance: float = 0.02  # fraction of the perimeter
    min_centroid_area: float = 20.0  # exclusive

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "ClassifierParams":
        cfg = config or {}
        defaults = cls()
        return cls(
            small_min_area=float(cfg.get("small_min_area", defaults.small_min_area)),
            large_min_area=float(cfg.get("large_min_area", defaults.large_min_area)),
            small_min_aspect=float(cfg.get("small_min_aspect", defaults.small_min_aspect)),
            small_max_aspect=float(cfg.get("small_max_aspect", defaults.small_max_aspect)),
            large_min_aspect=float(cfg.get("large_min_aspect", defaults.large_min_aspect)),
            large_max_aspect=float(cfg.get("large_max_aspect", defaults.large_max_aspect)),
            large_min_vertices=int(cfg.get("large_min_vertices", defaults.large_min_vertices)),
            large_max_vertices=int(cfg.get("large_max_vertices", defaults.large_max_vertices)),
            approx_tolerance=float(cfg.get("approx_tolerance", defaults.approx_tolerance)),
            min_centroid_area=float(cfg.get("min_centroid_area", defaults.min_centroid_area)),
        )


def is_light_bar_shape(
    area: float,
    aspect_ratio: float,
    vertex_count: int,
    params: Optional[ClassifierParams] = None,
) -> bool:
    p = params or ClassifierParams()
    small = (
        p.small_min_area < area < p.large_min_area
        and p.small_min_aspect <= aspect_ratio <= p.small_max_aspect
    )
    large = (
        area >= p.large_min_area
        and p.large_min_aspect <= aspect_ratio <= p.large_max_aspect
        and p.large_min_vertices <= vertex_count <= p.large_max_vertices
    )
    return small or large


class ShapeClassifier:
    """Filters outlines into LightBarCandidate objects, preserving input order."""

    def __init__(self, params: Optional[ClassifierParams] = None) -> None:
        self.params = params or ClassifierParams()

    def classify(self, outlines: Iterable[Outline]) -> List[LightBarCandidate]:
        candidates: List[LightBarCandidate] = []
        for index, outline in enumerate(outlines):
            try:
                candidate = self.classify_one(outline, index)
            except InvalidInputError as exc:
                logger.debug("Outline %d skipped: %s", index, exc)
                continue
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def classify_one(self, outline: Outline, index: int = -1) -> Optional[LightBarCandidate]:
        """
        Measure one outline and return a candidate, or None if it is rejected.

        Raises:
            InvalidInputError: if the accepted outline has no defined centroid
        """
        contour = geometry.as_contour(outline)
        if len(contour) < 3:
            return None

        box = geometry.bounding_box(contour)
        ratio = geometry.aspect_ratio(box)
        vertices = geometry.simplified_vertex_count(contour, self.params.approx_tolerance)
        area = geometry.polygon_area(contour)

        if not is_light_bar_shape(area, ratio, vertices, self.params):
            return None
        if area <= self.params.min_centroid_area:
            return None

        center = geometry.centroid(contour)
        logger.debug(
            "Outline %d accepted: area=%.1f aspect=%.2f vertices=%d centroid=%s",
            index, area, ratio, vertices, center,
        )
        return LightBarCandidate(
            area=area,
            centroid=center,
            bounding_box=box,
            aspect_ratio=ratio,
            vertex_count=vertices,
            index=index,
        )


def classify(outlines: Iterable[Outline], params: Optional[ClassifierParams] = None) -> List[LightBarCandidate]:
    return ShapeClassifier(params).classify(outlines)
