from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import cv2
import numpy as np
import yaml

from core.detections import FrameDetections

logger = logging.getLogger(__name__)


def load_renderer_config(config_path: str = "config/renderer.yaml") -> Dict[str, Any]:
    """Load renderer configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        logger.warning("Renderer config not found at %s, using defaults", config_path)
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Renderer:
    """Draws light bar centroids, bounding boxes and pair links on a copy of the frame."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        if config is None:
            config = load_renderer_config()

        center_cfg = config.get("center", {})
        box_cfg = config.get("box", {})
        pair_cfg = config.get("pair", {})
        label_cfg = config.get("label", {})

        # Colors are BGR
        self.center_color = tuple(center_cfg.get("color", [0, 255, 0]))
        self.center_radius = int(center_cfg.get("radius", 3))

        self.box_color = tuple(box_cfg.get("color", [0, 0, 255]))
        self.box_thickness = int(box_cfg.get("thickness", 2))
        self.draw_candidates = bool(box_cfg.get("draw_candidates", False))
        self.candidate_color = tuple(box_cfg.get("candidate_color", [128, 128, 128]))

        self.pair_color = tuple(pair_cfg.get("color", [0, 0, 255]))
        self.pair_thickness = int(pair_cfg.get("thickness", 2))

        self.show_counts = bool(label_cfg.get("show_counts", True))
        self.label_color = tuple(label_cfg.get("color", [255, 255, 255]))
        self.label_scale = float(label_cfg.get("scale", 0.6))

    def render(self, frame: np.ndarray, detections: FrameDetections) -> np.ndarray:
        img = frame.copy()

        if self.draw_candidates:
            for cand in detections.candidates:
                b = cand.bounding_box
                cv2.rectangle(img, b.top_left, b.bottom_right, self.candidate_color, 1)

        for bar in detections.bars:
            cv2.circle(img, bar.centroid, self.center_radius, self.center_color, -1)
            b = bar.bounding_box
            cv2.rectangle(img, b.top_left, b.bottom_right, self.box_color, self.box_thickness)

        for pair in detections.pairs:
            p1, p2 = pair.centroids
            cv2.line(img, p1, p2, self.pair_color, self.pair_thickness)

        if self.show_counts:
            text = f"bars: {len(detections.bars)}  pairs: {len(detections.pairs)}"
            cv2.putText(img, text, (10, 24), cv2.FONT_HERSHEY_SIMPLEX, self.label_scale, self.label_color, 2)

        return img
