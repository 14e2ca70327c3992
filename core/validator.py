from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from core.detections import LightBarCandidate, PhotometricBaseline
from core.errors import InvalidInputError
from core.photometric import sample_saturation_brightness

logger = logging.getLogger(__name__)


@dataclass
class ValidatorParams:
    saturation_margin: float = 0.3
    brightness_margin: float = 0.3

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "ValidatorParams":
        cfg = config or {}
        return cls(
            saturation_margin=float(cfg.get("saturation_margin", 0.3)),
            brightness_margin=float(cfg.get("brightness_margin", 0.3)),
        )


def exceeds_baseline(
    saturation: float,
    brightness: float,
    baseline: PhotometricBaseline,
    params: Optional[ValidatorParams] = None,
) -> bool:
    """True when both channels are more than the margin above the frame average."""
    p = params or ValidatorParams()
    if baseline.is_degenerate:
        raise InvalidInputError(
            f"degenerate baseline: saturation={baseline.average_saturation} "
            f"brightness={baseline.average_brightness}"
        )
    avg_s = baseline.average_saturation
    avg_v = baseline.average_brightness
    return (saturation - avg_s) / avg_s > p.saturation_margin and (brightness - avg_v) / avg_v > p.brightness_margin


class BrightnessValidator:
    """Accepts candidates whose centroid pixel is brighter and more saturated than the frame."""

    def __init__(self, params: Optional[ValidatorParams] = None) -> None:
        self.params = params or ValidatorParams()

    def validate(self, frame: np.ndarray, candidate: LightBarCandidate, baseline: PhotometricBaseline) -> bool:
        saturation, brightness = sample_saturation_brightness(frame, candidate.centroid)
        accepted = exceeds_baseline(saturation, brightness, baseline, self.params)
        if not accepted:
            logger.debug(
                "Candidate at %s rejected: s=%.0f v=%.0f (baseline s=%.1f v=%.1f)",
                candidate.centroid,
                saturation,
                brightness,
                baseline.average_saturation,
                baseline.average_brightness,
            )
        return accepted


def validate(frame: np.ndarray, candidate: LightBarCandidate, baseline: PhotometricBaseline) -> bool:
    return BrightnessValidator().validate(frame, candidate, baseline)
