"""
Pairing of validated light bars.

Two bars belong to the same target when their centroids are nearly level:
the allowed vertical offset grows with the tenth root of their mean area.
The relative area difference is recorded on each pair but does not gate it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from core.detections import LightBarCandidate, PairedMatch

logger = logging.getLogger(__name__)


@dataclass
class MatcherParams:
    height_exponent: float = 0.1

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "MatcherParams":
        cfg = config or {}
        return cls(height_exponent=float(cfg.get("height_exponent", 0.1)))


def height_threshold(area_a: float, area_b: float, exponent: float = 0.1) -> float:
    avg_area = (area_a + area_b) / 2
    return avg_area ** exponent


def area_diff_ratio(reference: LightBarCandidate, other: LightBarCandidate) -> float:
    """Relative area difference, normalized by the first bar (not symmetric)."""
    if reference.area == 0:
        return float("inf")
    return abs(reference.area - other.area) / reference.area


class PairMatcher:
    def __init__(self, params: Optional[MatcherParams] = None) -> None:
        self.params = params or MatcherParams()

    def match(self, bars: Sequence[LightBarCandidate]) -> List[PairedMatch]:
        eligible = [bar for bar in bars if bar.validated]
        if len(eligible) != len(bars):
            logger.debug("Ignoring %d unvalidated bars", len(bars) - len(eligible))

        pairs: List[PairedMatch] = []
        for i in range(len(eligible)):
            for j in range(i + 1, len(eligible)):
                a, b = eligible[i], eligible[j]
                if a is b:
                    continue
                ratio = area_diff_ratio(a, b)
                height_diff = abs(a.y - b.y)
                threshold = height_threshold(a.area, b.area, self.params.height_exponent)
                if height_diff < threshold:
                    pairs.append(PairedMatch(first=a, second=b, area_diff_ratio=ratio))
        return pairs


def match(bars: Sequence[LightBarCandidate]) -> List[PairedMatch]:
    return PairMatcher().match(bars)
