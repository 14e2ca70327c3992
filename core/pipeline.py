from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from core.classifier import ClassifierParams, ShapeClassifier
from core.detections import FrameDetections, LightBarCandidate, Outline
from core.errors import InvalidInputError
from core.geometry import EdgeParams, extract_outlines
from core.matcher import MatcherParams, PairMatcher
from core.photometric import summarize
from core.validator import BrightnessValidator, ValidatorParams

logger = logging.getLogger(__name__)

OutlineExtractor = Callable[[np.ndarray], List[Outline]]


class LightBarPipeline:
    """Runs extraction, classification, validation and pairing on a single frame."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        extractor: Optional[OutlineExtractor] = None,
    ) -> None:
        config = config or {}
        self.edge_params = EdgeParams.from_config(config.get("edges"))
        self.classifier = ShapeClassifier(ClassifierParams.from_config(config.get("classifier")))
        self.validator = BrightnessValidator(ValidatorParams.from_config(config.get("validator")))
        self.matcher = PairMatcher(MatcherParams.from_config(config.get("matcher")))
        self._extractor = extractor or (lambda frame: extract_outlines(frame, self.edge_params))

    def process(self, frame: np.ndarray, frame_index: int = 0) -> FrameDetections:
        result = FrameDetections(frame_index=frame_index)
        try:
            result.baseline = summarize(frame)
        except InvalidInputError as exc:
            logger.warning("Frame %d skipped: %s", frame_index, exc)
            return result

        result.candidates = self.classifier.classify(self._extractor(frame))
        if result.baseline.is_degenerate:
            logger.warning(
                "Frame %d has a zero photometric baseline, no bars validated", frame_index
            )
            return result

        result.bars = self._validate_all(frame, result)
        result.pairs = self.matcher.match(result.bars)
        logger.debug(
            "Frame %d: candidates=%d bars=%d pairs=%d",
            frame_index, len(result.candidates), len(result.bars), len(result.pairs),
        )
        return result

    def _validate_all(self, frame: np.ndarray, result: FrameDetections) -> List[LightBarCandidate]:
        bars: List[LightBarCandidate] = []
        for candidate in result.candidates:
            try:
                if self.validator.validate(frame, candidate, result.baseline):
                    bars.append(candidate.as_validated())
            except InvalidInputError as exc:
                logger.debug("Candidate %d skipped: %s", candidate.index, exc)
        return bars
