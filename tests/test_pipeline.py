import cv2
import numpy as np

from core.pipeline import LightBarPipeline

YELLOW = (0, 255, 255)


def rect_outline(x, y, w, h):
    return np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h]], dtype=np.int32).reshape(-1, 1, 2)


def two_bar_frame(shape=(120, 120)):
    frame = np.full((shape[0], shape[1], 3), 20, dtype=np.uint8)
    cv2.rectangle(frame, (20, 40), (30, 60), YELLOW, -1)
    cv2.rectangle(frame, (70, 40), (80, 60), YELLOW, -1)
    return frame


def fixed_outlines(_frame):
    return [
        rect_outline(20, 40, 10, 20),
        rect_outline(70, 40, 10, 20),
        rect_outline(40, 80, 10, 20),  # over dark background
    ]


def test_pipeline_with_fixed_outlines():
    pipeline = LightBarPipeline(extractor=fixed_outlines)

    result = pipeline.process(two_bar_frame(), frame_index=7)

    assert result.frame_index == 7
    assert result.baseline is not None
    assert len(result.candidates) == 3
    assert [b.centroid for b in result.bars] == [(25, 50), (75, 50)]
    assert all(b.validated for b in result.bars)
    assert len(result.pairs) == 1
    assert result.pairs[0].first is result.bars[0]
    assert result.pairs[0].second is result.bars[1]
    assert result.pairs[0].area_diff_ratio == 0


def test_zero_saturation_frame_yields_no_bars():
    frame = np.full((120, 120, 3), 200, dtype=np.uint8)
    pipeline = LightBarPipeline(extractor=fixed_outlines)

    result = pipeline.process(frame)

    assert len(result.candidates) == 3
    assert result.bars == []
    assert result.pairs == []


def test_empty_frame_is_skipped():
    pipeline = LightBarPipeline(extractor=fixed_outlines)

    result = pipeline.process(np.zeros((0, 0, 3), dtype=np.uint8))

    assert result.baseline is None
    assert result.candidates == []
    assert result.bars == []
    assert result.pairs == []


def test_candidate_outside_frame_is_skipped():
    def outlines(_frame):
        return fixed_outlines(_frame) + [rect_outline(200, 200, 10, 20)]

    result = LightBarPipeline(extractor=outlines).process(two_bar_frame())

    assert len(result.candidates) == 4
    assert len(result.bars) == 2


def test_process_is_repeatable():
    pipeline = LightBarPipeline(extractor=fixed_outlines)
    frame = two_bar_frame()

    first = pipeline.process(frame)
    second = pipeline.process(frame)

    assert first.candidates == second.candidates
    assert first.bars == second.bars
    assert first.pairs == second.pairs


def test_config_sections_reach_components():
    pipeline = LightBarPipeline(
        {"classifier": {"small_max_aspect": 1.5}, "matcher": {"height_exponent": 0.5}},
        extractor=fixed_outlines,
    )

    assert pipeline.classifier.params.small_max_aspect == 1.5
    assert pipeline.matcher.params.height_exponent == 0.5
    # bounding boxes are 11x21 (aspect ~1.9), above the tightened bound
    assert pipeline.process(two_bar_frame()).candidates == []


def test_end_to_end_with_edge_extraction():
    frame = np.zeros((200, 300, 3), dtype=np.uint8)
    cv2.rectangle(frame, (80, 70), (99, 129), YELLOW, -1)
    cv2.rectangle(frame, (200, 70), (219, 129), YELLOW, -1)

    result = LightBarPipeline().process(frame)

    assert result.bars
    for b in result.bars:
        assert 70 <= b.y <= 129
    cross_pairs = [p for p in result.pairs if (p.first.x < 150) != (p.second.x < 150)]
    assert cross_pairs
