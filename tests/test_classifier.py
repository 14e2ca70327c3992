import numpy as np
import pytest

from core.classifier import ClassifierParams, ShapeClassifier, classify, is_light_bar_shape
from core.errors import InvalidInputError
from core.geometry import as_contour, centroid


def rect_outline(x, y, w, h):
    return np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h]], dtype=np.int32)


def test_small_upright_bar_accepted():
    # area 200, bounding box 11x21 -> aspect ~1.91
    candidates = classify([rect_outline(0, 0, 10, 20)])

    assert len(candidates) == 1
    bar = candidates[0]
    assert bar.area == pytest.approx(200.0)
    assert bar.centroid == (5, 10)
    assert bar.bounding_box.width == 11
    assert bar.bounding_box.height == 21
    assert bar.aspect_ratio == pytest.approx(21 / 11, rel=1e-4)
    assert bar.vertex_count == 4
    assert bar.index == 0
    assert not bar.validated


def test_large_squat_outline_rejected():
    # area 600 with aspect ~1.48 fails the large branch
    assert classify([rect_outline(0, 0, 20, 30)]) == []


def test_large_elongated_bar_accepted():
    candidates = classify([rect_outline(100, 50, 16, 60)])

    assert len(candidates) == 1
    assert candidates[0].area == pytest.approx(960.0)
    assert candidates[0].centroid == (108, 80)


def test_large_square_rejected():
    assert classify([rect_outline(0, 0, 30, 30)]) == []


def test_small_flat_bar_rejected():
    # wider than tall
    assert classify([rect_outline(0, 0, 20, 5)]) == []


def test_example_decisions():
    assert is_light_bar_shape(100, 2.0, 5)
    assert not is_light_bar_shape(600, 1.5, 4)


def test_vertex_bound_only_applies_to_large_branch():
    assert is_light_bar_shape(100, 2.0, 12)
    assert is_light_bar_shape(100, 2.0, 2)
    assert is_light_bar_shape(600, 3.0, 8)
    assert not is_light_bar_shape(600, 3.0, 9)
    assert not is_light_bar_shape(600, 3.0, 2)


def test_branch_boundaries():
    assert not is_light_bar_shape(25, 2.0, 4)
    assert is_light_bar_shape(25.5, 1.2, 4)
    assert is_light_bar_shape(499.9, 3.5, 4)
    assert not is_light_bar_shape(499.9, 3.6, 4)
    assert is_light_bar_shape(500, 2.0, 3)
    assert is_light_bar_shape(500, 6.0, 3)
    assert not is_light_bar_shape(500, 1.9, 4)


@pytest.mark.parametrize(
    "outline",
    [
        np.zeros((0, 2), dtype=np.int32),
        np.array([[3, 3]], dtype=np.int32),
        np.array([[0, 0], [10, 0]], dtype=np.int32),
        np.array([[0, 0], [10, 0], [20, 0]], dtype=np.int32),
        np.array([[5, 0], [5, 10], [5, 30], [5, 40]], dtype=np.int32),
    ],
)
def test_degenerate_outlines_yield_nothing(outline):
    assert classify([outline]) == []


def test_zero_area_centroid_raises():
    with pytest.raises(InvalidInputError):
        centroid(as_contour([[0, 0], [10, 0], [20, 0]]))


def test_order_preserved_and_one_candidate_per_outline():
    outlines = [
        rect_outline(200, 0, 10, 20),
        rect_outline(0, 0, 30, 30),
        rect_outline(0, 100, 10, 20),
    ]
    candidates = classify(outlines)

    assert [c.index for c in candidates] == [0, 2]
    assert [c.centroid for c in candidates] == [(205, 10), (5, 110)]


def test_accepts_opencv_contour_layout():
    contour = rect_outline(0, 0, 10, 20).reshape(-1, 1, 2)
    assert len(classify([contour])) == 1


def test_classify_is_idempotent():
    outlines = [rect_outline(0, 0, 10, 20), rect_outline(50, 50, 15, 60)]
    classifier = ShapeClassifier()

    assert classifier.classify(outlines) == classifier.classify(outlines)


def test_params_from_config_override_defaults():
    params = ClassifierParams.from_config({"small_min_aspect": 0.5, "large_max_vertices": 12})

    assert params.small_min_aspect == 0.5
    assert params.large_max_vertices == 12
    assert params.small_max_aspect == 3.5
    # a flat small bar passes once the lower aspect bound is relaxed
    assert len(classify([rect_outline(0, 0, 20, 14)], params)) == 1
