import numpy as np

from core.detections import BoundingBox, FrameDetections, LightBarCandidate, PairedMatch
from core.renderer import Renderer

GREEN = [0, 255, 0]
RED = [0, 0, 255]


def bar(x, y):
    return LightBarCandidate(
        area=200.0,
        centroid=(x, y),
        bounding_box=BoundingBox(x - 5, y - 10, 10, 20),
        aspect_ratio=2.0,
        validated=True,
    )


def quiet_renderer():
    return Renderer(config={"label": {"show_counts": False}})


def test_render_draws_center_and_box_on_copy():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    b = bar(15, 20)

    out = quiet_renderer().render(frame, FrameDetections(bars=[b]))

    assert out.shape == frame.shape
    assert frame.sum() == 0
    assert out[20, 15].tolist() == GREEN
    assert out[10, 10].tolist() == RED


def test_render_links_pairs():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    a, b = bar(20, 50), bar(80, 50)
    detections = FrameDetections(bars=[a, b], pairs=[PairedMatch(a, b)])

    out = quiet_renderer().render(frame, detections)

    assert out[50, 50].tolist() == RED


def test_render_without_detections_is_identical():
    frame = np.full((40, 40, 3), 7, dtype=np.uint8)

    out = quiet_renderer().render(frame, FrameDetections())

    assert np.array_equal(out, frame)
    assert out is not frame


def test_colors_from_config():
    renderer = Renderer(config={"center": {"color": [255, 0, 0], "radius": 2}, "label": {"show_counts": False}})
    frame = np.zeros((60, 60, 3), dtype=np.uint8)

    out = renderer.render(frame, FrameDetections(bars=[bar(30, 30)]))

    assert out[30, 30].tolist() == [255, 0, 0]
