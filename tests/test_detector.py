from types import SimpleNamespace

import numpy as np

from whisperwood_eye.detector import PersonDetector, detections_from_result
from whisperwood_eye.types import DetectionResult


def _det(name, score, x, y, w, h):
    return SimpleNamespace(
        categories=[SimpleNamespace(category_name=name, score=score)],
        bounding_box=SimpleNamespace(origin_x=x, origin_y=y, width=w, height=h),
    )


def test_converts_mediapipe_detections():
    result = SimpleNamespace(detections=[_det("person", 0.9, 100, 50, 500, 600)])
    out = detections_from_result(result, 1280, 720)
    assert out == [DetectionResult("person", 500.0, 0.9, (100, 50, 600, 650))]


def test_box_is_clamped_but_width_is_raw():
    result = SimpleNamespace(detections=[_det("person", 0.5, 1000, 600, 500, 300)])
    (d,) = detections_from_result(result, 1280, 720)
    assert d.width == 500.0
    assert d.bbox_px == (1000, 600, 1279, 719)


def test_skips_incomplete_detections():
    result = SimpleNamespace(
        detections=[
            SimpleNamespace(categories=[], bounding_box=SimpleNamespace(origin_x=0, origin_y=0, width=1, height=1)),
            SimpleNamespace(categories=[SimpleNamespace(category_name="person", score=0.7)], bounding_box=None),
            _det("", 0.7, 0, 0, 10, 10),
        ]
    )
    assert detections_from_result(result, 640, 480) == []


def test_empty_result():
    assert detections_from_result(SimpleNamespace(detections=None), 640, 480) == []
    assert detections_from_result(object(), 640, 480) == []


def test_draw_marks_near_people():
    frame = np.zeros((300, 600, 3), dtype=np.uint8)
    near = DetectionResult("person", 300.0, 0.8, (10, 40, 310, 290))
    PersonDetector.draw(frame, [near])
    assert tuple(int(v) for v in frame[150, 10]) == (0, 255, 0)
