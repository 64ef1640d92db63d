from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import cv2

from .model_assets import ensure_object_detector_model
from .presence import PERSON_LABEL, is_qualifying
from .types import DetectionResult
from .utils import clamp_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    detector: object


def _create_tasks_backend(
    model_path: str,
    max_results: int,
    score_threshold: float,
    labels: Optional[Sequence[str]],
) -> _TasksBackend:
    import mediapipe as mp  # type: ignore

    # Import locations can differ slightly across builds.
    try:
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import ObjectDetector, ObjectDetectorOptions, RunningMode  # type: ignore
    except ImportError:  # pragma: no cover
        from mediapipe.tasks import python as mp_python  # type: ignore

        BaseOptions = mp_python.BaseOptions
        vision = mp_python.vision
        ObjectDetector = vision.ObjectDetector
        ObjectDetectorOptions = vision.ObjectDetectorOptions
        RunningMode = vision.RunningMode

    model_path = ensure_object_detector_model(model_path)

    options = ObjectDetectorOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        max_results=max_results,
        score_threshold=score_threshold,
        category_allowlist=list(labels) if labels else None,
    )
    detector = ObjectDetector.create_from_options(options)
    return _TasksBackend(mp=mp, detector=detector)


def detections_from_result(result, frame_width: int, frame_height: int) -> List[DetectionResult]:
    """
    Convert a MediaPipe `ObjectDetectorResult` into `DetectionResult`s.

    Entries without a category or bounding box are skipped.
    """

    out: List[DetectionResult] = []
    for det in getattr(result, "detections", None) or []:
        categories = getattr(det, "categories", None) or []
        box = getattr(det, "bounding_box", None)
        if not categories or box is None:
            continue
        cat0 = categories[0]
        label = getattr(cat0, "category_name", None) or getattr(cat0, "display_name", None)
        if not label:
            continue
        score = getattr(cat0, "score", None)

        x0 = clamp_int(int(box.origin_x), 0, max(0, frame_width - 1))
        y0 = clamp_int(int(box.origin_y), 0, max(0, frame_height - 1))
        x1 = clamp_int(int(box.origin_x + box.width), 0, max(0, frame_width - 1))
        y1 = clamp_int(int(box.origin_y + box.height), 0, max(0, frame_height - 1))
        out.append(
            DetectionResult(
                label=label,
                width=float(box.width),
                score=float(score) if score is not None else None,
                bbox_px=(x0, y0, x1, y1),
            )
        )
    return out


class PersonDetector:
    """
    Object detector using the MediaPipe Tasks ObjectDetector (COCO labels).

    Input frames are expected as **BGR** images (OpenCV default). By default only
    "person" detections are reported.
    """

    def __init__(
        self,
        model_path: str = "models/efficientdet_lite0.tflite",
        max_results: int = 5,
        score_threshold: float = 0.5,
        labels: Optional[Sequence[str]] = (PERSON_LABEL,),
    ) -> None:
        try:
            self._tasks = _create_tasks_backend(model_path, max_results, score_threshold, labels)
        except FileNotFoundError as e:
            raise RuntimeError(
                "The MediaPipe object detector needs a model file on disk:\n"
                f"  {model_path}\n\n"
                "Download the model and try again (see README Models section)."
            ) from e
        self._timestamp_ms = 0

    def close(self) -> None:
        self._tasks.detector.close()

    def __enter__(self) -> "PersonDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _next_timestamp(self) -> int:
        # VIDEO mode requires strictly increasing timestamps.
        ts = int(time.monotonic() * 1000)
        if ts <= self._timestamp_ms:
            ts = self._timestamp_ms + 1
        self._timestamp_ms = ts
        return ts

    def detect(self, frame_bgr) -> List[DetectionResult]:
        h, w = frame_bgr.shape[:2]
        mp = self._tasks.mp
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._tasks.detector.detect_for_video(mp_image, self._next_timestamp())
        return detections_from_result(result, w, h)

    @staticmethod
    def draw(frame_bgr, detections: List[DetectionResult], near_fraction: float = 1.0 / 3.0):
        """Boxes for each detection; near-field people in green, others grey."""
        w = frame_bgr.shape[1]
        for d in detections:
            if d.bbox_px is None:
                continue
            x0, y0, x1, y1 = d.bbox_px
            color = (0, 255, 0) if is_qualifying(d, w, near_fraction) else (160, 160, 160)
            cv2.rectangle(frame_bgr, (x0, y0), (x1, y1), color, 2)
            label = d.label
            if d.score is not None:
                label = f"{label} {d.score:.2f}"
            cv2.putText(
                frame_bgr,
                label,
                (x0, max(0, y0 - 8)),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.6,
                (255, 255, 255),
                2,
                cv2.LINE_AA,
            )
        return frame_bgr
