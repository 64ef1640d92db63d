from __future__ import annotations

import logging
import platform
import queue
import threading
from typing import Callable, List, Optional, Tuple

import cv2

from .types import DetectionBatch, DetectionResult

logger = logging.getLogger(__name__)

Detect = Callable[[object], List[DetectionResult]]


def open_camera(index: int, width: int, height: int):
    # On macOS, AVFoundation is the backend that triggers the camera permission prompt.
    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(index, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        raise RuntimeError(
            f"Could not open camera index {index}. "
            "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal."
        )
    resize_capture(cap, width, height)
    logger.info("camera %d opened", index)
    return cap


def resize_capture(cap, width: int, height: int) -> None:
    """Best effort: not every camera honours the requested size."""
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)


class DetectionLoop:
    """
    Background thread: read a frame, detect, push a `DetectionBatch`, repeat.

    The render loop is the only consumer of `out`. Detector errors are logged and the
    next detection is issued straight away; there is no backoff.
    """

    def __init__(
        self,
        capture,
        detect: Detect,
        out: "queue.Queue[DetectionBatch]",
        *,
        read_retry_s: float = 0.05,
    ) -> None:
        self.capture = capture
        self.detect = detect
        self.out = out
        self.read_retry_s = read_retry_s

        self._stop = threading.Event()
        self._resize_lock = threading.Lock()
        self._pending_size: Optional[Tuple[int, int]] = None
        self._thread: Optional[threading.Thread] = None
        self.errors = 0
        self.read_failures = 0

    def request_resize(self, width: int, height: int) -> None:
        with self._resize_lock:
            self._pending_size = (int(width), int(height))

    def _apply_pending_resize(self) -> None:
        with self._resize_lock:
            size = self._pending_size
            self._pending_size = None
        if size is not None:
            resize_capture(self.capture, *size)
            logger.info("capture resized to %dx%d", size[0], size[1])

    def step(self) -> Optional[DetectionBatch]:
        """One read-detect-publish cycle. Returns the published batch, if any."""
        self._apply_pending_resize()
        ok, frame = self.capture.read()
        if not ok or frame is None:
            self.read_failures += 1
            if self.read_failures == 1:
                logger.warning("camera read failed; retrying every %.2f s", self.read_retry_s)
            self._stop.wait(self.read_retry_s)
            return None

        if self.read_failures:
            logger.info("camera recovered after %d failed reads", self.read_failures)
            self.read_failures = 0

        try:
            results = self.detect(frame)
        except Exception:
            self.errors += 1
            logger.exception("detection failed")
            return None

        h, w = frame.shape[:2]
        batch = DetectionBatch(
            results=list(results or []),
            frame_width=w,
            frame_height=h,
        )
        self.out.put(batch)
        return batch

    def run(self) -> None:
        while not self._stop.is_set():
            self.step()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="detection-loop", daemon=True)
        self._thread.start()

    def stop(self, timeout_s: Optional[float] = 2.0) -> bool:
        """Ask the thread to finish and wait for it. Returns False if it is still running."""
        self._stop.set()
        if self._thread is None:
            return True
        self._thread.join(timeout_s)
        if self._thread.is_alive():
            logger.warning("detection thread still running %.1f s after stop", timeout_s or 0.0)
            return False
        self._thread = None
        return True

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> "DetectionLoop":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
