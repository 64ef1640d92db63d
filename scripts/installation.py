from __future__ import annotations

import argparse
import logging
import os
import random
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from whisperwood_eye.config import PRESETS, get_preset  # noqa: E402
from whisperwood_eye.detection_loop import DetectionLoop, open_camera  # noqa: E402
from whisperwood_eye.detector import PersonDetector  # noqa: E402
from whisperwood_eye.drawing import new_canvas, render_scene  # noqa: E402
from whisperwood_eye.installation import Installation  # noqa: E402
from whisperwood_eye.logging_config import configure_logging  # noqa: E402
from whisperwood_eye.utils import monotonic_ms  # noqa: E402

logger = logging.getLogger("whisperwood")

WINDOW_NAME = "whisperwood"


def _is_fullscreen(window_name: str) -> bool:
    return cv2.getWindowProperty(window_name, cv2.WND_PROP_FULLSCREEN) == cv2.WINDOW_FULLSCREEN


def _request_fullscreen(window_name: str) -> None:
    if not _is_fullscreen(window_name):
        cv2.setWindowProperty(window_name, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)
        logger.info("entered full screen")


def _on_mouse(event, x, y, flags, window_name) -> None:
    # Any press or touch asks for full screen.
    if event in (cv2.EVENT_LBUTTONDOWN, cv2.EVENT_RBUTTONDOWN):
        _request_fullscreen(window_name)


def _viewport_size(window_name: str, fallback):
    try:
        _, _, w, h = cv2.getWindowImageRect(window_name)
    except cv2.error:
        return fallback
    if w <= 0 or h <= 0:
        return fallback
    return (w, h)


def main() -> int:
    ap = argparse.ArgumentParser(description="Webcam-driven glitch-text installation.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=1280, help="Canvas/capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Canvas/capture height (best effort)")
    ap.add_argument("--preset", choices=sorted(PRESETS), default="refined", help="Timing/behaviour preset")
    ap.add_argument("--type-speed", type=float, default=None, help="Milliseconds per typed character")
    ap.add_argument(
        "--keep-history",
        action="store_true",
        help="Keep the message history when the viewer leaves (default clears it)",
    )
    ap.add_argument("--seed", type=int, default=None, help="Seed for message and timing randomness")
    ap.add_argument("--fps", type=float, default=60.0, help="Render rate")
    ap.add_argument("--windowed", action="store_true", help="Start in a window instead of full screen")
    ap.add_argument(
        "--model",
        default="models/efficientdet_lite0.tflite",
        help="Path to MediaPipe object detector model (auto-downloaded if missing)",
    )
    ap.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    args = ap.parse_args()

    configure_logging(args.log_level.upper())

    config = get_preset(args.preset)
    if args.type_speed is not None:
        config = config.with_overrides(type_speed_ms=args.type_speed)
    if args.keep_history:
        config = config.with_overrides(clear_history_on_presence_lost=False)

    rng = random.Random(args.seed)
    installation = Installation(config, now_ms=monotonic_ms(), rng=rng)

    cap = open_camera(args.camera, args.width, args.height)

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(WINDOW_NAME, args.width, args.height)
    cv2.setMouseCallback(WINDOW_NAME, _on_mouse, WINDOW_NAME)
    if not args.windowed:
        _request_fullscreen(WINDOW_NAME)

    size = (args.width, args.height)
    canvas = new_canvas(size)
    wait_ms = max(1, int(round(1000.0 / max(1.0, args.fps))))

    detector = None
    loop = None
    try:
        detector = PersonDetector(model_path=args.model)
        loop = DetectionLoop(cap, detector.detect, installation.detections)
        loop.start()
        while True:
            viewport = _viewport_size(WINDOW_NAME, size)
            if viewport != size:
                size = viewport
                canvas = new_canvas(size)
                loop.request_resize(*size)

            scene = installation.update(monotonic_ms())
            render_scene(canvas, scene, config)

            cv2.imshow(WINDOW_NAME, canvas)
            key = cv2.waitKey(wait_ms) & 0xFF
            if key in (ord("q"), 27):
                break
            if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                break
    finally:
        # The camera and detector belong to the detection thread until it has stopped.
        if loop is None or loop.stop():
            if detector is not None:
                detector.close()
            cap.release()
        else:
            logger.warning("detection thread did not stop; leaving camera and detector to process exit")
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
