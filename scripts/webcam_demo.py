from __future__ import annotations

import argparse
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from whisperwood_eye.detection_loop import open_camera  # noqa: E402
from whisperwood_eye.detector import PersonDetector  # noqa: E402
from whisperwood_eye.drawing import draw_text  # noqa: E402
from whisperwood_eye.logging_config import configure_logging  # noqa: E402
from whisperwood_eye.presence import PresenceTracker  # noqa: E402
from whisperwood_eye.types import DetectionBatch  # noqa: E402
from whisperwood_eye.utils import monotonic_ms  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Webcam person detector / presence debug view.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=1280, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument("--near-fraction", type=float, default=1.0 / 3.0, help="Box width / frame width to count as near")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument("--model", default="models/efficientdet_lite0.tflite")
    args = ap.parse_args()

    configure_logging("INFO")
    cap = open_camera(args.camera, args.width, args.height)
    tracker = PresenceTracker(near_fraction=args.near_fraction)

    try:
        with PersonDetector(model_path=args.model) as detector:
            while True:
                ok, frame = cap.read()
                if not ok:
                    break

                if not args.no_mirror:
                    frame = cv2.flip(frame, 1)

                now = monotonic_ms()
                people = detector.detect(frame)
                h, w = frame.shape[:2]
                tracker.update(DetectionBatch(people, w, h), now)
                frame = detector.draw(frame, people, near_fraction=args.near_fraction)

                # Near-field threshold marker
                cv2.line(frame, (0, h - 6), (int(w * args.near_fraction), h - 6), (0, 255, 255), 3)
                state = "present" if tracker.is_present else ("grace" if tracker.display_active(now) else "absent")
                draw_text(frame, f"people: {len(people)} | {state} | press q to quit", (12, 28), scale=0.8)

                cv2.imshow("whisperwood - presence", frame)
                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), 27):
                    break
    finally:
        cap.release()
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
