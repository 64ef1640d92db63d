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

from whisperwood_eye.detector import PersonDetector  # noqa: E402
from whisperwood_eye.presence import is_qualifying  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Image person detector demo.")
    ap.add_argument("--image", required=True, help="Path to input image")
    ap.add_argument("--out", required=True, help="Path to output image (annotated)")
    ap.add_argument("--model", default="models/efficientdet_lite0.tflite")
    args = ap.parse_args()

    frame = cv2.imread(args.image)
    if frame is None:
        raise RuntimeError(f"Could not read image: {args.image}")

    w = frame.shape[1]
    with PersonDetector(model_path=args.model) as detector:
        people = detector.detect(frame)
        out = detector.draw(frame, people)

    ok = cv2.imwrite(args.out, out)
    if not ok:
        raise RuntimeError(f"Could not write output image: {args.out}")

    print(f"people: {len(people)}")
    for i, d in enumerate(people):
        print(f"[{i}] {d.label} score={d.score} width={d.width:.0f} bbox={d.bbox_px} near={is_qualifying(d, w)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
