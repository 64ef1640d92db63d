from __future__ import annotations

import logging
import os
import ssl
import subprocess
import urllib.request

logger = logging.getLogger(__name__)

OBJECT_DETECTOR_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/object_detector/efficientdet_lite0/int8/latest/efficientdet_lite0.tflite"
)


def _remove_partial(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError:
        logger.warning("could not remove partial download %s", path)


def ensure_object_detector_model(model_path: str, *, url: str = OBJECT_DETECTOR_MODEL_URL, timeout_s: int = 30) -> str:
    """
    Ensure the object detector `.tflite` model exists at `model_path`.

    If missing, attempts to download it from the MediaPipe model bucket, falling back to curl.
    """

    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("downloading object detector model to %s", model_path)

    try:
        # Some macOS Python builds ship without root certificates; prefer certifi when present.
        try:
            import certifi  # type: ignore

            ctx = ssl.create_default_context(cafile=certifi.where())
        except ImportError:
            ctx = ssl.create_default_context()

        with urllib.request.urlopen(url, context=ctx, timeout=timeout_s) as r, open(model_path, "wb") as f:
            f.write(r.read())
        return model_path
    except Exception as e:
        _remove_partial(model_path)
        logger.warning("python download failed (%s), trying curl", e)
        py_error = e

    proc = None
    try:
        proc = subprocess.run(
            ["curl", "-L", "-o", model_path, url],
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        if proc.returncode == 0 and os.path.exists(model_path) and os.path.getsize(model_path) > 0:
            return model_path
    except OSError:
        proc = None

    _remove_partial(model_path)

    curl_err = ""
    if proc is not None:
        curl_err = f"\n\ncurl stderr:\n{proc.stderr.strip()}\n"
    raise RuntimeError(
        "Missing MediaPipe object detector model and auto-download failed.\n\n"
        f"Expected model at: {model_path}\n"
        f"URL: {url}\n\n"
        "Download it manually:\n"
        f'  mkdir -p "{os.path.dirname(model_path) or "."}"\n'
        f'  curl -L -o "{model_path}" "{url}"\n'
        f"{curl_err}"
    ) from py_error
