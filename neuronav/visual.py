
"""Overlay drawing for the live camera preview.

- draw_overlays: draw the face rectangle & emotion label, or a status flag (NO_FACE / ERROR)
"""
from __future__ import annotations
import cv2
import numpy as np
from typing import Optional, Tuple

from neuronav.models import FaceRegion

FLAG_TEXT = {"no_face": "NO_FACE", "error": "ERROR"}


def draw_overlays(frame: np.ndarray,
                  region: Optional[FaceRegion] = None,
                  label: Optional[str] = None,
                  flag: Optional[str] = None,
                  color: Tuple[int, int, int] = (0, 255, 0)) -> np.ndarray:
    """Draw a bounding box and label on a copy of the frame.

    Args:
        frame: BGR image
        region: detected face box, if any
        label: emotion label drawn above the box
        flag: "no_face" or "error" to draw a status flag instead of a box
        color: BGR color for the rectangle

    Returns:
        Annotated copy of the frame
    """
    out = frame.copy()
    h, w = out.shape[:2]

    if flag in FLAG_TEXT:
        cv2.putText(out, FLAG_TEXT[flag], (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 255), 2, cv2.LINE_AA)
        return out
    if region is None:
        return out

    x, y, fw, fh = region.x, region.y, region.w, region.h
    # clamp to image bounds
    x = max(0, min(x, w-1)); y = max(0, min(y, h-1))
    fw = max(0, min(fw, w-x)); fh = max(0, min(fh, h-y))

    cv2.rectangle(out, (x, y), (x+fw, y+fh), color, 2)
    if label:
        cv2.putText(out, label, (x, max(0, y-10)), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2, cv2.LINE_AA)
    return out


def encode_jpeg(frame: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".jpg", frame)
    if not ok:
        raise RuntimeError("JPEG encoding failed")
    return buf.tobytes()
