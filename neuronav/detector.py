"""
External capabilities: the webcam (OpenCV) and the expression model (DeepFace).

Both are plain objects with a small surface so the sampler can be driven by
fakes in tests:

- video:    open() / read() -> frame / release() / is_open
- detector: load() / detect(frame) -> FaceDetection | None
"""
# neuronav/detector.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

import cv2
import numpy as np

from neuronav.config import Settings
from neuronav.emotion import expressions_from_deepface
from neuronav.errors import DetectionError, InitializationError
from neuronav.models import FaceDetection, FaceRegion

logger = logging.getLogger(__name__)


class VideoSource:
    """Permission-gated webcam handle, released explicitly on stop/destroy."""
    def __init__(self, camera_index: int = 0, width: int = 640, height: int = 480):
        self.camera_index = int(camera_index)
        self.width = int(width)
        self.height = int(height)
        self._cap: Optional[cv2.VideoCapture] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "VideoSource":
        return cls(settings.CAMERA_INDEX, settings.FRAME_WIDTH, settings.FRAME_HEIGHT)

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def open(self) -> None:
        if self._cap is not None:
            return
        logger.debug(f"[video] opening camera index={self.camera_index}")
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            cap.release()
            raise InitializationError(
                "Could not access camera. Please ensure camera permissions are granted."
            )
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap

    def read(self) -> np.ndarray:
        if self._cap is None:
            raise DetectionError("camera is not open")
        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise DetectionError("camera returned no frame")
        return frame

    def release(self) -> None:
        if self._cap is not None:
            logger.debug(f"[video] releasing camera index={self.camera_index}")
            self._cap.release()
            self._cap = None


class DeepFaceDetector:
    """Single-face expression classifier backed by DeepFace."""
    def __init__(self, detector_backend: str = "opencv", min_face_size: int = 40):
        self.detector_backend = detector_backend
        self.min_face_size = int(min_face_size)
        self._deepface: Any = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeepFaceDetector":
        return cls(settings.DETECTOR_BACKEND, settings.MIN_FACE_SIZE)

    def load(self) -> None:
        if self._deepface is not None:
            return
        try:
            # Lazy import so tests can monkeypatch sys.modules['deepface']
            from deepface import DeepFace
        except Exception as e:
            raise InitializationError(
                "DeepFace import failed. Ensure deepface/tensorflow stack is installed."
            ) from e
        self._deepface = DeepFace
        logger.debug(f"[detector] DeepFace ready backend={self.detector_backend}")

    def _valid_face(self, r: Dict) -> bool:
        reg = (r or {}).get("region") or {}
        w = int(reg.get("w", 0)); h = int(reg.get("h", 0))
        if w < self.min_face_size or h < self.min_face_size:
            return False
        # enforce_detection=False reports the whole frame with confidence 0 when nothing is found
        conf = r.get("face_confidence", 1.0)
        try:
            conf = float(conf)
        except (TypeError, ValueError):
            conf = 1.0
        return conf > 0.0

    def detect(self, frame: np.ndarray) -> Optional[FaceDetection]:
        """
        Classify the first face in ``frame``.

        Returns:
            FaceDetection, or None when no face is found.

        Raises:
            DetectionError: on inference failure or malformed model output.
        """
        if self._deepface is None:
            raise DetectionError("detector not loaded")
        try:
            res = self._deepface.analyze(
                frame,
                actions=["emotion"],
                enforce_detection=False,
                detector_backend=self.detector_backend,
            )
        except Exception as e:
            raise DetectionError(f"emotion inference failed: {e}") from e

        # DeepFace returns list[dict] or dict depending on version; normalize to list
        results: List[Dict] = res if isinstance(res, list) else ([res] if isinstance(res, dict) else [])
        faces = [r for r in results if isinstance(r, dict) and self._valid_face(r)]
        logger.debug(f"[detector] faces_detected={len(faces)}")
        if not faces:
            return None

        r0 = faces[0]
        reg = r0.get("region") or {}
        region = FaceRegion(
            x=int(reg.get("x", 0)), y=int(reg.get("y", 0)),
            w=int(reg.get("w", 0)), h=int(reg.get("h", 0)),
        )
        return FaceDetection(region=region, expressions=expressions_from_deepface(r0.get("emotion")))
