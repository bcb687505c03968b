"""
Configuration for the emotion-adaptive page.
"""
from pydantic import BaseModel
import os

class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    DETECTION_INTERVAL: float = float(os.getenv("DETECTION_INTERVAL", "1"))
    DETECT_TIMEOUT: float = float(os.getenv("DETECT_TIMEOUT", "5"))
    HISTORY_SIZE: int = int(os.getenv("HISTORY_SIZE", "20"))
    EVENT_HISTORY_SIZE: int = int(os.getenv("EVENT_HISTORY_SIZE", "5"))
    CONFIDENCE_THRESHOLD: float = float(os.getenv("CONFIDENCE_THRESHOLD", "0.30"))

    DEBOUNCE_SECONDS: float = float(os.getenv("DEBOUNCE_SECONDS", "2"))
    MESSAGE_SECONDS: float = float(os.getenv("MESSAGE_SECONDS", "3"))

    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    FRAME_WIDTH: int = int(os.getenv("FRAME_WIDTH", "640"))
    FRAME_HEIGHT: int = int(os.getenv("FRAME_HEIGHT", "480"))
    DETECTOR_BACKEND: str = (os.getenv("DETECTOR_BACKEND", "opencv") or "opencv")
    MIN_FACE_SIZE: int = int(os.getenv("MIN_FACE_SIZE", "40"))

    PREFERENCES_PATH: str = os.getenv("PREFERENCES_PATH", "data/user_preferences.json")

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize DETECTOR_BACKEND: strip comments/extra words, lower-case, validate
        backend = (self.DETECTOR_BACKEND or "opencv").strip().split()[0].lower()
        if backend not in ("opencv", "ssd", "mtcnn", "retinaface", "mediapipe", "yunet"):
            backend = "opencv"
        object.__setattr__(self, "DETECTOR_BACKEND", backend)
        object.__setattr__(self, "HISTORY_SIZE", max(1, int(self.HISTORY_SIZE)))
        object.__setattr__(self, "EVENT_HISTORY_SIZE", max(1, int(self.EVENT_HISTORY_SIZE)))
        object.__setattr__(self, "DETECTION_INTERVAL", max(0.001, float(self.DETECTION_INTERVAL)))
