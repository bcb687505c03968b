"""Emoji + label text for the emotion indicator."""
from __future__ import annotations
from typing import Optional, Tuple

from neuronav.models import EMOTIONS

EMOTION_EMOJIS = {
    "happy": "\U0001F60A",
    "sad": "\U0001F622",
    "angry": "\U0001F620",
    "fearful": "\U0001F628",
    "disgusted": "\U0001F922",
    "surprised": "\U0001F632",
    "neutral": "\U0001F610",
    "no_face": "❓",
    "detecting": "\U0001F50D",
    "error": "⚠️",
}

EMOTION_LABELS = {
    "happy": "Happy",
    "sad": "Sad",
    "angry": "Frustrated",
    "fearful": "Anxious",
    "disgusted": "Uncomfortable",
    "surprised": "Surprised",
    "neutral": "Calm",
    "no_face": "No face detected",
    "detecting": "Detecting...",
    "error": "Detection error",
}

CAMERA_UNAVAILABLE = "⚠️ Camera unavailable"


def describe(emotion: str, confidence: float = 0.0) -> Tuple[str, Optional[str]]:
    """Return (display text, tooltip) for an observed label."""
    emoji = EMOTION_EMOJIS.get(emotion, EMOTION_EMOJIS["neutral"])
    label = EMOTION_LABELS.get(emotion, "Unknown")
    tooltip = None
    if emotion in EMOTIONS:
        tooltip = f"Confidence: {round(confidence * 100)}%"
    return f"{emoji} {label}", tooltip
