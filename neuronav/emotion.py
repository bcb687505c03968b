"""
Emotion reduction: DeepFace output -> ExpressionSample -> dominant emotion.
"""
# neuronav/emotion.py
from __future__ import annotations
from typing import Dict, Mapping, Tuple
import logging

from pydantic import ValidationError

from neuronav.errors import DetectionError
from neuronav.models import EMOTIONS, ExpressionSample

logger = logging.getLogger(__name__)

# DeepFace label -> our label
DEEPFACE_LABELS: Dict[str, str] = {
    "angry": "angry",
    "disgust": "disgusted",
    "fear": "fearful",
    "happy": "happy",
    "sad": "sad",
    "surprise": "surprised",
    "neutral": "neutral",
}


def dominant_emotion(sample: ExpressionSample) -> Tuple[str, float]:
    """
    Argmax over the sample's scores.

    Labels are visited in EMOTIONS order with a strict comparison, so ties go to
    the earlier label and an all-zero (or empty) sample yields ("neutral", 0.0).
    """
    best_label, best = "neutral", 0.0
    for label in EMOTIONS:
        score = sample.scores.get(label, 0.0)
        if score > best:
            best_label, best = label, score
    return best_label, float(best)


def apply_deadband(
    label: str,
    confidence: float,
    previous_label: str,
    previous_confidence: float,
    threshold: float = 0.30,
) -> Tuple[str, float]:
    """Keep the previous reading when the new one is below threshold."""
    if confidence < threshold:
        return previous_label, previous_confidence
    return label, confidence


def expressions_from_deepface(raw: Mapping) -> ExpressionSample:
    """
    Convert a DeepFace ``emotion`` dict (percentages, DeepFace label names)
    into an ExpressionSample in [0, 1].

    Raises:
        DetectionError: for anything that is not a mapping of known labels to numbers in 0..100.
    """
    if not isinstance(raw, Mapping) or not raw:
        raise DetectionError(f"malformed expression data: {raw!r}")

    scores: Dict[str, float] = {}
    for key, value in raw.items():
        label = DEEPFACE_LABELS.get(str(key).lower())
        if label is None:
            raise DetectionError(f"unknown expression label: {key!r}")
        try:
            pct = float(value)
        except (TypeError, ValueError) as e:
            raise DetectionError(f"non-numeric score for {key!r}: {value!r}") from e
        scores[label] = pct / 100.0

    try:
        return ExpressionSample(scores=scores)
    except ValidationError as e:
        raise DetectionError(f"invalid expression scores: {scores}") from e
