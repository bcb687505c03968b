"""
Pydantic data models for samples, observations, suggestions and API IO.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, FrozenSet, List, Optional, Literal

EmotionLabel = Literal["happy", "sad", "angry", "fearful", "disgusted", "surprised", "neutral"]
ObservationLabel = Literal[
    "happy", "sad", "angry", "fearful", "disgusted", "surprised", "neutral",
    "no_face", "detecting", "error",
]

# Declaration order doubles as the tie-break order for dominant emotion.
EMOTIONS = ("happy", "sad", "angry", "fearful", "disgusted", "surprised", "neutral")
STATUS_LABELS = ("no_face", "detecting", "error")


class ExpressionSample(BaseModel):
    """One model output: emotion label -> confidence for a single frame."""
    model_config = ConfigDict(frozen=True)

    scores: Dict[EmotionLabel, float] = Field(default_factory=dict)

    @field_validator("scores")
    @classmethod
    def _scores_in_unit_range(cls, v: Dict[str, float]) -> Dict[str, float]:
        for label, score in v.items():
            if not (0.0 <= score <= 1.0):
                raise ValueError(f"confidence for {label} out of range: {score}")
        return v


class FaceRegion(BaseModel):
    x: int
    y: int
    w: int
    h: int


class FaceDetection(BaseModel):
    region: FaceRegion
    expressions: ExpressionSample


class EmotionObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    emotion: ObservationLabel
    confidence: float = Field(ge=0.0, le=1.0)
    ts: float


class AdaptationEvent(BaseModel):
    """Payload delivered to adaptation callbacks once per tick."""
    emotion: ObservationLabel
    confidence: float
    expressions: Optional[Dict[EmotionLabel, float]] = None
    recent: List[EmotionObservation] = Field(default_factory=list)
    face_detected: bool
    region: Optional[FaceRegion] = None
    ts: float


# suggestion table

class ThemeColors(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    background: str
    text: str


class SuggestionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    theme_id: str
    message: str
    product_tags: FrozenSet[str]
    colors: ThemeColors
    spacing: Literal["compact", "normal", "relaxed"] = "normal"


# persisted preferences

class UserPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    high_contrast: bool = Field(False, alias="highContrast")
    large_text: bool = Field(False, alias="largeText")
    reduce_motion: bool = Field(False, alias="reduceMotion")
    timestamp: int = 0


# page / API models

class PageSnapshot(BaseModel):
    theme: Optional[str] = None
    classes: List[str] = Field(default_factory=list)
    colors: Optional[ThemeColors] = None
    spacing: Optional[str] = None
    message: Optional[str] = None
    message_visible: bool = False
    emotion_text: str = ""
    emotion_tooltip: Optional[str] = None
    camera_available: bool = True
    fallback_message: Optional[str] = None
    high_contrast: bool = False
    large_text: bool = False
    reduce_motion: bool = False


class SamplerStatus(BaseModel):
    state: Literal["uninitialized", "initializing", "ready", "failed", "destroyed"]
    detecting: bool
    current_emotion: EmotionLabel
    current_confidence: float
    history_size: int
    last_observation: Optional[EmotionObservation] = None


class PageStatus(BaseModel):
    sampler: SamplerStatus
    page: PageSnapshot
    manual_theme: Optional[str] = None


class ThemeRequest(BaseModel):
    theme: Optional[str] = None


class AccessibilityRequest(BaseModel):
    high_contrast: Optional[bool] = None
    large_text: Optional[bool] = None
    reduce_motion: Optional[bool] = None


class VisibilityRequest(BaseModel):
    visible: bool


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    high_contrast: bool = False
    large_text: bool = False
    reduce_motion: bool = False
