"""
REST endpoints for the emotion-adaptive page.
"""
from typing import List
from fastapi import APIRouter, HTTPException, Response
import logging

from neuronav.config import Settings
from neuronav.errors import InitializationError
from neuronav.models import (
    AccessibilityRequest,
    EmotionObservation,
    LoginRequest,
    PageStatus,
    SuggestionRecord,
    ThemeRequest,
    VisibilityRequest,
)
from neuronav.page import AdaptivePage
from neuronav.suggestions import lookup_suggestion
from neuronav.visual import encode_jpeg


router = APIRouter()
settings = Settings()
page = AdaptivePage(settings)
logger = logging.getLogger(__name__)


@router.post("/session/start")
def session_start():
    """
    Open the camera, load the expression model and begin sampling.

    Returns:
        dict: Sampler status after start.
    """
    logger.debug("[api] /session/start")
    try:
        status = page.start()
    except InitializationError as e:
        logger.warning(f"[api] session start failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "started", "sampler": status.model_dump()}

@router.post("/session/stop")
def session_stop():
    page.stop()
    return {"status": "stopped"}

@router.post("/detection/start")
async def detection_start():
    if page.sampler.start_detection():
        return {"status": "started"}
    return {"status": "already_running" if page.sampler.is_detecting else "not_ready"}

@router.post("/detection/stop")
def detection_stop():
    if not page.sampler.is_detecting:
        return {"status": "not_running"}
    page.sampler.stop_detection()
    return {"status": "stopped"}

@router.post("/visibility")
def visibility(req: VisibilityRequest):
    detecting = page.set_visibility(req.visible)
    return {"visible": req.visible, "detecting": detecting}

@router.get("/status", response_model=PageStatus)
async def status():
    return page.status()

@router.get("/history", response_model=List[EmotionObservation])
async def history():
    return page.sampler.history()

@router.get("/suggestions/{emotion}", response_model=SuggestionRecord)
async def suggestion(emotion: str):
    """Suggestion record for an emotion; unknown labels get the neutral record."""
    return lookup_suggestion(emotion)

@router.post("/theme", response_model=PageStatus)
async def set_theme(req: ThemeRequest):
    """
    Manually choose a theme. Automatic themes stay suppressed until cleared
    with DELETE /theme (or an empty theme).
    """
    try:
        page.set_manual_theme(req.theme)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return page.status()

@router.delete("/theme", response_model=PageStatus)
async def clear_theme():
    page.set_manual_theme(None)
    return page.status()

@router.post("/accessibility", response_model=PageStatus)
async def accessibility(req: AccessibilityRequest):
    page.set_accessibility(req.high_contrast, req.large_text, req.reduce_motion)
    return page.status()

@router.post("/login")
async def login(req: LoginRequest):
    """
    Validate the login form and store the accessibility preferences.

    Returns:
        dict: Redirect target and the stored preference blob.
    """
    try:
        prefs = page.login(req.email, req.password, req.high_contrast, req.large_text, req.reduce_motion)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"redirect": "home", "preferences": prefs.model_dump(by_alias=True)}

@router.get("/preferences")
async def preferences():
    prefs = page.load_preferences()
    if prefs is None:
        raise HTTPException(status_code=404, detail="No stored preferences")
    return prefs.model_dump(by_alias=True)

@router.get("/overlay.jpg")
async def overlay():
    frame = page.overlay_frame()
    if frame is None:
        raise HTTPException(status_code=404, detail="No frame captured yet")
    try:
        data = encode_jpeg(frame)
    except Exception as e:
        logger.exception("[api] overlay encoding failed")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(content=data, media_type="image/jpeg")
