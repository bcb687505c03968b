"""
Composition root for the emotion-adaptive login/home page.

AdaptivePage owns one sampler, one dispatcher, the page state and the
preference store; whoever serves the page constructs it explicitly.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import numpy as np

from neuronav.adaptation import AdaptationDispatcher
from neuronav.config import Settings
from neuronav.display import CAMERA_UNAVAILABLE, describe
from neuronav.errors import InitializationError
from neuronav.models import STATUS_LABELS, AdaptationEvent, PageStatus, SamplerStatus, UserPreferences
from neuronav.preferences import PreferenceStore
from neuronav.sampler import EmotionSampler
from neuronav.ui import PageState
from neuronav.visual import draw_overlays

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Emotion detection is unavailable. You can still choose a theme manually."


class AdaptivePage:
    def __init__(
        self,
        settings: Settings,
        video=None,
        detector=None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
        store: Optional[PreferenceStore] = None,
    ):
        self.s = settings
        self.page = PageState()
        self.sampler = EmotionSampler(settings, video=video, detector=detector)
        self.dispatcher = AdaptationDispatcher(self.page, settings, timer_factory=timer_factory)
        self.store = store if store is not None else PreferenceStore(settings.PREFERENCES_PATH)
        self._wired = False

    # ---- session ----
    def start(self) -> SamplerStatus:
        """
        Initialize the sampler, wire the display and dispatcher, start detection.

        Raises:
            InitializationError: camera/model unavailable; the page switches to
                the manual-theme fallback before re-raising.
        """
        self.page.set_emotion_display(*describe("detecting"))
        try:
            self.sampler.initialize()
        except InitializationError as e:
            logger.warning(f"[page] emotion detection unavailable: {e}")
            self.page.set_camera_unavailable(CAMERA_UNAVAILABLE, str(e), FALLBACK_MESSAGE)
            raise
        self.page.set_camera_available()
        if not self._wired:
            self.sampler.register_adaptation_callback(self._update_display)
            self.sampler.register_adaptation_callback(self.dispatcher.on_observation)
            self._wired = True
        self.sampler.start_detection()
        return self.sampler.status()

    def stop(self) -> None:
        self.sampler.destroy()
        self.dispatcher.shutdown()
        self._wired = False

    def set_visibility(self, visible: bool) -> bool:
        return self.sampler.set_visible(visible)

    def _update_display(self, event: AdaptationEvent) -> None:
        self.page.set_emotion_display(*describe(event.emotion, event.confidence))

    # ---- user actions ----
    def set_manual_theme(self, theme: Optional[str]) -> None:
        self.dispatcher.set_manual_theme(theme)

    def set_accessibility(self, high_contrast: Optional[bool] = None, large_text: Optional[bool] = None,
                          reduce_motion: Optional[bool] = None) -> None:
        self.page.set_accessibility(high_contrast, large_text, reduce_motion)

    def login(self, email: str, password: str, high_contrast: bool = False,
              large_text: bool = False, reduce_motion: bool = False) -> UserPreferences:
        """Validate the login form and persist the accessibility choices."""
        if not (email or "").strip() or not password:
            raise ValueError("Please fill in all fields")
        prefs = UserPreferences(
            high_contrast=high_contrast,
            large_text=large_text,
            reduce_motion=reduce_motion,
            timestamp=int(time.time() * 1000),
        )
        self.store.save(prefs)
        self.page.set_accessibility(high_contrast, large_text, reduce_motion)
        logger.info("[page] login accepted; preferences stored")
        return prefs

    def load_preferences(self) -> Optional[UserPreferences]:
        prefs = self.store.load()
        if prefs is not None:
            self.page.set_accessibility(prefs.high_contrast, prefs.large_text, prefs.reduce_motion)
        return prefs

    # ---- views ----
    def status(self) -> PageStatus:
        return PageStatus(
            sampler=self.sampler.status(),
            page=self.page.snapshot(),
            manual_theme=self.dispatcher.manual_theme,
        )

    def overlay_frame(self) -> Optional[np.ndarray]:
        """Latest camera frame with the face box and label drawn on it."""
        frame = self.sampler.latest_frame()
        if frame is None:
            return None
        last = self.sampler.status().last_observation
        flag = last.emotion if last is not None and last.emotion in STATUS_LABELS else None
        return draw_overlays(frame, self.sampler.last_region, self.sampler.current_emotion, flag)
