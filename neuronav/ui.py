"""
In-memory page surface: theme marker, message banner, accessibility toggles
and the emotion indicator. Web clients render from ``snapshot()``.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from neuronav.models import PageSnapshot, ThemeColors

logger = logging.getLogger(__name__)


class PageState:
    def __init__(self):
        self._lock = threading.Lock()
        self._theme: Optional[str] = None
        self._colors: Optional[ThemeColors] = None
        self._spacing: Optional[str] = None
        self._message: Optional[str] = None
        self._message_visible = False
        self._emotion_text = ""
        self._emotion_tooltip: Optional[str] = None
        self._camera_available = True
        self._fallback_message: Optional[str] = None
        self._accessibility = {"high_contrast": False, "large_text": False, "reduce_motion": False}

    @property
    def theme(self) -> Optional[str]:
        return self._theme

    @property
    def message_visible(self) -> bool:
        return self._message_visible

    def set_theme(self, theme: Optional[str], colors: Optional[ThemeColors] = None,
                  spacing: Optional[str] = None) -> None:
        """Replace the active theme marker (None = default look)."""
        with self._lock:
            self._theme = theme
            self._colors = colors
            self._spacing = spacing
        logger.debug(f"[page] theme={theme}")

    def show_message(self, text: str) -> None:
        with self._lock:
            self._message = text
            self._message_visible = True

    def hide_message(self) -> None:
        # text stays so a fading banner keeps its content
        with self._lock:
            self._message_visible = False

    def set_emotion_display(self, text: str, tooltip: Optional[str] = None) -> None:
        with self._lock:
            self._emotion_text = text
            self._emotion_tooltip = tooltip

    def set_camera_unavailable(self, text: str, reason: str, fallback_message: str) -> None:
        with self._lock:
            self._camera_available = False
            self._emotion_text = text
            self._emotion_tooltip = reason
            self._fallback_message = fallback_message

    def set_camera_available(self) -> None:
        with self._lock:
            self._camera_available = True
            self._fallback_message = None

    def set_accessibility(self, high_contrast: Optional[bool] = None, large_text: Optional[bool] = None,
                          reduce_motion: Optional[bool] = None) -> None:
        with self._lock:
            for key, value in (("high_contrast", high_contrast), ("large_text", large_text),
                               ("reduce_motion", reduce_motion)):
                if value is not None:
                    self._accessibility[key] = bool(value)

    def classes(self) -> list[str]:
        with self._lock:
            return self._classes()

    def _classes(self) -> list[str]:
        out = [f"theme-{self._theme}"] if self._theme else []
        for key, flag in self._accessibility.items():
            if flag:
                out.append(key.replace("_", "-"))
        return out

    def snapshot(self) -> PageSnapshot:
        with self._lock:
            return PageSnapshot(
                theme=self._theme,
                classes=self._classes(),
                colors=self._colors,
                spacing=self._spacing,
                message=self._message,
                message_visible=self._message_visible,
                emotion_text=self._emotion_text,
                emotion_tooltip=self._emotion_tooltip,
                camera_available=self._camera_available,
                fallback_message=self._fallback_message,
                **self._accessibility,
            )
