# neuronav/adaptation.py
"""
Adaptation dispatcher: turns sampler observations into theme changes and
suggestion messages on the page.

- Manual theme selection always wins until cleared.
- The first qualifying observation opens a debounce window; later observations
  inside the window only replace the pending suggestion (last one wins), so at
  most one application is pending at any time.
- A shown message fades out after MESSAGE_SECONDS.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from neuronav.config import Settings
from neuronav.models import EMOTIONS, AdaptationEvent, SuggestionRecord
from neuronav.suggestions import DEFAULT_THEME, THEMES, lookup_suggestion
from neuronav.ui import PageState

logger = logging.getLogger(__name__)


class AdaptationDispatcher:
    def __init__(self, page: PageState, settings: Settings,
                 timer_factory: Callable[..., threading.Timer] = threading.Timer):
        self.page = page
        self.s = settings
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._manual_theme: Optional[str] = None
        self._pending: Optional[SuggestionRecord] = None
        self._pending_timer: Optional[threading.Timer] = None
        self._fade_timer: Optional[threading.Timer] = None
        self._last_applied: Optional[SuggestionRecord] = None
        # bumped per debounce window / shown message; stale timers compare and bail
        self._window = 0
        self._message_gen = 0

    @property
    def manual_theme(self) -> Optional[str]:
        return self._manual_theme

    @property
    def has_pending(self) -> bool:
        return self._pending_timer is not None

    @staticmethod
    def lookup_suggestion(emotion: str) -> SuggestionRecord:
        return lookup_suggestion(emotion)

    def _start_timer(self, delay: float, fn, *args):
        timer = self._timer_factory(delay, fn, args=args)
        timer.daemon = True
        timer.start()
        return timer

    # ---- sampler callback ----
    def on_observation(self, event: AdaptationEvent) -> None:
        if not event.face_detected or event.emotion not in EMOTIONS:
            return
        suggestion = self.lookup_suggestion(event.emotion)
        with self._lock:
            if self._manual_theme is not None:
                logger.debug(f"[adapt] manual theme '{self._manual_theme}' active; skipping {event.emotion}")
                return
            self._pending = suggestion
            if self._pending_timer is None:
                logger.debug(f"[adapt] scheduling '{suggestion.theme_id}' in {self.s.DEBOUNCE_SECONDS}s")
                self._window += 1
                self._pending_timer = self._start_timer(
                    self.s.DEBOUNCE_SECONDS, self._apply_pending, self._window
                )

    def _apply_pending(self, window: int) -> None:
        # page writes happen under the lock so a concurrent manual choice lands after them
        with self._lock:
            if window != self._window or self._pending_timer is None:
                return
            suggestion, self._pending = self._pending, None
            self._pending_timer = None
            if suggestion is None or self._manual_theme is not None:
                return
            if suggestion == self._last_applied:
                logger.debug(f"[adapt] '{suggestion.theme_id}' already applied")
                return
            self._last_applied = suggestion
            self._apply(suggestion)
            self._show_message(suggestion.message)

    def _apply(self, suggestion: SuggestionRecord) -> None:
        theme = None if suggestion.theme_id == DEFAULT_THEME else suggestion.theme_id
        self.page.set_theme(theme, suggestion.colors, suggestion.spacing)
        logger.info(f"[adapt] applied theme: {suggestion.theme_id}")

    # ---- page actions ----
    def apply_theme(self, theme_id: Optional[str]) -> None:
        """Set exactly one known theme on the page, or none for default/None."""
        if not theme_id or theme_id == DEFAULT_THEME:
            self.page.set_theme(None)
        elif theme_id in THEMES:
            self.page.set_theme(theme_id)
        else:
            raise ValueError(f"Unknown theme: {theme_id}")
        logger.info(f"[adapt] applied theme: {theme_id or DEFAULT_THEME}")

    def set_manual_theme(self, theme_id: Optional[str]) -> None:
        """Apply a user-chosen theme and suppress automatic themes; None/'' clears."""
        if not theme_id:
            self.clear_manual_theme()
            return
        if theme_id != DEFAULT_THEME and theme_id not in THEMES:
            raise ValueError(f"Unknown theme: {theme_id}")
        with self._lock:
            self._manual_theme = theme_id
            self._cancel_pending()
            self.apply_theme(theme_id)

    def clear_manual_theme(self) -> None:
        with self._lock:
            self._manual_theme = None
            self._last_applied = None

    def show_message(self, text: str) -> None:
        with self._lock:
            self._show_message(text)

    def _show_message(self, text: str) -> None:
        self.page.show_message(text)
        if self._fade_timer is not None:
            self._fade_timer.cancel()
        self._message_gen += 1
        self._fade_timer = self._start_timer(self.s.MESSAGE_SECONDS, self._fade_message, self._message_gen)

    def _fade_message(self, gen: int) -> None:
        with self._lock:
            if gen != self._message_gen:
                return
            self._fade_timer = None
            self.page.hide_message()

    def _cancel_pending(self) -> None:
        if self._pending_timer is not None:
            self._pending_timer.cancel()
        self._pending_timer = None
        self._pending = None

    def shutdown(self) -> None:
        with self._lock:
            self._cancel_pending()
            if self._fade_timer is not None:
                self._fade_timer.cancel()
                self._fade_timer = None
