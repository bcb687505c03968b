# neuronav/sampler.py
"""
Emotion sampler.

Polls the expression model once per DETECTION_INTERVAL on a background thread,
reduces each result to one dominant emotion (with a confidence deadband), keeps
a bounded history and notifies adaptation callbacks in registration order.

State machine:
    UNINITIALIZED -> INITIALIZING -> READY (detecting | idle) -> DESTROYED
                                  -> FAILED (initialize() may be retried)
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, List, Optional

import numpy as np

from neuronav.config import Settings
from neuronav.detector import DeepFaceDetector, VideoSource
from neuronav.emotion import apply_deadband, dominant_emotion
from neuronav.errors import DetectionError, InitializationError, ObserverError
from neuronav.history import EmotionHistory
from neuronav.models import (
    AdaptationEvent,
    EmotionObservation,
    FaceDetection,
    FaceRegion,
    SamplerStatus,
)

logger = logging.getLogger(__name__)

AdaptationCallback = Callable[[AdaptationEvent], None]


class SamplerState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"
    DESTROYED = "destroyed"


class EmotionSampler:
    """Owns the camera, the detector, the emotion history and the observer list."""
    def __init__(self, settings: Settings, video=None, detector=None):
        self.s = settings
        self._video = video if video is not None else VideoSource.from_settings(settings)
        self._detector = detector if detector is not None else DeepFaceDetector.from_settings(settings)

        self._state = SamplerState.UNINITIALIZED
        self._lock = threading.RLock()
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._inflight: Optional[Future] = None
        self._resume_on_visible = False

        self._callbacks: List[AdaptationCallback] = []
        self._history = EmotionHistory(settings.HISTORY_SIZE)
        self._current_emotion = "neutral"
        self._current_confidence = 0.0
        self._last_observation: Optional[EmotionObservation] = None
        self._last_frame: Optional[np.ndarray] = None
        self._last_region: Optional[FaceRegion] = None
        self.last_observer_error: Optional[ObserverError] = None

    # ---- read-only state ----
    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def is_detecting(self) -> bool:
        return self._thread is not None

    @property
    def current_emotion(self) -> str:
        return self._current_emotion

    @property
    def current_confidence(self) -> float:
        return self._current_confidence

    @property
    def last_region(self) -> Optional[FaceRegion]:
        return self._last_region

    def history(self) -> List[EmotionObservation]:
        with self._lock:
            return self._history.snapshot()

    def latest_frame(self) -> Optional[np.ndarray]:
        frame = self._last_frame
        return None if frame is None else frame.copy()

    def status(self) -> SamplerStatus:
        with self._lock:
            return SamplerStatus(
                state=self._state.value,
                detecting=self.is_detecting,
                current_emotion=self._current_emotion,
                current_confidence=self._current_confidence,
                history_size=len(self._history),
                last_observation=self._last_observation,
            )

    # ---- lifecycle ----
    def initialize(self) -> None:
        """
        Acquire the camera and load the expression model.

        Raises:
            InitializationError: if either capability is unavailable. The sampler
                is left in FAILED and schedules nothing; initialize() may be retried.
                Also raised when destroy() lands while the camera is opening;
                the camera is released and the sampler stays DESTROYED.
        """
        with self._lock:
            if self._state is SamplerState.READY:
                return
            if self._state is SamplerState.INITIALIZING:
                raise InitializationError("initialization already in progress")
            self._state = SamplerState.INITIALIZING

        logger.info("[sampler] initializing camera and expression model")
        try:
            self._video.open()
            self._detector.load()
        except Exception as e:
            logger.exception("[sampler] initialization failed")
            self._release_video()
            with self._lock:
                if self._state is SamplerState.INITIALIZING:
                    self._state = SamplerState.FAILED
            if isinstance(e, InitializationError):
                raise
            raise InitializationError(str(e)) from e

        with self._lock:
            abandoned = self._state is not SamplerState.INITIALIZING
            if not abandoned:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="neuronav-detect")
                self._inflight = None
                self._state = SamplerState.READY
        if abandoned:
            # destroyed while the camera was opening; hand it back
            self._release_video()
            logger.warning("[sampler] destroyed during initialization")
            raise InitializationError("sampler destroyed during initialization")
        logger.info("[sampler] ready")

    def start_detection(self) -> bool:
        """Start periodic sampling. Returns False when not ready or already running."""
        with self._lock:
            if self._state is not SamplerState.READY or self._thread is not None:
                return False
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), name="neuronav-sampler", daemon=True
            )
            self._thread.start()
        logger.info(f"[sampler] detection started interval={self.s.DETECTION_INTERVAL}s")
        return True

    def stop_detection(self) -> None:
        """Cancel the periodic timer; no tick fires after this returns."""
        self._resume_on_visible = False
        self._halt()

    def _halt(self) -> None:
        with self._lock:
            thread, self._thread = self._thread, None
            self._stop_event.set()
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join()
        logger.info("[sampler] detection stopped")

    def set_visible(self, visible: bool) -> bool:
        """Page visibility trigger: hidden pauses detection, shown resumes it."""
        if not visible:
            if self.is_detecting:
                self._resume_on_visible = True
                self._halt()
            return False
        if self._resume_on_visible:
            self._resume_on_visible = False
            return self.start_detection()
        return self.is_detecting

    def register_adaptation_callback(self, fn: AdaptationCallback) -> None:
        if not callable(fn):
            raise TypeError(f"adaptation callback must be callable, got {fn!r}")
        with self._lock:
            if self._state is SamplerState.DESTROYED:
                logger.warning("[sampler] ignoring callback registration on destroyed sampler")
                return
            self._callbacks.append(fn)

    def destroy(self) -> None:
        """Stop detection, release the camera, forget history and observers. Idempotent."""
        with self._lock:
            if self._state is SamplerState.DESTROYED:
                return
        self.stop_detection()
        self._release_video()
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
            self._inflight = None
            self._resume_on_visible = False
            self._history.clear()
            self._callbacks.clear()
            self._current_emotion = "neutral"
            self._current_confidence = 0.0
            self._last_observation = None
            self._last_frame = None
            self._last_region = None
            self._state = SamplerState.DESTROYED
        logger.info("[sampler] destroyed")

    # ---- ticking ----
    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.s.DETECTION_INTERVAL):
            try:
                self.sample_once()
            except Exception:
                logger.exception("[sampler] unexpected tick failure")

    def sample_once(self) -> Optional[EmotionObservation]:
        """
        Run one detection tick.

        Returns:
            The emitted observation, or None when the sampler is not ready or the
            tick was skipped because a previous one is still in flight.
        """
        if self._state is not SamplerState.READY:
            return None
        if not self._tick_lock.acquire(blocking=False):
            logger.debug("[sampler] previous tick still running; skipping")
            return None
        try:
            if self._inflight is not None and not self._inflight.done():
                logger.debug("[sampler] detector call still in flight; skipping")
                return None
            detection, error = self._detect()

            with self._lock:
                if self._state is not SamplerState.READY:
                    return None
                obs, event = self._record(detection, error)
            self._notify(event)
            return obs
        finally:
            self._tick_lock.release()

    def _detect(self) -> tuple[Optional[FaceDetection], Optional[DetectionError]]:
        try:
            frame = self._video.read()
            self._last_frame = frame
            future = self._executor.submit(self._detector.detect, frame)
            self._inflight = future
            result = future.result(timeout=self.s.DETECT_TIMEOUT)
            if result is not None and not isinstance(result, FaceDetection):
                raise DetectionError(f"malformed detector result: {type(result).__name__}")
            return result, None
        except FutureTimeout:
            err = DetectionError(f"detector timed out after {self.s.DETECT_TIMEOUT}s")
            logger.warning(f"[sampler] {err}")
            return None, err
        except Exception as e:
            logger.exception("[sampler] detection tick failed")
            return None, (e if isinstance(e, DetectionError) else DetectionError(str(e)))

    def _record(self, detection: Optional[FaceDetection], error: Optional[DetectionError]):
        now = time.monotonic()
        expressions = None
        region = None
        if error is not None:
            label, conf = "error", 0.0
        elif detection is None:
            # No face: report it, but keep the current emotion for suggestions
            label, conf = "no_face", 0.0
        else:
            raw_label, raw_conf = dominant_emotion(detection.expressions)
            label, conf = apply_deadband(
                raw_label, raw_conf,
                self._current_emotion, self._current_confidence,
                self.s.CONFIDENCE_THRESHOLD,
            )
            self._current_emotion, self._current_confidence = label, conf
            expressions = dict(detection.expressions.scores)
            region = detection.region
            logger.debug(f"[sampler] dominant={raw_label}:{raw_conf:.2f} -> {label}:{conf:.2f}")
        self._last_region = region

        obs = EmotionObservation(emotion=label, confidence=conf, ts=now)
        self._history.push(obs)
        self._last_observation = obs
        event = AdaptationEvent(
            emotion=label,
            confidence=conf,
            expressions=expressions,
            recent=self._history.recent(self.s.EVENT_HISTORY_SIZE),
            face_detected=detection is not None and error is None,
            region=region,
            ts=now,
        )
        return obs, event

    def _notify(self, event: AdaptationEvent) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for cb in callbacks:
            try:
                cb(event.model_copy(deep=True))
            except Exception as e:
                err = ObserverError(cb, e)
                self.last_observer_error = err
                logger.error(f"[sampler] {err}", exc_info=e)

    def _release_video(self) -> None:
        try:
            self._video.release()
        except Exception:
            logger.exception("[sampler] failed to release camera")
