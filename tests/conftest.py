import threading
import pytest
import numpy as np

from neuronav.config import Settings
from neuronav.errors import InitializationError
from neuronav.models import ExpressionSample, FaceDetection, FaceRegion


def face(**scores):
    """Single-face detector result with the given expression scores."""
    return FaceDetection(
        region=FaceRegion(x=10, y=8, w=20, h=20),
        expressions=ExpressionSample(scores=scores),
    )


class FakeVideo:
    def __init__(self, fail=False):
        self.fail = fail
        self.opened = 0
        self.released = 0
        self.is_open = False

    def open(self):
        if self.fail:
            raise InitializationError("Could not access camera. Please ensure camera permissions are granted.")
        self.opened += 1
        self.is_open = True

    def read(self):
        return np.zeros((48, 64, 3), dtype=np.uint8)

    def release(self):
        self.released += 1
        self.is_open = False


class FakeDetector:
    """Returns queued results in order; an Exception instance is raised instead."""
    def __init__(self, results=None, fail_load=None):
        self.results = list(results or [])
        self.fail_load = fail_load
        self.calls = 0

    def load(self):
        if self.fail_load is not None:
            raise self.fail_load

    def detect(self, frame):
        self.calls += 1
        r = self.results.pop(0) if self.results else None
        if isinstance(r, Exception):
            raise r
        return r


class BlockingDetector:
    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def load(self):
        pass

    def detect(self, frame):
        self.entered.set()
        self.release.wait(5)
        return face(happy=0.9)


class FakeTimer:
    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.cancelled or self.fired:
            return
        self.fired = True
        self.function(*self.args)


class FakeTimers:
    """Timer factory that records timers instead of running them."""
    def __init__(self):
        self.created = []

    def __call__(self, interval, function, args=None, kwargs=None):
        t = FakeTimer(interval, function, args, kwargs)
        self.created.append(t)
        return t

    def active(self):
        return [t for t in self.created if t.started and not t.cancelled and not t.fired]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DETECTION_INTERVAL=60,
        DETECT_TIMEOUT=2,
        PREFERENCES_PATH=str(tmp_path / "prefs" / "user_preferences.json"),
    )


@pytest.fixture
def timers():
    return FakeTimers()
