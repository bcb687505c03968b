import threading
import time
import pytest

from conftest import BlockingDetector, FakeDetector, FakeVideo, face
from neuronav.errors import DetectionError, InitializationError, ObserverError
from neuronav.sampler import EmotionSampler, SamplerState


def _ready(settings, results=None, **kw):
    video = FakeVideo()
    det = FakeDetector(results)
    s = EmotionSampler(settings, video=video, detector=det, **kw)
    s.initialize()
    return s, video, det


def test_initialize_moves_to_ready(settings):
    s, video, _ = _ready(settings)
    assert s.state is SamplerState.READY
    assert video.opened == 1
    s.initialize()  # no-op while ready
    assert video.opened == 1
    s.destroy()


def test_initialize_failure_is_fatal_but_retryable(settings):
    video = FakeVideo(fail=True)
    s = EmotionSampler(settings, video=video, detector=FakeDetector())
    with pytest.raises(InitializationError):
        s.initialize()
    assert s.state is SamplerState.FAILED
    assert s.start_detection() is False
    assert s.sample_once() is None
    assert video.released == 1

    video.fail = False
    s.initialize()
    assert s.state is SamplerState.READY
    s.destroy()


def test_model_load_failure_is_wrapped(settings):
    s = EmotionSampler(settings, video=FakeVideo(), detector=FakeDetector(fail_load=RuntimeError("weights 404")))
    with pytest.raises(InitializationError) as ei:
        s.initialize()
    assert isinstance(ei.value.__cause__, RuntimeError)
    assert s.state is SamplerState.FAILED


def test_sample_before_initialize_is_noop(settings):
    s = EmotionSampler(settings, video=FakeVideo(), detector=FakeDetector())
    assert s.sample_once() is None
    assert s.start_detection() is False
    s.stop_detection()


def test_face_sample_emits_dominant_emotion(settings):
    s, _, _ = _ready(settings, [face(happy=0.1, sad=0.05, neutral=0.8)])
    events = []
    s.register_adaptation_callback(events.append)
    obs = s.sample_once()
    assert (obs.emotion, obs.confidence) == ("neutral", 0.8)
    assert s.current_emotion == "neutral"
    ev = events[0]
    assert ev.face_detected is True
    assert ev.expressions == {"happy": 0.1, "sad": 0.05, "neutral": 0.8}
    assert ev.region is not None and ev.recent[-1] == obs


def test_low_confidence_keeps_previous_emotion(settings):
    s, _, _ = _ready(settings, [face(sad=0.9, happy=0.1), face(happy=0.25, neutral=0.2)])
    s.sample_once()
    obs = s.sample_once()
    assert obs.emotion == "sad"
    assert obs.confidence == 0.9
    assert (s.current_emotion, s.current_confidence) == ("sad", 0.9)


def test_no_face_reports_but_retains_current(settings):
    s, _, _ = _ready(settings, [face(angry=0.7), None])
    events = []
    s.register_adaptation_callback(events.append)
    s.sample_once()
    obs = s.sample_once()
    assert (obs.emotion, obs.confidence) == ("no_face", 0.0)
    assert s.current_emotion == "angry"
    assert events[-1].face_detected is False
    assert events[-1].expressions is None
    assert [o.emotion for o in s.history()] == ["angry", "no_face"]


def test_detector_failure_emits_error_and_keeps_ticking(settings):
    s, _, _ = _ready(settings, [DetectionError("inference failed"), "garbage", face(happy=0.6)])
    assert s.sample_once().emotion == "error"
    assert s.sample_once().emotion == "error"
    obs = s.sample_once()
    assert obs.emotion == "happy"
    assert s.state is SamplerState.READY


def test_history_is_capped(settings):
    settings.HISTORY_SIZE = 3
    s, _, _ = _ready(settings, [face(happy=0.9), face(sad=0.9), face(angry=0.9), face(neutral=0.9)])
    for _ in range(4):
        s.sample_once()
    assert [o.emotion for o in s.history()] == ["sad", "angry", "neutral"]


def test_event_carries_last_k(settings):
    settings.EVENT_HISTORY_SIZE = 2
    s, _, _ = _ready(settings, [face(happy=0.9), face(sad=0.9), face(angry=0.9)])
    events = []
    s.register_adaptation_callback(events.append)
    for _ in range(3):
        s.sample_once()
    assert [o.emotion for o in events[-1].recent] == ["sad", "angry"]


def test_observers_called_in_order_despite_failure(settings):
    s, _, _ = _ready(settings, [face(happy=0.9)])
    calls = []

    def first(ev): calls.append("first")
    def broken(ev):
        calls.append("broken")
        raise RuntimeError("boom")
    def last(ev): calls.append("last")

    s.register_adaptation_callback(first)
    s.register_adaptation_callback(broken)
    s.register_adaptation_callback(last)
    s.register_adaptation_callback(first)  # no de-duplication
    assert s.sample_once() is not None
    assert calls == ["first", "broken", "last", "first"]
    assert isinstance(s.last_observer_error, ObserverError)
    assert isinstance(s.last_observer_error.cause, RuntimeError)


def test_observer_mutation_does_not_leak_back(settings):
    s, _, _ = _ready(settings, [face(happy=0.9)])
    s.register_adaptation_callback(lambda ev: ev.recent.clear())
    s.sample_once()
    assert len(s.history()) == 1


def test_register_rejects_non_callable(settings):
    s, _, _ = _ready(settings)
    with pytest.raises(TypeError):
        s.register_adaptation_callback("not callable")


def test_hung_detector_times_out_and_next_tick_is_skipped(settings):
    settings.DETECT_TIMEOUT = 0.05
    det = BlockingDetector()
    s = EmotionSampler(settings, video=FakeVideo(), detector=det)
    s.initialize()
    assert s.sample_once().emotion == "error"
    # previous call still running in the executor
    assert s.sample_once() is None
    det.release.set()
    s._inflight.result(timeout=2)
    assert s.sample_once().emotion == "happy"
    s.destroy()


def test_destroy_is_idempotent_and_final(settings):
    s, video, _ = _ready(settings, [face(happy=0.9)])
    s.register_adaptation_callback(lambda ev: None)
    s.sample_once()
    s.destroy()
    s.destroy()
    assert s.state is SamplerState.DESTROYED
    assert video.released >= 1
    assert s.history() == []
    assert s.sample_once() is None
    assert s.start_detection() is False
    s.register_adaptation_callback(lambda ev: None)
    assert s._callbacks == []
    s.stop_detection()
    assert s.status().state == "destroyed"


def test_reinitialize_after_destroy(settings):
    s, video, _ = _ready(settings, [None, face(happy=0.9)])
    s.destroy()
    s.initialize()
    assert s.state is SamplerState.READY
    assert video.opened == 2
    assert s.current_emotion == "neutral"
    s.destroy()


def test_periodic_detection_and_stop(settings):
    settings.DETECTION_INTERVAL = 0.01
    s, _, det = _ready(settings, [face(happy=0.9)] * 100)
    assert s.start_detection() is True
    assert s.start_detection() is False
    deadline = time.time() + 2
    while len(s.history()) < 3 and time.time() < deadline:
        time.sleep(0.01)
    s.stop_detection()
    assert not s.is_detecting
    n = det.calls
    time.sleep(0.05)
    assert det.calls == n
    assert len(s.history()) >= 3
    s.stop_detection()
    s.destroy()


def test_visibility_pauses_and_resumes(settings):
    s, _, _ = _ready(settings)
    assert s.set_visible(True) is False  # nothing to resume
    s.start_detection()
    assert s.set_visible(False) is False
    assert not s.is_detecting
    assert s.set_visible(True) is True
    assert s.is_detecting
    s.destroy()


def test_explicit_stop_while_hidden_is_not_undone_by_show(settings):
    s, _, _ = _ready(settings)
    s.start_detection()
    s.set_visible(False)
    s.stop_detection()
    assert s.set_visible(True) is False
    assert not s.is_detecting
    s.destroy()


class GatedVideo(FakeVideo):
    """Camera whose open() waits until the gate is released."""
    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.gate = threading.Event()

    def open(self):
        self.entered.set()
        self.gate.wait(5)
        super().open()


def test_destroy_during_initialize_stays_destroyed(settings):
    video = GatedVideo()
    s = EmotionSampler(settings, video=video, detector=FakeDetector())
    errors = []

    def init():
        try:
            s.initialize()
        except InitializationError as e:
            errors.append(e)

    t = threading.Thread(target=init)
    t.start()
    assert video.entered.wait(2)
    s.destroy()
    video.gate.set()
    t.join(2)

    assert s.state is SamplerState.DESTROYED
    assert not video.is_open
    assert s._executor is None
    assert len(errors) == 1
    assert s.start_detection() is False


def test_overlapping_ticks_are_skipped(settings):
    settings.DETECT_TIMEOUT = 5
    det = BlockingDetector()
    s = EmotionSampler(settings, video=FakeVideo(), detector=det)
    s.initialize()
    results = []
    t = threading.Thread(target=lambda: results.append(s.sample_once()))
    t.start()
    assert det.entered.wait(2)
    assert s.sample_once() is None  # first tick still holds the tick lock
    det.release.set()
    t.join(5)
    assert results[0].emotion == "happy"
    assert [o.emotion for o in s.history()] == ["happy"]
    s.destroy()
