
from neuronav.config import Settings

def test_Settings():
    s = Settings()
    assert s.DETECTION_INTERVAL == 1.0
    assert s.HISTORY_SIZE == 20
    assert s.CONFIDENCE_THRESHOLD == 0.30
    assert s.DEBOUNCE_SECONDS == 2.0 and s.MESSAGE_SECONDS == 3.0
    # override via env-like behavior (construct new instance)
    s2 = Settings(HISTORY_SIZE=10)
    assert s2.HISTORY_SIZE == 10

def test_settings_normalization():
    assert Settings(DETECTOR_BACKEND="RetinaFace  # better on small faces").DETECTOR_BACKEND == "retinaface"
    assert Settings(DETECTOR_BACKEND="bogus").DETECTOR_BACKEND == "opencv"
    assert Settings(HISTORY_SIZE=0).HISTORY_SIZE == 1
