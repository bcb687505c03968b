import json

from neuronav.models import UserPreferences
from neuronav.preferences import PreferenceStore


def test_save_and_load_roundtrip_uses_blob_keys(tmp_path):
    store = PreferenceStore(tmp_path / "nested" / "prefs.json")
    prefs = UserPreferences(high_contrast=True, large_text=False, reduce_motion=True, timestamp=1700000000000)
    store.save(prefs)
    blob = json.loads(store.path.read_text(encoding="utf-8"))
    assert blob == {"highContrast": True, "largeText": False, "reduceMotion": True, "timestamp": 1700000000000}
    assert store.load() == prefs


def test_missing_or_corrupt_file(tmp_path):
    store = PreferenceStore(tmp_path / "prefs.json")
    assert store.load() is None
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() is None
