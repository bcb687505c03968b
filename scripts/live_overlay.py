"""Run live camera overlay.

Usage:
    uvicorn api.main:app --reload  # (separate, for API)
    python scripts/live_overlay.py  # (to see camera overlay window)

Press 'q' to quit the window.
"""
import time

import cv2
from neuronav.config import Settings
from neuronav.errors import InitializationError
from neuronav.page import FALLBACK_MESSAGE, AdaptivePage

WINDOW = "NeuroNav Live (q to quit)"


def run_live_overlay(settings: Settings) -> None:
    page = AdaptivePage(settings)
    try:
        page.start()
    except InitializationError as e:
        print(f"❌ Emotion detection unavailable: {e}")
        print(FALLBACK_MESSAGE)
        raise SystemExit(1)
    try:
        while True:
            annotated = page.overlay_frame()
            if annotated is None:
                # no window yet, waitKey would return immediately
                time.sleep(0.03)
                continue
            cv2.imshow(WINDOW, annotated)
            if (cv2.waitKey(30) & 0xFF) == ord("q"):
                break
    finally:
        page.stop()
        cv2.destroyAllWindows()


if __name__ == '__main__':
    s = Settings()
    run_live_overlay(s)
