"""
CLI to run a headless emotion-sampling session and print observations as JSON lines.
"""
from __future__ import annotations
import argparse, json, logging, time
from neuronav.config import Settings
from neuronav.errors import InitializationError
from neuronav.page import AdaptivePage

def main():
    p = argparse.ArgumentParser()
    p.add_argument("--seconds", type=float, default=30.0, help="How long to sample")
    p.add_argument("--camera", type=int, default=None, help="Camera index override")
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    args = p.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    settings = Settings() if args.camera is None else Settings(CAMERA_INDEX=args.camera)
    page = AdaptivePage(settings)
    page.load_preferences()

    def _print(event):
        print(json.dumps({
            "emotion": event.emotion,
            "confidence": round(event.confidence, 3),
            "face_detected": event.face_detected,
            "theme": page.page.theme,
        }, ensure_ascii=False), flush=True)

    try:
        page.start()
    except InitializationError as e:
        print(f"❌ Emotion detection unavailable: {e}")
        raise SystemExit(1)
    page.sampler.register_adaptation_callback(_print)

    try:
        time.sleep(args.seconds)
    except KeyboardInterrupt:
        pass
    finally:
        page.stop()
    print(json.dumps(page.status().page.model_dump(), indent=2, ensure_ascii=False))

if __name__ == "__main__":
    main()
