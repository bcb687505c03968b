"""
Durable storage for the accessibility preference blob.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional
import logging

from pydantic import ValidationError

from neuronav.models import UserPreferences

logger = logging.getLogger(__name__)


class PreferenceStore:
    """JSON file holding {highContrast, largeText, reduceMotion, timestamp}."""
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def save(self, prefs: UserPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(prefs.model_dump_json(by_alias=True), encoding="utf-8")
        logger.debug(f"[prefs] saved -> {self.path}")

    def load(self) -> Optional[UserPreferences]:
        if not self.path.exists():
            return None
        try:
            return UserPreferences.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            logger.exception(f"[prefs] unreadable preferences file: {self.path}")
            return None
