"""Bounded rolling history of emotion observations."""
from __future__ import annotations

from collections import deque
from typing import Deque, List

from neuronav.models import EmotionObservation


class EmotionHistory:
    """FIFO-capped, chronologically ordered observation log."""
    def __init__(self, cap: int = 20):
        if int(cap) < 1:
            raise ValueError(f"history cap must be >= 1, got {cap}")
        self._items: Deque[EmotionObservation] = deque(maxlen=int(cap))

    @property
    def cap(self) -> int:
        return self._items.maxlen

    def push(self, obs: EmotionObservation) -> None:
        self._items.append(obs)

    def recent(self, k: int) -> List[EmotionObservation]:
        if k <= 0:
            return []
        return list(self._items)[-k:]

    def snapshot(self) -> List[EmotionObservation]:
        return list(self._items)

    def last(self) -> EmotionObservation | None:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
