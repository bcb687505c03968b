"""
Error kinds raised by the sampler and its capabilities.
"""
from __future__ import annotations
from typing import Any, Callable


class NeuroNavError(Exception):
    """Base class for all errors raised by this package."""


class InitializationError(NeuroNavError):
    """Camera or detection model unavailable; fatal to the current session."""


class DetectionError(NeuroNavError):
    """A single detection tick failed; the sampler keeps ticking."""


class ObserverError(NeuroNavError):
    """A registered adaptation callback raised while being notified."""

    def __init__(self, callback: Callable[..., Any], cause: BaseException):
        name = getattr(callback, "__qualname__", None) or repr(callback)
        super().__init__(f"adaptation callback {name} failed: {cause!r}")
        self.callback = callback
        self.cause = cause
