"""
Static emotion -> UI suggestion table.
"""
from __future__ import annotations
from typing import Dict

from neuronav.models import SuggestionRecord, ThemeColors

# Theme ids the page knows how to render; "default" means no theme class.
THEMES = ("calm", "focus", "comfort", "minimal", "colorful", "dark")
DEFAULT_THEME = "default"


def _record(theme_id, message, products, primary, background, text, spacing="normal") -> SuggestionRecord:
    return SuggestionRecord(
        theme_id=theme_id,
        message=message,
        product_tags=frozenset(products),
        colors=ThemeColors(primary=primary, background=background, text=text),
        spacing=spacing,
    )


SUGGESTIONS: Dict[str, SuggestionRecord] = {
    "happy": _record(
        "colorful",
        "You seem happy! How about exploring our vibrant collection?",
        ["colorful-items", "entertainment", "social-products"],
        "#ff6b6b", "#fff8e7", "#2d2d2d",
    ),
    "sad": _record(
        "comfort",
        "We notice you might need some comfort. Here are some soothing options.",
        ["comfort-items", "self-care", "books"],
        "#8e7dbe", "#f6f1fb", "#3b3355", spacing="relaxed",
    ),
    "angry": _record(
        "calm",
        "Let's take things easy. Here's a calmer browsing experience.",
        ["stress-relief", "meditation", "calming-items"],
        "#4a90a4", "#eef6f8", "#1f3a44", spacing="relaxed",
    ),
    "fearful": _record(
        "minimal",
        "We've simplified the interface to help you focus.",
        ["safe-products", "trusted-brands", "simple-items"],
        "#5f6b73", "#ffffff", "#222222", spacing="relaxed",
    ),
    "disgusted": _record(
        "calm",
        "Let's clear things up. Here's a cleaner, calmer layout.",
        ["fresh-picks", "essentials", "clean-design"],
        "#4a90a4", "#eef6f8", "#1f3a44",
    ),
    "surprised": _record(
        "focus",
        "Surprised by something? Let us help you find what you need.",
        ["popular-items", "recommended", "trending"],
        "#2f6fde", "#f4f7fd", "#1a1a2e", spacing="compact",
    ),
    "neutral": _record(
        DEFAULT_THEME,
        "Browse our featured collection at your own pace.",
        ["featured", "categories", "deals"],
        "#667eea", "#ffffff", "#333333",
    ),
}


def lookup_suggestion(emotion: str) -> SuggestionRecord:
    """Total lookup: unknown labels get the neutral record."""
    return SUGGESTIONS.get(emotion, SUGGESTIONS["neutral"])
