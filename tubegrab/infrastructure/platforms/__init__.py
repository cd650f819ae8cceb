from __future__ import annotations

from .base import AbstractExtractionStrategy
from .browser import BrowserStrategy
from .extractor import ExtractorStrategy
from .registry import PlatformRegistry

__all__ = [
    "AbstractExtractionStrategy",
    "BrowserStrategy",
    "ExtractorStrategy",
    "PlatformRegistry",
]
