"""Multilingual OCR with language grouping and result fusion.

Usage:
    from multilingual_ocr import MultilingualOCRService

    async with MultilingualOCRService() as service:
        result = await service.extract_text("sign.jpg", ["en", "hi", "ar"])
        print(result.full_text)

The requested languages are split into groups the engine handles well
together, each group is recognized concurrently, and overlapping detections
are merged into one reading-ordered result.

Environment variables (see config.Settings):
    OCR_BACKEND: Backend name (default 'easyocr')
    MODEL_CACHE_DIR: Where language models are stored
    FORCE_CPU: Skip GPU detection and run on CPU
"""

from .backends import OCRBackend, get_backend
from .config import Settings, get_settings
from .dispatch import GroupOutcome, dispatch_groups
from .exceptions import (
    ConfidenceCoercionError,
    InvalidInputError,
    MultilingualOCRError,
    RuntimeUnavailableError,
    ServiceClosedError,
)
from .languages import HUB_LANGUAGE, fix_dependencies, normalize_languages, plan_groups
from .merge import merge_lines
from .models import BoundingBox, OCRLine, OCRResult, Point
from .service import MultilingualOCRService
from .similarity import text_similarity

__all__ = [
    # Models
    "Point",
    "BoundingBox",
    "OCRLine",
    "OCRResult",
    # Service
    "MultilingualOCRService",
    "Settings",
    "get_settings",
    # Backends
    "OCRBackend",
    "get_backend",
    # Languages
    "HUB_LANGUAGE",
    "normalize_languages",
    "fix_dependencies",
    "plan_groups",
    # Dispatch and merge
    "GroupOutcome",
    "dispatch_groups",
    "merge_lines",
    "text_similarity",
    # Errors
    "MultilingualOCRError",
    "InvalidInputError",
    "RuntimeUnavailableError",
    "ConfidenceCoercionError",
    "ServiceClosedError",
]
