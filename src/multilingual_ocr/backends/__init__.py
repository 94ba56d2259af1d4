"""OCR engine backends and backend selection.

Backend selection priority:
1. Explicit backend_name parameter
2. OCR_BACKEND setting (environment variable)
3. Default: easyocr
"""

from typing import TYPE_CHECKING

from .base import OCRBackend, RawDetectionTuple

if TYPE_CHECKING:
    from ..config import Settings

# Optional backend imports - these may not be available in all environments
try:
    from .easy_ocr import EASYOCR_AVAILABLE, EasyOCRBackend
except ImportError:
    EasyOCRBackend = None  # type: ignore
    EASYOCR_AVAILABLE = False

AVAILABLE_BACKENDS = ("easyocr",)


def get_backend(backend_name: str | None = None, settings: "Settings | None" = None) -> OCRBackend:
    """Get an OCR backend instance by name or from settings.

    Args:
        backend_name: Optional explicit backend name ('easyocr')
        settings: Settings to read OCR_BACKEND and model options from

    Returns:
        Instantiated OCRBackend

    Raises:
        ValueError: If the backend is unknown or its dependencies are missing
    """
    if settings is None:
        from ..config import get_settings

        settings = get_settings()

    if backend_name is None:
        backend_name = settings.ocr_backend

    backend_name = backend_name.lower()

    if backend_name == "easyocr":
        if EasyOCRBackend is None or not EASYOCR_AVAILABLE:
            raise ValueError(
                "EasyOCRBackend not available. Install easyocr: "
                "pip install 'multilingual-ocr[easyocr]'"
            )
        return EasyOCRBackend(
            model_dir=settings.model_cache_dir,
            verbose=settings.reader_verbose,
        )
    else:
        raise ValueError(
            f"Unknown backend: {backend_name}. Available: {', '.join(AVAILABLE_BACKENDS)}"
        )


__all__ = [
    "AVAILABLE_BACKENDS",
    "EasyOCRBackend",
    "OCRBackend",
    "RawDetectionTuple",
    "get_backend",
]
