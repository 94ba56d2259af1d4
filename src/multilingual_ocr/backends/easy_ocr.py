"""EasyOCR backend (PyTorch-based multilingual recognition)."""

import logging
import os
import sys
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..exceptions import RuntimeUnavailableError
from .base import OCRBackend, RawDetectionTuple

logger = logging.getLogger(__name__)

try:
    import easyocr

    EASYOCR_AVAILABLE = True
except ImportError:
    easyocr = None  # type: ignore
    EASYOCR_AVAILABLE = False


class EasyOCRBackend(OCRBackend):
    """Backend using the easyocr package.

    Models are stored under `model_dir` and downloaded by easyocr on first use
    of a language. `EASYOCR_MODULE_PATH` is pointed at the same directory so
    easyocr's own cache and ours agree.
    """

    name = "easyocr"

    def __init__(self, model_dir: Path | None = None, verbose: bool = False):
        if not EASYOCR_AVAILABLE:
            raise RuntimeError(
                "easyocr is not available. Install it with: pip install 'multilingual-ocr[easyocr]'"
            )
        self._model_dir = model_dir
        self._verbose = verbose
        self._lock = threading.Lock()
        self._runtime_ready = False

    def ensure_models_available(self, languages: Sequence[str], cache_dir: Path | None) -> None:
        with self._lock:
            model_dir = Path(cache_dir) if cache_dir is not None else self._model_dir
            if model_dir is None:
                return

            try:
                model_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise RuntimeUnavailableError(
                    f"Cannot create model cache directory {model_dir}: {e}"
                ) from e

            self._model_dir = model_dir.resolve()
            os.environ["EASYOCR_MODULE_PATH"] = str(self._model_dir)
            logger.info(
                f"Model cache directory: {self._model_dir}. Models for "
                f"[{', '.join(languages)}] are downloaded on first use if missing."
            )

    def ensure_runtime_initialized(self) -> None:
        with self._lock:
            if self._runtime_ready:
                return
            try:
                # Reader construction needs torch; fail here rather than per group
                import torch  # noqa: F401
            except ImportError as e:
                raise RuntimeUnavailableError(
                    "PyTorch is required by easyocr but could not be imported"
                ) from e
            self._runtime_ready = True
            logger.info(f"EasyOCR runtime ready (easyocr {getattr(easyocr, '__version__', '?')})")

    def detect_gpu(self) -> bool:
        import torch

        return bool(torch.cuda.is_available())

    def create_reader(self, languages: list[str], use_gpu: bool) -> Any:
        logger.info(
            f"Initializing EasyOCR reader for [{', '.join(languages)}] (GPU: {use_gpu}). "
            "First use of a language downloads its models and can take several minutes."
        )
        kwargs: dict[str, Any] = {"gpu": use_gpu, "verbose": self._verbose}
        if self._model_dir is not None:
            kwargs["model_storage_directory"] = str(self._model_dir)

        reader = easyocr.Reader(languages, **kwargs)
        logger.info(f"EasyOCR reader initialized for [{', '.join(languages)}]")
        return reader

    def recognize(self, reader: Any, image_path: str) -> Sequence[RawDetectionTuple]:
        return reader.readtext(image_path, detail=1, paragraph=False)

    def release_reader(self, reader: Any) -> None:
        del reader
        torch = sys.modules.get("torch")
        if torch is not None and torch.cuda.is_available():
            torch.cuda.empty_cache()
