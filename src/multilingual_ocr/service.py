"""Multilingual OCR service.

Flow of one extract_text() call:
1. Validate the image path and normalize the requested languages
2. Make sure models and the engine runtime are available (fatal if not)
3. Resolve the GPU flag (memoized, never fails)
4. Plan language groups and run one recognition task per group
5. Merge all surviving lines into one de-duplicated, reading-ordered result

Group failures are logged and skipped. Only invalid input and an unavailable
runtime fail the call.
"""

import asyncio
import logging
import tempfile
import time
from collections.abc import Iterable
from functools import partial
from pathlib import Path

from .backends import OCRBackend, get_backend
from .config import Settings, get_settings
from .detections import lines_from_detections
from .dispatch import LanguageGroup, dispatch_groups
from .exceptions import InvalidInputError, RuntimeUnavailableError, ServiceClosedError
from .gpu import GpuDetector
from .languages import fix_dependencies, normalize_languages, plan_groups
from .merge import merge_lines
from .models import OCRLine, OCRResult
from .reader_cache import ReaderCache
from .timing import TimingTracker

logger = logging.getLogger(__name__)


def _write_temp_file(data: bytes, suffix: str) -> Path:
    with tempfile.NamedTemporaryFile(prefix="multilingual_ocr_", suffix=suffix, delete=False) as f:
        f.write(data)
        return Path(f.name)


class MultilingualOCRService:
    """OCR over several language groups with merged results.

    Readers are cached per service instance and released by aclose(), so a
    service should be long-lived. Use it as an async context manager:

        async with MultilingualOCRService() as service:
            result = await service.extract_text("page.png", ["en", "hi", "ar"])

    Cancelling the task that awaits extract_text() cancels every group task.
    """

    def __init__(
        self,
        backend: OCRBackend | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._backend = backend or get_backend(settings=self._settings)
        self._readers = ReaderCache(self._backend)
        self._gpu = GpuDetector(self._backend, force_cpu=self._settings.force_cpu)
        self.timings = TimingTracker()
        self._closed = False

    async def __aenter__(self) -> "MultilingualOCRService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def backend(self) -> OCRBackend:
        return self._backend

    @property
    def readers(self) -> ReaderCache:
        return self._readers

    async def extract_text(
        self,
        image_path: str | Path,
        languages: Iterable[str],
    ) -> OCRResult:
        """Run OCR on an image file across all requested languages.

        Args:
            image_path: Path to the image file
            languages: Language codes (case-insensitive, duplicates ignored)

        Returns:
            OCRResult with merged lines. Lines may be empty if every group failed.

        Raises:
            InvalidInputError: Empty path, missing file or no usable language
            RuntimeUnavailableError: Models or engine runtime unavailable
            ServiceClosedError: The service was closed
        """
        self._ensure_open()

        if image_path is None or not str(image_path).strip():
            raise InvalidInputError("image_path", "Image path must be provided.")

        if isinstance(languages, str):
            languages = [languages]
        requested = list(languages) if languages is not None else []
        if not requested:
            raise InvalidInputError("languages", "At least one language must be specified.")

        full_path = Path(image_path).expanduser().resolve()
        if not full_path.is_file():
            raise InvalidInputError(
                "image_path", f"The image file '{full_path}' could not be found."
            )

        resolved = normalize_languages(requested)
        if not resolved:
            raise InvalidInputError("languages", "At least one valid language must be specified.")

        start = time.perf_counter()

        with self.timings.track("model_check", ", ".join(resolved)):
            await self._call_runtime(
                self._backend.ensure_models_available, resolved, self._settings.model_cache_dir
            )
        with self.timings.track("runtime_init"):
            await self._call_runtime(self._backend.ensure_runtime_initialized)
        with self.timings.track("gpu_probe"):
            use_gpu = await self._gpu.is_available()

        groups = plan_groups(resolved)
        logger.info(
            f"Processing {len(groups)} language group(s) in parallel: "
            + "; ".join(f"[{', '.join(group)}]" for group in groups)
        )

        with self.timings.track("dispatch", f"{len(groups)} groups"):
            outcomes = await dispatch_groups(
                groups, partial(self._recognize_group, str(full_path), use_gpu)
            )

        all_lines: list[OCRLine] = []
        used_languages: set[str] = set()
        for outcome in outcomes:
            if outcome.succeeded:
                all_lines.extend(outcome.lines)
                used_languages.update(fix_dependencies(outcome.group))

        with self.timings.track("merge", f"{len(all_lines)} lines"):
            merged = merge_lines(all_lines)

        duration = time.perf_counter() - start
        result = OCRResult(
            full_text="\n".join(line.text for line in merged if line.text),
            lines=tuple(merged),
            languages=frozenset(used_languages),
            duration=duration,
            used_gpu=use_gpu,
        )

        logger.info(
            f"Multilingual OCR completed: {len(merged)} lines from {len(groups)} "
            f"language group(s) in {duration * 1000:.0f}ms"
        )
        return result

    async def extract_text_from_bytes(
        self,
        image_bytes: bytes,
        languages: Iterable[str],
        filename_hint: str | None = None,
    ) -> OCRResult:
        """Run OCR on in-memory image data via a temporary file.

        Args:
            image_bytes: Encoded image data
            languages: Language codes
            filename_hint: Optional file name; its extension is kept for the temp file
        """
        self._ensure_open()
        if not image_bytes:
            raise InvalidInputError("image_bytes", "Image data must be provided.")

        suffix = Path(filename_hint).suffix if filename_hint else ""
        temp_path = await asyncio.to_thread(_write_temp_file, image_bytes, suffix or ".tmp")

        try:
            return await self.extract_text(temp_path, languages)
        finally:
            temp_path.unlink(missing_ok=True)

    async def aclose(self) -> None:
        """Release all cached readers. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._readers.aclose()
        logger.info("Multilingual OCR service closed")

    async def _recognize_group(
        self, image_path: str, use_gpu: bool, group: LanguageGroup
    ) -> list[OCRLine]:
        reader = await self._readers.acquire(fix_dependencies(group), use_gpu)
        raw_output = await asyncio.to_thread(self._backend.recognize, reader, image_path)
        return lines_from_detections(raw_output)

    async def _call_runtime(self, func, *args) -> None:
        try:
            await asyncio.to_thread(func, *args)
        except RuntimeUnavailableError:
            raise
        except Exception as e:
            name = getattr(func, "__name__", "runtime setup")
            raise RuntimeUnavailableError(f"{name} failed: {e}") from e

    def _ensure_open(self) -> None:
        if self._closed:
            raise ServiceClosedError("MultilingualOCRService has been closed")
