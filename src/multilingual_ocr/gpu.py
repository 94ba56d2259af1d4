"""Memoized GPU availability probe."""

import asyncio
import logging

from .backends.base import OCRBackend

logger = logging.getLogger(__name__)


class GpuDetector:
    """Probes the backend for a GPU once and remembers a successful answer.

    A failed probe resolves to False for that call and is retried next time.
    """

    def __init__(self, backend: OCRBackend, force_cpu: bool = False):
        self._backend = backend
        self._force_cpu = force_cpu
        self._available: bool | None = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> bool | None:
        """Memoized probe result, None until a probe succeeds."""
        return self._available

    async def is_available(self) -> bool:
        """Never raises (except on cancellation)."""
        if self._force_cpu:
            return False
        if self._available is not None:
            return self._available

        async with self._lock:
            if self._available is not None:
                return self._available

            try:
                available = bool(await asyncio.to_thread(self._backend.detect_gpu))
            except Exception as e:
                logger.warning(f"Failed to check GPU availability, falling back to CPU: {e}")
                return False

            self._available = available
            if available:
                logger.info("GPU detected and will be used for OCR processing")
            else:
                logger.info("No GPU detected, using CPU for OCR processing")
            return available
