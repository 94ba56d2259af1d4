"""Pytest fixtures for multilingual OCR tests."""

import asyncio
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from multilingual_ocr.backends.base import OCRBackend
from multilingual_ocr.config import Settings
from multilingual_ocr.models import OCRLine, Point


def quad(min_x: float, min_y: float, max_x: float, max_y: float) -> list[list[float]]:
    """Engine-style detection quadrilateral (clockwise from top-left)."""
    return [[min_x, min_y], [max_x, min_y], [max_x, max_y], [min_x, max_y]]


def make_line(
    text: str,
    confidence: float,
    min_x: float,
    min_y: float,
    max_x: float,
    max_y: float,
) -> OCRLine:
    """OCRLine with a rectangular polygon."""
    return OCRLine(
        text=text,
        confidence=confidence,
        polygon=tuple(Point(x=x, y=y) for x, y in quad(min_x, min_y, max_x, max_y)),
    )


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll predicate on the event loop until it holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)


class FakeReader:
    """Stand-in for an engine handle."""

    def __init__(self, languages: list[str], use_gpu: bool):
        self.languages = tuple(languages)
        self.use_gpu = use_gpu


class FakeBackend(OCRBackend):
    """In-memory backend recording every call.

    Detections are looked up by the reader's sorted language tuple.
    """

    name = "fake"

    def __init__(
        self,
        detections: dict[tuple[str, ...], Sequence[Any]] | None = None,
        gpu: bool = False,
        gpu_error: Exception | None = None,
        create_errors: dict[tuple[str, ...], Exception] | None = None,
        recognize_errors: dict[tuple[str, ...], Exception] | None = None,
        create_delay: float = 0.0,
        create_gate: threading.Event | None = None,
        models_error: Exception | None = None,
        runtime_error: Exception | None = None,
    ):
        self.detections = detections or {}
        self.gpu = gpu
        self.gpu_error = gpu_error
        self.create_errors = dict(create_errors or {})
        self.recognize_errors = recognize_errors or {}
        self.create_delay = create_delay
        self.create_gate = create_gate
        self.models_error = models_error
        self.runtime_error = runtime_error

        self._lock = threading.Lock()
        self.created: list[tuple[tuple[str, ...], bool]] = []
        self.recognized: list[tuple[tuple[str, ...], str]] = []
        self.released: list[FakeReader] = []
        self.model_calls: list[tuple[list[str], Path | None]] = []
        self.runtime_calls = 0
        self.gpu_probes = 0

    def ensure_models_available(self, languages, cache_dir):
        self.model_calls.append((list(languages), cache_dir))
        if self.models_error is not None:
            raise self.models_error

    def ensure_runtime_initialized(self):
        self.runtime_calls += 1
        if self.runtime_error is not None:
            raise self.runtime_error

    def detect_gpu(self) -> bool:
        self.gpu_probes += 1
        if self.gpu_error is not None:
            raise self.gpu_error
        return self.gpu

    def create_reader(self, languages: list[str], use_gpu: bool) -> FakeReader:
        key = tuple(languages)
        with self._lock:
            self.created.append((key, use_gpu))
        if self.create_gate is not None:
            self.create_gate.wait(timeout=5)
        if self.create_delay:
            time.sleep(self.create_delay)
        error = self.create_errors.pop(key, None)
        if error is not None:
            raise error
        return FakeReader(languages, use_gpu)

    def recognize(self, reader: FakeReader, image_path: str):
        with self._lock:
            self.recognized.append((reader.languages, image_path))
        error = self.recognize_errors.get(reader.languages)
        if error is not None:
            raise error
        return self.detections.get(reader.languages, [])

    def release_reader(self, reader: FakeReader) -> None:
        with self._lock:
            self.released.append(reader)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing the model cache at a temp directory."""
    return Settings(model_cache_dir=tmp_path / "models", force_cpu=False)


@pytest.fixture
def image_path(tmp_path: Path) -> Path:
    """A file standing in for an image (the fake backend never decodes it)."""
    path = tmp_path / "sign.png"
    path.write_bytes(b"\x89PNG fake image data")
    return path


ARABIC_GROUP = ("ar", "en", "fa", "ug", "ur")
HINDI_GROUP = ("en", "hi")


@pytest.fixture
def multilingual_detections() -> dict[tuple[str, ...], list]:
    """Detections for an image with Arabic, English and Hindi text.

    "Hello" is seen by both groups at the same position with different
    confidence, so the merge must keep one copy.
    """
    return {
        ARABIC_GROUP: [
            (quad(0, 0, 120, 20), "مرحبا", 0.91),
            (quad(0, 50, 80, 70), "Hello", 0.60),
        ],
        HINDI_GROUP: [
            (quad(0, 50, 80, 70), "Hello", 0.95),
            (quad(0, 100, 90, 120), "नमस्ते", 0.88),
        ],
    }
