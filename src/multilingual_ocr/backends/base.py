"""Abstract base class for OCR backends."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any

# One engine detection: (polygon, text, confidence) in the engine's native types
RawDetectionTuple = Sequence[Any]


class OCRBackend(ABC):
    """Boundary to a recognition engine.

    All methods are blocking; the service calls them through asyncio.to_thread.
    Readers are opaque handles configured for one language set and compute mode.
    """

    name: str = "base"

    @abstractmethod
    def ensure_models_available(self, languages: Sequence[str], cache_dir: Path | None) -> None:
        """Make sure models for the languages can be loaded. Idempotent."""
        ...

    @abstractmethod
    def ensure_runtime_initialized(self) -> None:
        """One-time process setup before the first reader is created. Idempotent."""
        ...

    @abstractmethod
    def detect_gpu(self) -> bool:
        """Best-effort GPU probe. May raise; the caller treats errors as no GPU."""
        ...

    @abstractmethod
    def create_reader(self, languages: list[str], use_gpu: bool) -> Any:
        """Create an engine handle for a sorted language list. Expensive."""
        ...

    @abstractmethod
    def recognize(self, reader: Any, image_path: str) -> Sequence[RawDetectionTuple]:
        """Run recognition on an image file."""
        ...

    @abstractmethod
    def release_reader(self, reader: Any) -> None:
        """Release a handle created by create_reader()."""
        ...
