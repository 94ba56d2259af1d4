"""Wall-clock timing of service stages."""

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class TimingEntry:
    """Accumulated time for one named stage."""

    name: str
    total_seconds: float = 0.0
    count: int = 0
    last_description: str | None = None


class TimingTracker:
    """Accumulates per-stage durations across calls."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, TimingEntry] = {}

    @contextmanager
    def track(self, name: str, description: str | None = None) -> Iterator[None]:
        """Time the enclosed block and record it under `name`, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, time.perf_counter() - start, description)

    def record(self, name: str, seconds: float, description: str | None = None) -> None:
        with self._lock:
            entry = self._entries.setdefault(name, TimingEntry(name=name))
            entry.total_seconds += seconds
            entry.count += 1
            if description is not None:
                entry.last_description = description

        suffix = f" ({description})" if description else ""
        logger.info(f"{name}: {seconds:.2f}s{suffix}")

    def get(self, name: str) -> TimingEntry | None:
        with self._lock:
            entry = self._entries.get(name)
            return None if entry is None else TimingEntry(**vars(entry))

    def entries(self) -> list[TimingEntry]:
        """Copies of all entries, slowest first."""
        with self._lock:
            copies = [TimingEntry(**vars(entry)) for entry in self._entries.values()]
        return sorted(copies, key=lambda e: e.total_seconds, reverse=True)

    def summary(self) -> str:
        entries = self.entries()
        if not entries:
            return "No timing data recorded."

        total = sum(e.total_seconds for e in entries)
        parts = [f"Total: {total:.2f}s"]
        for entry in entries:
            percentage = (entry.total_seconds / total) * 100 if total > 0 else 0.0
            parts.append(
                f"  {entry.name}: {entry.total_seconds:.2f}s ({percentage:.1f}%, {entry.count}x)"
            )
        return "\n".join(parts)
