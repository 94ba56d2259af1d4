"""Single-flight cache of engine readers.

Reader initialization is expensive (model loading, possibly a download), so
readers are cached per (sorted language set, GPU flag) for the lifetime of the
service. Concurrent requests for the same key share one in-flight
initialization.

Entries are removed only when initialization fails or is cancelled (so a later
call can retry) and when the cache is closed.
"""

import asyncio
import logging
from collections.abc import Iterable
from functools import partial
from typing import Any

from .backends.base import OCRBackend

logger = logging.getLogger(__name__)

CacheKey = tuple[tuple[str, ...], bool]


def make_cache_key(languages: Iterable[str], use_gpu: bool) -> CacheKey:
    """Key for a language set and compute mode. Order and case do not matter."""
    return tuple(sorted({lang.lower() for lang in languages})), use_gpu


def _is_failed(task: asyncio.Task) -> bool:
    return task.done() and (task.cancelled() or task.exception() is not None)


class ReaderCache:
    """Keyed registry of reader initializations."""

    def __init__(self, backend: OCRBackend):
        self._backend = backend
        self._entries: dict[CacheKey, asyncio.Task] = {}
        self._waiters: dict[CacheKey, int] = {}
        self._closed = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    async def acquire(self, languages: Iterable[str], use_gpu: bool) -> Any:
        """Return the reader for languages/use_gpu, creating it at most once.

        Raises:
            Exception: Whatever the backend raised while creating the reader.
                The entry is evicted, so the next call retries.
            asyncio.CancelledError: If the caller is cancelled. When no other
                caller is waiting, the initialization is cancelled and evicted.
        """
        key = make_cache_key(languages, use_gpu)

        while True:
            if self._closed:
                raise RuntimeError("Reader cache is closed")

            task = self._entries.get(key)
            if task is None or _is_failed(task):
                task = asyncio.create_task(self._create(key), name=f"reader-init:{key}")
                task.add_done_callback(partial(self._on_init_done, key))
                self._entries[key] = task

            self._waiters[key] = self._waiters.get(key, 0) + 1
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                if not self._abandoned_by_others(task):
                    raise
                logger.debug(f"Reader initialization for {list(key[0])} was cancelled, retrying")
            finally:
                self._leave(key, task)

    def _abandoned_by_others(self, task: asyncio.Task) -> bool:
        # The initialization was cancelled but the current caller was not
        current = asyncio.current_task()
        return (
            not self._closed
            and task.cancelled()
            and current is not None
            and current.cancelling() == 0
        )

    def _leave(self, key: CacheKey, task: asyncio.Task) -> None:
        self._waiters[key] -= 1
        if self._waiters[key] > 0:
            return

        del self._waiters[key]
        if not task.done():
            # Last waiter gone: nobody wants this reader any more
            task.cancel()
            if self._entries.get(key) is task:
                del self._entries[key]

    async def _create(self, key: CacheKey) -> Any:
        languages, use_gpu = key
        creation = asyncio.ensure_future(
            asyncio.to_thread(self._backend.create_reader, list(languages), use_gpu)
        )
        try:
            return await asyncio.shield(creation)
        except asyncio.CancelledError:
            # The worker thread keeps running; release whatever it produces
            creation.add_done_callback(self._release_orphan)
            raise

    def _release_orphan(self, creation: asyncio.Future) -> None:
        if creation.cancelled() or creation.exception() is not None:
            return
        logger.debug("Releasing reader whose initialization was cancelled")
        try:
            self._backend.release_reader(creation.result())
        except Exception as e:
            logger.debug(f"Failed to release orphaned reader: {e}")

    def _on_init_done(self, key: CacheKey, task: asyncio.Task) -> None:
        if task.cancelled():
            failed = True
        else:
            error = task.exception()
            failed = error is not None
            if failed:
                logger.warning(f"Reader initialization failed for {list(key[0])}: {error}")

        if failed and self._entries.get(key) is task:
            del self._entries[key]

    async def aclose(self) -> None:
        """Cancel pending initializations and release every created reader once."""
        self._closed = True
        entries = list(self._entries.items())
        self._entries.clear()

        for key, task in entries:
            if not task.done():
                task.cancel()
                continue
            if task.cancelled() or task.exception() is not None:
                continue
            try:
                await asyncio.to_thread(self._backend.release_reader, task.result())
                logger.debug(f"Released reader for {list(key[0])} (GPU: {key[1]})")
            except Exception as e:
                logger.debug(f"Failed to release reader for {list(key[0])}: {e}")
