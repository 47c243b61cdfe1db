import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class GradebookCache(Generic[T]):
    """
    Single-snapshot, generation-counted cache.

    Every successful write calls invalidate(), which bumps the generation.
    A snapshot computed while an invalidation happened is returned to its
    caller but never stored, so a stale read cannot outlive a write.
    Process-local only.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._snapshot: Optional[T] = None
        self._snapshot_generation = -1

    @property
    def generation(self) -> int:
        return self._generation

    def peek(self) -> Optional[T]:
        with self._lock:
            if self._snapshot is None or self._snapshot_generation != self._generation:
                return None
            return self._snapshot.model_copy(deep=True)

    def get_or_compute(self, compute: Callable[[], T]) -> T:
        with self._lock:
            generation = self._generation
            if self._snapshot is not None and self._snapshot_generation == generation:
                logger.debug("gradebook cache hit (generation %s)", generation)
                return self._snapshot.model_copy(deep=True)

        logger.debug("gradebook cache miss (generation %s), recomputing", generation)
        value = compute()

        with self._lock:
            if self._generation == generation:
                self._snapshot = value
                self._snapshot_generation = generation

        return value.model_copy(deep=True)

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._snapshot = None
            self._snapshot_generation = -1
