"""FormModelCache: LRU-backed memoization of form model builds.

Form models are pure functions of (step, data snapshot), so a build can be
reused whenever the same snapshot comes back. Entries are keyed by a
SHA-256 hash of the step name and the canonical JSON of the data; the
cache never holds on to the data itself.

Each ``FormModelCache`` instance has its own ``LRUCache``; eviction of the
least-recently-used entry is silent.
"""

import hashlib
import json
from typing import Any

from cachetools import LRUCache

from .form import FormModel, FormModelBuilder
from .models import StepDefinition

DEFAULT_CACHE_SIZE = 128


def snapshot_key(step: str, data: Any) -> str:
    """Stable hash of a step name and a data snapshot."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(f"{step}\x00{canonical}".encode()).hexdigest()


class FormModelCache:
    """LRU cache in front of a ``FormModelBuilder``."""

    def __init__(self, builder: FormModelBuilder, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._builder = builder
        self._cache: LRUCache[str, FormModel] = LRUCache(maxsize=max_size)
        self.hits = 0
        self.misses = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int:
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        return int(self._cache.currsize)

    # ------------------------------------------------------------------
    # Builder surface
    # ------------------------------------------------------------------

    def build(self, step: StepDefinition, data: Any) -> FormModel:
        """Return the cached model for this snapshot, building it on a miss."""
        key = snapshot_key(step.name, data)
        model = self._cache.get(key)
        if model is not None:
            self.hits += 1
            return model

        self.misses += 1
        model = self._builder.build(step, data)
        self._cache[key] = model
        return model

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0
