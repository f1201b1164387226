"""Bounded calculation cache.

Holds computed cycles and diagram samples keyed by a canonical string of the
inputs. When full, the configured eviction strategy chooses which entry to
drop before inserting a new one. The default drops the oldest insertion, and
reads do not count as use.
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import json
import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class EvictionStrategy(ABC):
    """Bookkeeping of entry order and the choice of the eviction victim."""

    @abstractmethod
    def on_insert(self, key: Hashable) -> None:
        """Record a newly inserted key."""

    @abstractmethod
    def on_access(self, key: Hashable) -> None:
        """Record a cache hit on *key*."""

    @abstractmethod
    def on_remove(self, key: Hashable) -> None:
        """Forget *key*."""

    @abstractmethod
    def victim(self) -> Hashable:
        """Key to evict next."""

    @abstractmethod
    def clear(self) -> None:
        """Forget all keys."""


class InsertionOrderEviction(EvictionStrategy):
    """Evict the entry inserted first. Hits do not change the order."""

    def __init__(self) -> None:
        self._order: OrderedDict[Hashable, None] = OrderedDict()

    def on_insert(self, key: Hashable) -> None:
        self._order[key] = None

    def on_access(self, key: Hashable) -> None:
        pass

    def on_remove(self, key: Hashable) -> None:
        self._order.pop(key, None)

    def victim(self) -> Hashable:
        return next(iter(self._order))

    def clear(self) -> None:
        self._order.clear()


class LeastRecentlyUsedEviction(InsertionOrderEviction):
    """Evict the entry that was read or written longest ago."""

    def on_insert(self, key: Hashable) -> None:
        self._order[key] = None
        self._order.move_to_end(key)

    def on_access(self, key: Hashable) -> None:
        if key in self._order:
            self._order.move_to_end(key)


class CalculationCache(Generic[K, V]):
    """Thread-safe bounded key/value store.

    Args:
        max_size: Maximum number of entries, at least 1.
        strategy: Eviction policy, insertion order by default.
        name: Label used in log messages and statistics.
    """

    def __init__(
        self,
        max_size: int,
        strategy: EvictionStrategy | None = None,
        name: str = "cache",
    ):
        if max_size < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_size}")
        self.max_size = max_size
        self.name = name
        self._strategy = strategy or InsertionOrderEviction()
        self._data: dict[K, V] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, key: K, default: Any = None) -> V | Any:
        with self._lock:
            value = self._data.get(key, _MISSING)
            if value is _MISSING:
                self.misses += 1
                return default
            self.hits += 1
            self._strategy.on_access(key)
            return value

    def set(self, key: K, value: V) -> None:
        with self._lock:
            if key in self._data:
                # Overwrite keeps the entry's position in the eviction order
                self._data[key] = value
                return
            while len(self._data) >= self.max_size:
                victim = self._strategy.victim()
                self._strategy.on_remove(victim)
                del self._data[victim]
                logger.debug("%s: evicted %s", self.name, victim)
            self._data[key] = value
            self._strategy.on_insert(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._strategy.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._data),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
            }


def _canonical(obj: Any) -> Any:
    if isinstance(obj, enum.Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Cannot build a cache key from {type(obj).__name__}")


def make_key(*parts: Any) -> str:
    """Canonical string of the inputs.

    Mappings are serialized with sorted keys, so two inputs that differ
    only in key order give the same key.
    """
    return json.dumps(parts, sort_keys=True, separators=(",", ":"), default=_canonical)


def memoize(
    cache: CalculationCache[str, Any],
    key: Callable[..., str] | None = None,
) -> Callable[[Callable[..., V]], Callable[..., V]]:
    """Decorator storing a function's results in *cache*.

    Args:
        cache: Target cache.
        key: Builds the key from the call arguments. Defaults to
            :func:`make_key` over the positional and keyword arguments.
    """

    def decorator(func: Callable[..., V]) -> Callable[..., V]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> V:
            k = key(*args, **kwargs) if key else make_key(func.__qualname__, args, kwargs)
            value = cache.get(k, _MISSING)
            if value is _MISSING:
                value = func(*args, **kwargs)
                cache.set(k, value)
            return value

        wrapper.cache = cache  # type: ignore[attr-defined]
        return wrapper

    return decorator
