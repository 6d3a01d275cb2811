"""
Bounded strategy cache.

``BoundedCache`` is a small in-memory key → value store with a TTL and an
approximate-LRU eviction policy:

  - ``get`` drops an entry older than ``ttl_seconds`` and reports a miss.
    A hit increments the entry's access count.
  - ``set`` on a *new* key when the cache is full evicts the entry with the
    lowest access count; ties go to the oldest insertion.

Cache keys come from ``advice_fingerprint()``: a coarse, lossy tuple of the
snapshot series and parameters (net worth and balances rounded to the
nearest thousand). Distinct inputs that quantise identically share a cached
result. That is accepted: strategies are heuristic and the fingerprint
captures everything that moves their output materially.

``CachedStrategy`` composes a pure strategy with one cache instance. The
engine builds one per strategy; nothing is cached implicitly.

Not thread-safe: one writer at a time per engine.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Optional, Sequence, TypeVar

from retirement_advisor.advice.scoring import ensure_finite
from retirement_advisor.advice.strategies import Strategy
from retirement_advisor.models.advice import AdviceItem
from retirement_advisor.models.household import HouseholdParameters
from retirement_advisor.models.snapshot import FinancialSnapshot

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Fingerprint = tuple


@dataclass
class CacheEntry(Generic[V]):
    """One cached value with its bookkeeping."""

    value:        V
    inserted_at:  float
    access_count: int = 1


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache counters."""

    size:      int
    max_size:  int
    hits:      int
    misses:    int
    evictions: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class BoundedCache(Generic[K, V]):
    """TTL cache with lowest-access-count eviction.

    Args:
        max_size:    Maximum number of entries (>= 1).
        ttl_seconds: Entry lifetime; older entries are treated as absent.
        clock:       Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_size: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}.")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}.")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry[V]) -> bool:
        return self._clock() - entry.inserted_at > self.ttl_seconds

    def get(self, key: K) -> Optional[V]:
        """Return the cached value, or ``None`` on a miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._is_expired(entry):
            del self._entries[key]
            self._misses += 1
            return None
        entry.access_count += 1
        self._hits += 1
        return entry.value

    def set(self, key: K, value: V) -> None:
        """Store ``value``; evicts one entry first when full and ``key`` is new."""
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._evict_one()
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def has(self, key: K) -> bool:
        """Whether a live entry exists. Does not count as an access."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._is_expired(entry):
            del self._entries[key]
            return False
        return True

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def _evict_one(self) -> None:
        # min() keeps the first of equal keys, and dicts iterate in insertion order.
        victim = min(
            self._entries,
            key=lambda k: (self._entries[k].access_count, self._entries[k].inserted_at),
        )
        del self._entries[victim]
        self._evictions += 1


# ── Fingerprint ───────────────────────────────────────────────────────────────


def _thousands(value: float, name: str) -> int:
    return round(ensure_finite(value, name) / 1000.0)


def advice_fingerprint(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
    category: str,
) -> Fingerprint:
    """Coarse cache key for one strategy call.

    Components: category, series length, first / mid / last net worth (in
    thousands), salary, first loan balance and investments (in thousands),
    household current and target ages, and each person's id and ages.

    Raises:
        ValueError: If ``states`` is empty.
        NonFiniteValueError: If a fingerprinted balance is NaN or infinite.
    """
    if not states:
        raise ValueError("Cannot fingerprint an empty snapshot series.")

    first = states[0]
    mid = states[len(states) // 2]
    last = states[-1]
    return (
        category,
        len(states),
        _thousands(first.net_worth, "net_worth"),
        _thousands(mid.net_worth, "net_worth"),
        _thousands(last.net_worth, "net_worth"),
        params.annual_salary,
        _thousands(first.loan_balance, "loan_balance"),
        _thousands(first.investments, "investments"),
        params.current_age,
        params.retirement_age,
        tuple((p.id, p.current_age, p.retirement_age) for p in params.people),
    )


# ── Cached strategy ───────────────────────────────────────────────────────────


class CachedStrategy:
    """A strategy composed with its own ``BoundedCache``.

    Calling it returns the cached list for the input's fingerprint, or runs
    the wrapped strategy and stores the result.

    Attributes:
        strategy: The wrapped pure strategy.
        cache:    Fingerprint → tuple of ``AdviceItem``.
        category: Label mixed into every fingerprint.
    """

    def __init__(
        self,
        strategy: Strategy,
        cache: BoundedCache[Fingerprint, tuple[AdviceItem, ...]],
        category: str,
    ) -> None:
        self.strategy = strategy
        self.cache = cache
        self.category = category

    def __call__(
        self,
        states: Sequence[FinancialSnapshot],
        params: HouseholdParameters,
    ) -> list[AdviceItem]:
        if not states:
            return self.strategy(states, params)

        key = advice_fingerprint(states, params, self.category)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s advice", self.category)
            return list(cached)

        items = self.strategy(states, params)
        self.cache.set(key, tuple(items))
        return list(items)
