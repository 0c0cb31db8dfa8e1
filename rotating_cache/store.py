from typing import Any, Dict, Iterable, List, Optional, Union
from collections.abc import Mapping
from threading import RLock, Timer
import copy
import inspect
import itertools
import time
import logging

from rotating_cache.entry import Entry
from rotating_cache.exceptions import KeyNotFoundError
from rotating_cache.options import CacheOptions
from rotating_cache.rotation.manager import RotationManager
from rotating_cache.sizing import estimate_size
from rotating_cache.stats import CacheStats

logger = logging.getLogger(__name__)


class _Nil:
    """
    Result of a cache miss. Distinct from None, which is a legal value.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "(nil)"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

NIL = _Nil()


class RotatingCache:
    """
    In-process key/value cache with a key limit, per-key ttl and rotation policies.
      - Keys are stringified with str() by every operation
      - Expired entries are removed by a periodic sweep every `checkperiod` seconds
      - All entry/stats mutation happens under one re-entrant lock, shared with the sweep
    """
    def __init__(self, options: Optional[CacheOptions] = None, **overrides: Any):
        options = options or CacheOptions()
        if overrides:
            options = options.override(**overrides)
        self._options = options
        self._rotation = RotationManager(options)

        self._store: Dict[str, Entry] = {}
        self._stats = CacheStats()
        self._lock = RLock()
        self._sequence = itertools.count()

        self._closed = False
        self._check_timer: Optional[Timer] = None
        with self._lock:
            self._schedule_sweep()

    def __enter__(self) -> "RotatingCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: Any) -> bool:
        return self.has_key(key)

    """
    -----------------------HELPERS-------------------------
    """
    def _now(self) -> int:
        return int(time.time() * 1000)

    def _make_key(self, key: Any) -> str:
        return str(key)

    def _next_sequence(self) -> int:
        return next(self._sequence)

    def _remove(self, key: str) -> int:
        """
        Drop an entry and its stats contribution. Caller holds the lock.
        """
        entry = self._store.pop(key, None)
        if entry is None:
            return 0
        self._stats.unaccount(key, entry.size)
        return 1

    def _schedule_sweep(self) -> None:
        """
        Arm the next expiry sweep. Caller holds the lock.
        """
        if self._closed or self._options.checkperiod <= 0:
            return
        interval = self._options.checkperiod * self._options.ttl_scale / 1000
        self._check_timer = Timer(interval, self._sweep)
        self._check_timer.daemon = True
        self._check_timer.start()

    def _sweep(self) -> None:
        with self._lock:
            # close() may have run while this timer was already dispatched
            if self._closed:
                return
            self.purge_expired()
            self._schedule_sweep()

    @property
    def options(self) -> CacheOptions:
        return self._options

    @property
    def rotation(self) -> RotationManager:
        return self._rotation

    @property
    def closed(self) -> bool:
        return self._closed

    """
    -----------------------WRITES-------------------------
    """
    def set(self, key: Any, value: Any, ttl: Optional[int] = None) -> None:
        """
        - Store value under key, replacing any existing entry
        - Rotate out one entry if the cache is full (CapacityExceededError under "none")
        - ttl=None uses std_ttl, ttl=0 stores nothing
        """
        key = self._make_key(key)
        ttl = ttl if ttl is not None else self._options.std_ttl

        with self._lock:
            logger.debug(f"Setting key '{key}' with ttl {ttl}")
            if key in self._store:
                self._remove(key)

            if ttl == 0:
                logger.debug(f"Key '{key}' written with ttl 0, not stored")
                return

            if self._rotation.needs_rotation(self._stats.keys):
                victim = self._rotation.select_victim(self._store)
                if victim is None:
                    # nothing to rotate out, e.g. max_keys=0
                    logger.debug(f"No room for key '{key}' under a limit of {self._options.max_keys} keys, not stored")
                    return
                self._remove(victim)

            size = estimate_size(value, self._options)
            now = self._now()
            self._store[key] = Entry(value, size, ttl, now, self._next_sequence())
            self._stats.account(key, size)
            self._rotation.on_set(key)

    def mset(self, entries: Union[Mapping, Iterable]) -> None:
        """
        - Bulk set. Accepts a mapping of key -> value, or an iterable of
          {"key", "value", "ttl"} mappings / (key, value[, ttl]) tuples
        - Under "none" the whole batch is refused when it cannot fit
        """
        items = list(_iter_items(entries))
        with self._lock:
            self._rotation.check_batch(self._stats.keys, len(items))
            for key, value, ttl in items:
                self.set(key, value, ttl)

    def delete(self, key: Any) -> int:
        """
        - Delete a key from the cache
        - Return 1 if key was deleted, 0 if it did not exist
        """
        key = self._make_key(key)
        with self._lock:
            logger.debug(f"Deleting key '{key}'")
            return self._remove(key)

    def mdelete(self, keys: Iterable[Any]) -> int:
        with self._lock:
            return sum(self.delete(k) for k in keys)

    def ttl(self, key: Any, seconds: int) -> None:
        """
        - Overwrite the ttl of an existing key, still measured from when it was added
        - seconds=0 deletes the key
        - Throw error if the key is not set
        """
        key = self._make_key(key)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                raise KeyNotFoundError(key)
            if seconds == 0:
                self._remove(key)
            else:
                entry.ttl = seconds

    def flush_all(self) -> None:
        """
        - Clear every entry and all stats
        """
        with self._lock:
            self._store.clear()
            self._stats = CacheStats()
            self._rotation.reset()

    def flush_stats(self) -> None:
        with self._lock:
            self._stats.flush_hits()

    """
    -----------------------READS-------------------------
    """
    def get(self, key: Any) -> Any:
        """
        - Get value by key, a deep copy when use_clones is on (awaitables are shared)
        - Return NIL if key does not exist
        """
        key = self._make_key(key)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._stats.misses += 1
                self._rotation.on_miss(key)
                return NIL
            self._stats.hits += 1
            entry.touch(self._now(), self._next_sequence())
            value = entry.value
        if not self._options.use_clones or inspect.isawaitable(value):
            # coroutines and futures cannot be copied, share the awaitable
            return value
        return copy.deepcopy(value)

    def mget(self, keys: Iterable[Any]) -> Dict[Any, Any]:
        with self._lock:
            return {k: self.get(k) for k in keys}

    def get_ttl(self, key: Any) -> int:
        """
        - Get the configured ttl of a key (-1 when it never expires)
        """
        key = self._make_key(key)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                raise KeyNotFoundError(key)
            return entry.ttl

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._store.keys())

    def has_key(self, key: Any) -> bool:
        return self._make_key(key) in self._store

    def stats(self) -> CacheStats:
        with self._lock:
            return self._stats.snapshot()

    """
    -----------------------EXPIRY-------------------------
    """
    def purge_expired(self) -> int:
        """
        One sweep pass: remove every entry whose ttl has run out.
        Return the number of removed entries.
        """
        with self._lock:
            now = self._now()
            scale = self._options.ttl_scale
            expired = [k for k, entry in self._store.items() if entry.is_expired(now, scale)]
            for key in expired:
                self._remove(key)
            if expired:
                logger.info(f"Expired {len(expired)} key(s)")
            return len(expired)

    def close(self) -> None:
        """
        Stop the periodic sweep. The cache stays usable but never expires entries on its own again.
        """
        with self._lock:
            self._closed = True
            if self._check_timer is not None:
                self._check_timer.cancel()
                self._check_timer = None


def _iter_items(entries: Union[Mapping, Iterable]):
    """
    Normalize mset input to (key, value, ttl) triples
    """
    if isinstance(entries, Mapping):
        for key, value in entries.items():
            yield key, value, None
        return
    for item in entries:
        if isinstance(item, Mapping):
            yield item["key"], item["value"], item.get("ttl")
        else:
            key, value, *rest = item
            yield key, value, (rest[0] if rest else None)
