import logging
from collections import deque
from typing import Dict, Optional

from rotating_cache.entry import Entry
from rotating_cache.exceptions import CapacityExceededError
from rotating_cache.options import CacheOptions, NO_ROTATION

from rotating_cache.rotation.algos.oldest import Oldest
from rotating_cache.rotation.algos.inactive import Inactive
from rotating_cache.rotation.algos.expiry import Expiry

logger = logging.getLogger(__name__)

class RotationManager:
    """
    Input:
        - `options`: cache options, `rotate_type` picks the policy
            + "oldest", "inactive", "expiry", "none"
        - `delta`: how many recent victims are remembered to count premature evictions
    """
    def __init__(self, options: CacheOptions, delta: int = 10):
        self._options = options

        self._parser = {
            "oldest": Oldest,
            "inactive": Inactive,
            "expiry": Expiry,
        }

        # options already validated rotate_type, "none" has no algorithm
        if options.rotate_type == NO_ROTATION:
            self._algo = None
        else:
            self._algo = self._parser[options.rotate_type](options)

        # metrics
        self._n_evicts = 0
        self._delta = delta
        self._recently_evicted = deque(maxlen=self._delta)   # track if evicted key is read again soon
        self._n_reuse_evicts = 0

    @property
    def rotate_type(self) -> str:
        return self._options.rotate_type

    def needs_rotation(self, n_keys: int, incoming: int = 1) -> bool:
        """
        Whether admitting `incoming` new keys would exceed max_keys
        """
        return self._options.bounded and n_keys + incoming > self._options.max_keys

    def check_batch(self, n_keys: int, batch_size: int) -> None:
        """
        A non-rotating cache refuses a batch that cannot fit as a whole.
        """
        if self._algo is None and self.needs_rotation(n_keys, batch_size):
            raise CapacityExceededError(self._options.max_keys, pending=True)

    def select_victim(self, entries: Dict[str, Entry]) -> Optional[str]:
        """
        Pick exactly one key to evict. Raises CapacityExceededError under "none".
        """
        if self._algo is None:
            raise CapacityExceededError(self._options.max_keys)
        victim = self._algo.select_victim(entries)
        if victim is not None:
            self._n_evicts += 1
            self._recently_evicted.append(victim)
            logger.info(f"Rotation ({self.rotate_type}): limit of {self._options.max_keys} keys reached, evicting `{victim}`")
        return victim

    def on_set(self, key: str) -> None:
        if key in self._recently_evicted:
            self._recently_evicted.remove(key)

    def on_miss(self, key: str) -> None:
        if key in self._recently_evicted:
            self._n_reuse_evicts += 1

    def reset(self) -> None:
        self._recently_evicted.clear()
        self._n_evicts = 0
        self._n_reuse_evicts = 0

    def get_metrics(self) -> dict:
        """
        Get the eviction metrics.
        """
        return {
            "rotate_type": self.rotate_type,
            "n_evicts": self._n_evicts,
            "n_reuse_evicts": self._n_reuse_evicts,
            "delta": self._delta,
        }
