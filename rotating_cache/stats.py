"""
Running cache statistics
"""
from dataclasses import dataclass, asdict, replace


@dataclass
class CacheStats:
    """
    Aggregate counters. `keys`, `key_size` and `value_size` always match the live entries,
    `hits` and `misses` accumulate until flushed.
    """
    keys: int = 0
    hits: int = 0
    misses: int = 0
    key_size: int = 0
    value_size: int = 0

    def hit_ratio(self) -> float:
        """
        Caching effectiveness
        """
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def account(self, key: str, size: int) -> None:
        self.keys += 1
        self.key_size += len(key)
        self.value_size += size

    def unaccount(self, key: str, size: int) -> None:
        self.keys -= 1
        self.key_size -= len(key)
        self.value_size -= size

    def flush_hits(self) -> None:
        self.hits = 0
        self.misses = 0

    def snapshot(self) -> "CacheStats":
        return replace(self)

    def to_dict(self) -> dict:
        return asdict(self)
