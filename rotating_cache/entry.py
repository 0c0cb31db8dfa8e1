from typing import Any

NEVER_EXPIRES = -1

class Entry:
    """
    One stored key/value pair
      - `size`: estimated cost, fixed at insertion
      - `ttl`: seconds relative to `added`, -1 never expires
      - `added`, `last_access`: timestamps in milliseconds
      - `sequence`: store-wide counter bumped on insert and read, breaks timestamp ties
    """
    def __init__(self, value: Any, size: int, ttl: int, now: int, sequence: int) -> None:
        self.value = value
        self.size = size
        self.ttl = ttl
        self.added = now
        self.last_access = now
        self.added_sequence = sequence
        self.sequence = sequence

    def touch(self, now: int, sequence: int) -> None:
        self.last_access = now
        self.sequence = sequence

    def expires(self) -> bool:
        return self.ttl > NEVER_EXPIRES

    def expires_at(self, ttl_scale: int) -> float:
        """
        Absolute expiry time in milliseconds, infinity for non-expiring entries
        """
        if not self.expires():
            return float('inf')
        return self.added + self.ttl * ttl_scale

    def is_expired(self, now: int, ttl_scale: int) -> bool:
        return self.expires() and self.expires_at(ttl_scale) < now

    def __repr__(self):
        return f"Entry(size={self.size}, ttl={self.ttl}, added={self.added}, last_access={self.last_access})"
