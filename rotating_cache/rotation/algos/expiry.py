"""
EXPIRY rotation: evict the entry that would expire soonest.
- Entries without a ttl expire at +inf and are only chosen when every entry is non-expiring
- Ties (including the all non-expiring case) fall back to insertion order, i.e. OLDEST
"""
from typing import Dict, Optional

from rotating_cache.entry import Entry
from rotating_cache.options import CacheOptions

import logging
logger = logging.getLogger(__name__)

class Expiry:
    def __init__(self, options: CacheOptions) -> None:
        self._ttl_scale = options.ttl_scale

    def rank(self, entry: Entry) -> tuple:
        return (entry.expires_at(self._ttl_scale), entry.added, entry.added_sequence)

    def select_victim(self, entries: Dict[str, Entry]) -> Optional[str]:
        if not entries:
            return None
        victim = min(entries, key=lambda k: self.rank(entries[k]))
        logger.debug(f"Expiry victim: {victim} ({entries[victim]})")
        return victim
