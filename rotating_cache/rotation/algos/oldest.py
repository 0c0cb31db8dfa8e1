"""
OLDEST rotation: evict the earliest inserted entry.
"""
from typing import Dict, Optional

from rotating_cache.entry import Entry
from rotating_cache.options import CacheOptions

import logging
logger = logging.getLogger(__name__)

class Oldest:
    def __init__(self, options: CacheOptions) -> None:
        pass

    def rank(self, entry: Entry) -> tuple:
        # insertion sequence settles entries added in the same millisecond
        return (entry.added, entry.added_sequence)

    def select_victim(self, entries: Dict[str, Entry]) -> Optional[str]:
        """
        Return the key with the smallest `added`, None if there is nothing to evict.
        """
        if not entries:
            return None
        victim = min(entries, key=lambda k: self.rank(entries[k]))
        logger.debug(f"Oldest victim: {victim} ({entries[victim]})")
        return victim
