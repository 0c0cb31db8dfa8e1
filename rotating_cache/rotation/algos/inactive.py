"""
INACTIVE rotation: evict the least recently read entry.
"""
from typing import Dict, Optional

from rotating_cache.entry import Entry
from rotating_cache.options import CacheOptions

import logging
logger = logging.getLogger(__name__)

class Inactive:
    """
    Least recently used by `last_access`. Only reads move `last_access`,
    a fresh `set` counts as an access because it re-creates the entry.
    """
    def __init__(self, options: CacheOptions) -> None:
        pass

    def rank(self, entry: Entry) -> tuple:
        return (entry.last_access, entry.sequence)

    def select_victim(self, entries: Dict[str, Entry]) -> Optional[str]:
        if not entries:
            return None
        victim = min(entries, key=lambda k: self.rank(entries[k]))
        logger.debug(f"Inactive victim: {victim} ({entries[victim]})")
        return victim
