"""
Heuristic value cost model. Used for stats only, never blocks a write.
"""
from collections.abc import Mapping
from typing import Any
import inspect

from rotating_cache.options import CacheOptions

NUMBER_SIZE = 8

def estimate_size(value: Any, options: CacheOptions) -> int:
    """
    Approximate cost of `value` in abstract units:
      - None -> 0
      - list / tuple -> array_value_size per element
      - awaitable -> flat promise_value_size
      - str -> number of characters
      - bool / int / float -> 8
      - mapping or plain object -> object_value_size per key / attribute
      - anything else -> 0
    """
    if value is None:
        return 0

    if isinstance(value, (list, tuple)):
        return options.array_value_size * len(value)

    if inspect.isawaitable(value):
        return options.promise_value_size

    if isinstance(value, str):
        return len(value)

    if isinstance(value, (bool, int, float)):
        return NUMBER_SIZE

    if isinstance(value, Mapping):
        return options.object_value_size * len(value)

    # plain objects: count own attributes
    attrs = getattr(value, "__dict__", None)
    if isinstance(attrs, dict):
        return options.object_value_size * len(attrs)
    return 0
