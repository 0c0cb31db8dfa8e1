"""
Cache configuration: defaults, validation and environment loading.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional
import os
import logging

from dotenv import load_dotenv

from rotating_cache.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

# policies that pick a victim when the cache is full
ROTATE_TYPES = ("oldest", "inactive", "expiry")
# hard limit, writes past max_keys fail
NO_ROTATION = "none"

ENV_PREFIX = "ROTATING_CACHE_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CacheOptions:
    """
    Immutable snapshot of the cache configuration.
      - `max_keys`: capacity bound, -1 or None means unbounded
      - `std_ttl`: default ttl in seconds when a write does not give one (-1 never expires)
      - `checkperiod`: seconds between expiry sweeps, <= 0 disables the sweep
      - `use_clones`: `get` returns deep copies of stored values
      - `delete_on_expire`: the sweep deletes expired entries
      - `rotate_type`: one of "oldest", "inactive", "expiry", "none"
    The remaining fields weight the size estimator and scale ttl seconds to milliseconds.
    """
    max_keys: Optional[int] = 2500
    std_ttl: int = -1
    checkperiod: float = 600
    use_clones: bool = True
    delete_on_expire: bool = True
    rotate_type: str = "oldest"

    # "private" options
    object_value_size: int = 80
    promise_value_size: int = 80
    array_value_size: int = 40
    ttl_scale: int = 1000

    def __post_init__(self):
        if self.rotate_type not in (*ROTATE_TYPES, NO_ROTATION):
            raise InvalidConfigurationError(f"Invalid rotation type specified: {self.rotate_type}")

    @property
    def bounded(self) -> bool:
        return self.max_keys is not None and self.max_keys >= 0

    @property
    def rotating(self) -> bool:
        return self.rotate_type in ROTATE_TYPES

    def override(self, **overrides: Any) -> "CacheOptions":
        """
        Return a copy with the given fields replaced.
        Unknown field names raise InvalidConfigurationError.
        """
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise InvalidConfigurationError(f"Unknown cache option(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, dotenv_path: Optional[str] = None) -> "CacheOptions":
        """
        Build options from environment variables (a .env file is loaded first).
        Unset variables keep their defaults.
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)

        parsers = {
            "max_keys": int,
            "std_ttl": int,
            "checkperiod": float,
            "use_clones": _parse_bool,
            "delete_on_expire": _parse_bool,
            "rotate_type": lambda raw: raw.strip().lower(),
        }
        values: Dict[str, Any] = {}
        for name, parse in parsers.items():
            raw = os.getenv(prefix + name.upper())
            if raw is None or raw == "":
                continue
            try:
                values[name] = parse(raw)
            except ValueError as e:
                raise InvalidConfigurationError(f"Invalid value for {prefix + name.upper()}: {raw!r}") from e
        logger.debug(f"Options loaded from environment: {values}")
        return cls(**values)


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"not a boolean: {raw}")
