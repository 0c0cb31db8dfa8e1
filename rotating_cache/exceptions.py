class RotatingCacheError(Exception):
    """Base class for all rotating cache exceptions."""
    pass

class InvalidConfigurationError(RotatingCacheError):
    """Raised at construction for an unknown rotation type or malformed option."""
    pass

class KeyNotFoundError(RotatingCacheError):
    """For TTL, GET_TTL"""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key '{key}' does not exist")

class CapacityExceededError(RotatingCacheError):
    """Raised when a write would overflow max_keys under a non-evicting policy."""
    def __init__(self, max_keys: int, pending: bool = False):
        self.max_keys = max_keys
        if pending:
            message = f"Cache limit of {max_keys} keys will be reached"
        else:
            message = f"Cache limit of {max_keys} keys reached"
        super().__init__(message)

class ParserError(RotatingCacheError):
    """Raised when there is an error in command parsing."""
    pass
