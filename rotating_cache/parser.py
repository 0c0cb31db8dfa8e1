from typing import Tuple
import logging
import re

from rotating_cache.exceptions import ParserError

logger = logging.getLogger(__name__)

class CommandParser:
    """
    Parses workload trace lines, e.g. `SET k1 v1 30`, `GET k1`, `DEL k1`, `TTL k1 10`
    """
    def __init__(self):
        # arities save (min, max) arguments for each command
        self._arities = {
            "set": (2, 3),   # optional ttl
            "get": (1, 1),
            "del": (1, 1),
            "ttl": (2, 2),
        }
        # argument positions holding integer seconds
        self._int_args = {
            "set": (2,),
            "ttl": (1,),
        }

    def parse(self, command: str) -> Tuple:
        """
        Parse a command string
        Return a tuple of (command_name, args)
        """
        pattern = r'"([^"]*)"|\'([^\']*)\'|(\S+)'
        matches = re.findall(pattern, command)
        parts = [g1 or g2 or g3 for (g1, g2, g3) in matches]

        logger.debug(f"Parts after split: {parts}")
        if not parts:
            raise ParserError("Empty command")

        cmd = parts[0].lower()
        if cmd not in self._arities:
            raise ParserError(f"Unknown command: {cmd}")

        min_args, max_args = self._arities[cmd]
        args = parts[1:]

        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            raise ParserError(f"Invalid number of arguments for {cmd}: expected {min_args}-{max_args}, got {len(args)}")

        for pos in self._int_args.get(cmd, ()):
            if pos < len(args):
                try:
                    args[pos] = int(args[pos])
                except ValueError:
                    raise ParserError(f"Argument {pos + 1} of {cmd} must be an integer, got '{args[pos]}'")

        return cmd, args
