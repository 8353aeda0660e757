"""Core utilities shared across vtranscode modules.

- string_utils: Non-raising decoding of process output
- subprocess_utils: Subprocess wrapper and chunked pipe reading
- watchdog: Idle-timeout watchdog for blocking reads
"""

from vtranscode.core.string_utils import is_valid_utf8, repair_encoding
from vtranscode.core.subprocess_utils import iter_chunks, run_command
from vtranscode.core.watchdog import IdleTimeoutWatchdog, iter_with_idle_timeout

__all__ = [
    "IdleTimeoutWatchdog",
    "is_valid_utf8",
    "iter_chunks",
    "iter_with_idle_timeout",
    "repair_encoding",
    "run_command",
]
