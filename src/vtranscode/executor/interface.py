"""Tool path resolution for the executors.

Paths configured via config file or environment variables win; otherwise
the tool is looked up on the system PATH.
"""

import logging
import shutil
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_TOOLS = ("ffmpeg", "ffprobe")

# Thread-safe module-level config cache (lazy-loaded)
_tool_paths: dict[str, Path | None] | None = None
_tool_paths_lock = threading.Lock()


def _get_configured_paths() -> dict[str, Path | None]:
    """Get configured tool paths (thread-safe lazy initialization)."""
    global _tool_paths

    if _tool_paths is not None:
        return _tool_paths

    with _tool_paths_lock:
        if _tool_paths is not None:
            return _tool_paths

        from vtranscode.config import get_config

        config = get_config()
        _tool_paths = {
            "ffmpeg": config.tools.ffmpeg,
            "ffprobe": config.tools.ffprobe,
        }

    return _tool_paths


def refresh_tool_paths() -> None:
    """Drop cached tool paths so the next lookup re-reads configuration."""
    global _tool_paths
    with _tool_paths_lock:
        _tool_paths = None


def find_tool(tool_name: str) -> Path | None:
    """Locate a tool executable, or None if it cannot be found.

    Args:
        tool_name: One of SUPPORTED_TOOLS.

    Returns:
        Configured path, else the PATH match, else None.
    """
    if tool_name not in SUPPORTED_TOOLS:
        raise ValueError(f"Unknown tool: {tool_name}")

    configured = _get_configured_paths().get(tool_name)
    if configured is not None:
        return configured

    found = shutil.which(tool_name)
    return Path(found) if found else None


def get_tool_path(tool_name: str) -> str:
    """Get the command used to invoke a tool.

    Never raises for a missing tool: the bare name is returned and the
    failure surfaces when the process is spawned.

    Args:
        tool_name: Name of the tool.

    Returns:
        Path to the tool, or its bare name.
    """
    path = find_tool(tool_name)
    if path is None:
        logger.debug("%s not found on PATH, using bare name", tool_name)
        return tool_name
    return str(path)
