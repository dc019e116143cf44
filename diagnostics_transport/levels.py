"""Severity mapping onto the canonical diagnostics vocabulary."""

SEVERITY_LEVELS = (
    "Error",
    "Warning",
    "InfoBasic",
    "InfoMedium",
    "InfoDetail",
    "Debug",
    "Verbose",
    "Stats",
    "LibDebug",
    "LibVerbose",
)

DEFAULT_LEVEL = "Info"

ERROR_LEVEL = "Error"

_LEVEL_MAP = {
    "silly": "InfoDetail",
    "debug": "Debug",
    "verbose": "Verbose",
    "info": "InfoBasic",
    "warn": "Warning",
    "error": "Error",
}


def map_level(level):
    """Return the canonical level for *level*; unknown tokens pass through."""
    if isinstance(level, str):
        return _LEVEL_MAP.get(level, level)
    return level
