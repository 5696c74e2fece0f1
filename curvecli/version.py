"""
Version information of the curve tool.

The string is process-wide and read-only; the dispatcher reads it once
through get_version() before dispatching.
"""
# Placeholder, modified by dynamic-versioning.
__version__ = "1.0.0"


def get_version():
    return __version__


__all__ = (
    "__version__",
    "get_version",
)
