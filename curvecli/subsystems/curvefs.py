"""
The "fs" subsystem entry point (curvefs management).

Only the subtree root lives here; the curvefs commands themselves are
supplied by the curvefs tooling and mounted under it.
"""
from ..commands import Command


def new_curvefs_command():
    return Command(
        "fs",
        "fs [OPTIONS] COMMAND [ARGS...]",
        "Manage curvefs cluster",
    )


__all__ = (
    "new_curvefs_command",
)
