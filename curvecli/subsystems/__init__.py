"""
Subsystem command trees mounted under the root "curve" command.
"""
from .curvefs import *

__all__ = curvefs.__all__  # type: ignore[name-defined]
