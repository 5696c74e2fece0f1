__title__ = 'curvecli'
__license__ = 'Apache-2.0'

from .version import __version__

from .commands import *
from .dispatcher import *
from .faults import *
from .flags import *
from .presentation import *
from .registrar import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
))

version_info = VersionInfo(*map(int, __version__.split(".")))

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
)

# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatcher
__all__ += dispatcher.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the flags
__all__ += flags.__all__  # type: ignore[attr-defined]
# Load the exposed API of the presentation policy
__all__ += presentation.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registrar
__all__ += registrar.__all__  # type: ignore[attr-defined]
