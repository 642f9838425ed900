__title__ = 'trellis'
__license__ = 'MIT'
# Fallback when the distribution metadata is unavailable (source checkout).
__version__ = "0.1.0"

from .arguments import *
from .commands import *
from .completions import *
from .context import *
from .faults import *
from .helps import *
from .locales import *
from .text import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
))

version_info = VersionInfo(0, 1, 0, "final", 0)

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the completions
__all__ += completions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the context
__all__ += context.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the helps
__all__ += helps.__all__  # type: ignore[attr-defined]
# Load the exposed API of the locales
__all__ += locales.__all__  # type: ignore[attr-defined]
# Load the exposed API of the text
__all__ += text.__all__  # type: ignore[attr-defined]
