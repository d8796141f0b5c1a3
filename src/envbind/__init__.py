"""Populate dataclass records from environment variables."""

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .core import environment
from .core.version import get_envbind_version

__version__ = get_envbind_version()

__all__ = [*_core_all, "environment", "__version__"]
