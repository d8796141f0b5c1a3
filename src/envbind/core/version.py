"""Version information for envbind and its runtime dependencies."""

import importlib.metadata
from typing import Dict


def get_envbind_version() -> str:
    """Return the envbind version."""
    try:
        return importlib.metadata.version("envbind")
    except importlib.metadata.PackageNotFoundError:
        # Running from a source checkout
        return "0.1.0-dev"


def _distribution_version(name: str) -> str:
    try:
        return importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_version_info() -> Dict[str, str]:
    """Get version information for envbind and the libraries it runs on."""
    return {
        "envbind": get_envbind_version(),
        "structlog": _distribution_version("structlog"),
        "python-dotenv": _distribution_version("python-dotenv"),
        "pyyaml": _distribution_version("PyYAML"),
    }
