"""
carton_api package

Carton-selection engine: chooses the best standard shipping carton (or a short
sequence of cartons) for a batch of items, verified by a 3D placement
simulation, plus a FastAPI wrapper around it.

This initializer exposes a small, stable surface:
- __version__: package version string
- get_version(): helper to retrieve the version

The engine itself lives in `selector`, `packing` and `scoring`. Keep this file
minimal to avoid import-time side-effects (FastAPI is only imported by `api`).
"""

from typing import Final

__all__ = ["__version__", "get_version"]

__version__: Final[str] = "0.1.0"


def get_version() -> str:
    """
    Return the package version.
    """
    return __version__
