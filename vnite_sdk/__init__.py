"""Vnite plugin SDK.

Tooling for packaging Vnite plugin projects into distributable ``.vnpkg``
archives.
"""

from __future__ import annotations

from vnite_sdk.__version__ import __version__

__all__ = ["__version__"]
