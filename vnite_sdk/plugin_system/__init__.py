"""Plugin packaging system for Vnite.

This package turns a Vnite plugin project into a distributable ``.vnpkg``
archive.

Modules:
    manifest: Plugin descriptor parsing and validation
    patterns: Include patterns selecting the files to package
    package: The packaging pipeline and archive creation
    cli: Command-line entry point for the pack command
"""

from __future__ import annotations

from vnite_sdk.plugin_system.manifest import PluginManifest
from vnite_sdk.plugin_system.package import (
    CopyResult,
    CopyStatus,
    PackResult,
    PluginPackager,
    create_archive,
    sanitize_filename,
)
from vnite_sdk.plugin_system.patterns import DEFAULT_INCLUDE_PATTERNS, IncludePattern, PatternKind

__all__ = [
    "PluginManifest",
    "PluginPackager",
    "PackResult",
    "CopyResult",
    "CopyStatus",
    "create_archive",
    "sanitize_filename",
    "IncludePattern",
    "PatternKind",
    "DEFAULT_INCLUDE_PATTERNS",
]
