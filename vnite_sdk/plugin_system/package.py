"""Plugin packaging pipeline.

This module turns a plugin project on disk into a single ``.vnpkg`` archive.
The pipeline validates the descriptor and entry file, stages the files
selected by the include patterns into a fresh staging tree, writes the final
manifest, compresses the staging tree and reports the result.
"""

from __future__ import annotations

import datetime
import enum
import importlib.metadata
import json
import os
import re
import shutil
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from vnite_sdk.core.config_manager import PackagingSettings
from vnite_sdk.core.logging_manager import get_logger
from vnite_sdk.plugin_system.manifest import PluginManifest
from vnite_sdk.plugin_system.patterns import DEFAULT_INCLUDE_PATTERNS, IncludePattern, parse_patterns
from vnite_sdk.utils.exceptions import ArchiveError, EntryFileNotFoundError

SDK_DISTRIBUTION = 'vnite-plugin-sdk'
SDK_VERSION_FALLBACK = '1.0.0'
FINAL_MANIFEST_NAME = 'manifest.json'

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE = re.compile(r'\s+')


def get_sdk_version() -> str:
    """Get the version of the installed SDK.

    Returns:
        Version string, or a fixed fallback when the distribution metadata
        cannot be found
    """
    try:
        return importlib.metadata.version(SDK_DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return SDK_VERSION_FALLBACK


def sanitize_filename(value: str) -> str:
    """Make a plugin id safe to use as a file name component.

    Characters rejected by common filesystems become ``_``, whitespace runs
    collapse into a single ``_``, and leading and trailing dots are removed so
    the result is never a hidden file.
    """
    if not value:
        return ''
    value = _UNSAFE_FILENAME_CHARS.sub('_', value)
    value = _WHITESPACE.sub('_', value)
    return value.lstrip('.').rstrip('.')


class CopyStatus(str, enum.Enum):
    """Outcome of staging the files selected by one include pattern."""

    COPIED = 'copied'
    SKIPPED_ABSENT = 'skipped_absent'
    SKIPPED_ERROR = 'skipped_error'


@dataclass
class CopyResult:
    """Result of staging one include pattern.

    Attributes:
        pattern: The include pattern as written
        status: Outcome of the copy attempt
        files: Relative paths staged for this pattern
        error: Reason the pattern was skipped, for ``SKIPPED_ERROR``
    """

    pattern: str
    status: CopyStatus
    files: List[PurePosixPath] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status != CopyStatus.COPIED


def stage_files(
        project_root: Path,
        staging_dir: Path,
        patterns: Sequence[IncludePattern]
) -> List[CopyResult]:
    """Copy the files selected by each pattern into the staging tree.

    Copying is best-effort per pattern: a pattern whose source does not exist
    is skipped, and an ``OSError`` while resolving or copying downgrades that
    pattern to a skip. Files already copied for a failing pattern stay staged.

    Args:
        project_root: Root of the plugin project
        staging_dir: Root of the staging tree
        patterns: Parsed include patterns

    Returns:
        One result per pattern, in pattern order
    """
    results = []
    for pattern in patterns:
        copied: List[PurePosixPath] = []
        try:
            matches = pattern.resolve(project_root)
            if not matches:
                results.append(CopyResult(pattern=pattern.raw, status=CopyStatus.SKIPPED_ABSENT))
                continue

            for source, relative in matches:
                destination = staging_dir.joinpath(*relative.parts)
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
                copied.append(relative)

            results.append(CopyResult(pattern=pattern.raw, status=CopyStatus.COPIED, files=copied))
        except OSError as e:
            results.append(
                CopyResult(pattern=pattern.raw, status=CopyStatus.SKIPPED_ERROR, files=copied, error=str(e))
            )
    return results


def create_archive(source_dir: Path, output_path: Path, compression_level: int = 9) -> None:
    """Create a zip archive from the contents of a directory.

    Entries are rooted at the directory's children (the directory itself is
    not a path prefix) and are written in sorted order. Modification times
    outside the range ZIP can store are clamped to it. The archive file is
    closed before this function returns.

    Args:
        source_dir: Directory to package
        output_path: Path where the archive will be created, replacing any
            existing file
        compression_level: Deflate level, 9 for maximum compression

    Raises:
        ArchiveError: If the archive cannot be written
    """
    try:
        with zipfile.ZipFile(
                output_path,
                'w',
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=compression_level,
                strict_timestamps=False,
        ) as zf:
            for file_path in sorted(p for p in source_dir.rglob('*') if p.is_file()):
                rel_path = PurePosixPath(*file_path.relative_to(source_dir).parts)
                zf.write(file_path, str(rel_path))
    except (OSError, ValueError, zipfile.LargeZipFile) as e:
        raise ArchiveError(f'Failed to create package: {e}') from e


@dataclass
class PackResult:
    """Outcome of a successful packaging run.

    Attributes:
        output_path: Absolute path of the produced archive
        size_bytes: Size of the archive
        manifest: Final manifest written into the archive
        copy_results: Per-pattern staging results
    """

    output_path: Path
    size_bytes: int
    manifest: Dict[str, Any]
    copy_results: List[CopyResult] = field(default_factory=list)

    @property
    def size_kib(self) -> float:
        return self.size_bytes / 1024

    @property
    def skipped_patterns(self) -> List[CopyResult]:
        return [result for result in self.copy_results if result.status == CopyStatus.SKIPPED_ERROR]


class PluginPackager:
    """Packager for Vnite plugin projects.

    Every step receives the project root explicitly; the packager never
    consults the process working directory.

    Attributes:
        project_root: Root directory of the plugin project
        settings: Packaging settings
        reporter: Callable receiving user-facing progress lines
        sdk_version: SDK version recorded in the final manifest
    """

    def __init__(
            self,
            project_root: Union[str, Path],
            settings: Optional[PackagingSettings] = None,
            reporter: Optional[Callable[[str], None]] = None,
            sdk_version: Optional[str] = None,
            clock: Optional[Callable[[], datetime.datetime]] = None
    ) -> None:
        """Initialize the packager.

        Args:
            project_root: Root directory of the plugin project
            settings: Packaging settings, defaults when omitted
            reporter: Progress callback, ``print`` when omitted
            sdk_version: SDK version override, resolved from metadata when omitted
            clock: Source of the packaging timestamp
        """
        self.project_root = Path(project_root).resolve()
        self.settings = settings or PackagingSettings()
        self.reporter = reporter or print
        self.sdk_version = sdk_version or get_sdk_version()
        self._clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc))
        self._patterns = parse_patterns(DEFAULT_INCLUDE_PATTERNS)
        self._logger = get_logger('vnite_sdk.plugin_system.package')

    def report(self, message: str = '') -> None:
        self.reporter(message)

    @property
    def output_dir(self) -> Path:
        return self.project_root / self.settings.output_dir

    @property
    def staging_dir(self) -> Path:
        return self.output_dir / self.settings.staging_dir

    def output_path_for(self, manifest: PluginManifest) -> Path:
        """Compute the archive path for a manifest."""
        file_name = f'{sanitize_filename(manifest.id)}-{manifest.version}.{self.settings.extension}'
        return self.output_dir / file_name

    def load_manifest(self) -> PluginManifest:
        """Read and validate the project's descriptor.

        Raises:
            ManifestError: If the descriptor is absent or unparseable
            ManifestValidationError: If required fields are missing
        """
        manifest = PluginManifest.load(self.project_root / self.settings.manifest_file)
        self._logger.debug('Manifest loaded', plugin_id=manifest.id, version=manifest.version)
        return manifest

    def validate_entry_file(self, manifest: PluginManifest) -> Path:
        """Check that the file named by ``main`` exists.

        Raises:
            EntryFileNotFoundError: If it does not
        """
        entry_file = self.project_root / manifest.main
        if not entry_file.exists():
            raise EntryFileNotFoundError(f'Main file not found: {manifest.main}', entry_file=manifest.main)
        return entry_file

    def prepare_output_dir(self) -> Path:
        output_dir = self.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    def prepare_staging_dir(self) -> Path:
        """Create an empty staging tree, removing one left by an earlier run."""
        staging_dir = self.staging_dir
        if staging_dir.exists():
            self._logger.info('Removing stale staging directory', path=str(staging_dir))
            shutil.rmtree(staging_dir)
        staging_dir.mkdir(parents=True)
        return staging_dir

    def collect_files(self, staging_dir: Path) -> List[CopyResult]:
        """Stage the files selected by the include patterns and narrate them."""
        results = stage_files(self.project_root, staging_dir, self._patterns)
        for result in results:
            for relative in result.files:
                self.report(f'  ✓ {relative}')
            if result.status == CopyStatus.SKIPPED_ERROR:
                self._logger.warning('Skipping optional files', pattern=result.pattern, error=result.error)
                self.report(f'  ~ {result.pattern} (optional, skipped)')
            elif result.status == CopyStatus.SKIPPED_ABSENT:
                self._logger.debug('Nothing matched include pattern', pattern=result.pattern)
        return results

    def write_final_manifest(self, manifest: PluginManifest, staging_dir: Path) -> Dict[str, Any]:
        """Write ``manifest.json`` at the staging root, replacing any copied one."""
        final_manifest = manifest.to_final_manifest(self._clock(), self.sdk_version)
        manifest_path = staging_dir / FINAL_MANIFEST_NAME
        with open(manifest_path, 'w', encoding='utf-8') as f:
            json.dump(final_manifest, f, indent=2, ensure_ascii=False)
        return final_manifest

    def cleanup(self, staging_dir: Path) -> None:
        shutil.rmtree(staging_dir)

    def pack(self) -> PackResult:
        """Package the plugin project.

        Returns:
            Details of the produced archive

        Raises:
            ManifestError: If the descriptor is absent, unparseable or invalid
            EntryFileNotFoundError: If the entry file is missing
            ArchiveError: If the archive cannot be written; the staging tree
                is left in place
        """
        self.report('Packaging Vnite Plugin')
        self.report()

        manifest = self.load_manifest()
        self.report(f'Plugin name: {manifest.name}')
        self.report(f'Plugin ID: {manifest.id}')
        self.report(f'Version: {manifest.version}')
        self.report(f'Main file: {manifest.main}')

        self.validate_entry_file(manifest)
        self.prepare_output_dir()
        staging_dir = self.prepare_staging_dir()

        self.report()
        self.report('Copying files...')
        copy_results = self.collect_files(staging_dir)

        self.report()
        self.report(f'Generating {FINAL_MANIFEST_NAME}...')
        final_manifest = self.write_final_manifest(manifest, staging_dir)
        self.report(f'  ✓ {FINAL_MANIFEST_NAME}')

        self.report()
        self.report('Creating archive...')
        output_path = self.output_path_for(manifest)
        create_archive(staging_dir, output_path, self.settings.compression_level)
        relative_output = os.path.relpath(output_path, self.project_root)
        self.report(f'  ✓ {relative_output}')

        self.cleanup(staging_dir)

        result = PackResult(
            output_path=output_path,
            size_bytes=output_path.stat().st_size,
            manifest=final_manifest,
            copy_results=copy_results,
        )
        self._logger.info('Plugin packaged', output=str(output_path), size=result.size_bytes)

        self.report()
        self.report('Packaging complete!')
        self.report(f'File: {relative_output}')
        self.report(f'Size: {result.size_kib:.2f} KB')
        return result
