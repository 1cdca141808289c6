"""Include patterns selecting which project files end up in a plugin package.

A pattern is either a literal relative path (a file, or a directory copied
with everything below it), or a ``<dir>/<glob>`` wildcard whose glob is
matched against the immediate children of ``<dir>`` only. The one exception
is ``assets/**/*``, which is recognised as a literal spelling for "the whole
assets subtree" and is not a general recursive-glob feature.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Optional, Pattern, Sequence, Tuple

RECURSIVE_ASSETS_PATTERN = 'assets/**/*'

DEFAULT_INCLUDE_PATTERNS: Tuple[str, ...] = (
    'dist/*.js',
    'dist/*.js.map',
    'dist/*.d.ts',
    'package.json',
    'README.md',
    'LICENSE',
    'icon.png',
    'icon.ico',
    RECURSIVE_ASSETS_PATTERN,
)


class PatternKind(str, enum.Enum):
    """How an include pattern selects files."""

    LITERAL = 'literal'  # Exact relative path, file or directory
    WILDCARD = 'wildcard'  # Glob over the direct children of one directory
    RECURSIVE = 'recursive'  # Whole subtree


def glob_to_regex(glob: str) -> str:
    """Convert a single-segment glob to an anchored regex pattern.

    Only ``*`` is special and it never crosses a path separator; every other
    character matches itself.

    Args:
        glob: Filename glob such as ``*.js.map``

    Returns:
        Regex pattern string
    """
    return '^' + '[^/]*'.join(re.escape(part) for part in glob.split('*')) + '$'


@dataclass(frozen=True)
class IncludePattern:
    """A parsed include pattern.

    Attributes:
        raw: The pattern as written
        kind: How the pattern selects files
        directory: Directory the pattern applies to, relative to the project root
        glob: Filename glob for wildcard patterns
    """

    raw: str
    kind: PatternKind
    directory: PurePosixPath
    glob: Optional[str] = None
    _regex: Optional[Pattern[str]] = field(default=None, repr=False, compare=False)

    @classmethod
    def parse(cls, pattern: str) -> IncludePattern:
        """Parse a pattern string.

        Raises:
            ValueError: If the pattern is empty, absolute, escapes the project
                root, or uses a wildcard outside its final segment
        """
        path = PurePosixPath(pattern)
        if not pattern or path.is_absolute() or '..' in path.parts:
            raise ValueError(f'Include patterns must be relative paths inside the project: {pattern!r}')

        if pattern == RECURSIVE_ASSETS_PATTERN:
            return cls(raw=pattern, kind=PatternKind.RECURSIVE, directory=PurePosixPath('assets'))

        if '*' not in pattern:
            return cls(raw=pattern, kind=PatternKind.LITERAL, directory=path)

        if any('*' in part for part in path.parts[:-1]):
            raise ValueError(f'Wildcards are only supported in the last path segment: {pattern!r}')

        return cls(
            raw=pattern,
            kind=PatternKind.WILDCARD,
            directory=path.parent,
            glob=path.name,
            _regex=re.compile(glob_to_regex(path.name)),
        )

    def matches(self, name: str) -> bool:
        """Check a direct child's file name against a wildcard pattern."""
        if self._regex is None:
            return False
        return self._regex.match(name) is not None

    def resolve(self, project_root: Path) -> List[Tuple[Path, PurePosixPath]]:
        """Find the files this pattern selects under ``project_root``.

        Returns:
            ``(source_path, relative_destination)`` pairs in a stable order;
            empty when nothing exists at the pattern's location
        """
        if self.kind == PatternKind.WILDCARD:
            source_dir = project_root / self.directory
            if not source_dir.is_dir():
                return []
            return [
                (child, self.directory / child.name)
                for child in sorted(source_dir.iterdir(), key=lambda p: p.name)
                if self.matches(child.name) and child.is_file()
            ]

        source = project_root / self.directory
        if source.is_file():
            return [(source, self.directory)]
        if source.is_dir():
            return _walk_files(source, self.directory)
        return []


def _walk_files(source_dir: Path, relative_dir: PurePosixPath) -> List[Tuple[Path, PurePosixPath]]:
    files = []
    for path in sorted(source_dir.rglob('*')):
        if path.is_file():
            rel = PurePosixPath(*path.relative_to(source_dir).parts)
            files.append((path, relative_dir / rel))
    return files


def parse_patterns(patterns: Sequence[str] = DEFAULT_INCLUDE_PATTERNS) -> List[IncludePattern]:
    return [IncludePattern.parse(pattern) for pattern in patterns]
