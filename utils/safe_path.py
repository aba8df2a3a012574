"""Path traversal prevention utilities.

Every file operation that accepts user-controlled input (filenames, paths)
MUST go through ``sanitize_path`` or ``sanitize_filename`` before touching
the filesystem.

Sanitizing happens in two stages. A string pre-filter strips query suffixes,
any character outside ``[A-Za-z0-9._/-]`` and then multi-dot runs. The pre-filter
alone is not trusted: the joined path is then canonicalized (symlinks
resolved) and must still lie inside the canonical root, otherwise
``PathEscapesRoot`` is raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from data.patterns import DISALLOWED_NAMES
from utils.errors import DisallowedName, EmptyPath, PathEscapesRoot

_QUERY_RE = re.compile(r'\?.*$', re.DOTALL)
_SEPARATORS_RE = re.compile(r'[/\\]+')
_MULTI_DOT_RE = re.compile(r'\.{2,}')
_INVALID_CHARS_RE = re.compile(r'[^/a-zA-Z0-9\-._]')
_DRIVE_RE = re.compile(r'^[a-zA-Z]:')


@dataclass(frozen=True)
class Root:
    """Canonical directory that bounds every sanitized path."""
    path: Path

    @classmethod
    def at(cls, directory: str | Path) -> 'Root':
        return cls(Path(directory).expanduser().resolve())

    def contains(self, candidate: Path) -> bool:
        return candidate == self.path or self.path in candidate.parents

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class SanitizedPath:
    """A path proven to lie inside ``root``.

    ``path`` is canonical and absolute; ``relative`` is the forward-slash form
    echoed back to clients (``''`` for the root itself).
    """
    root: Root
    path: Path
    relative: str

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_root(self) -> bool:
        return self.path == self.root.path

    def child(self, name: str) -> 'SanitizedPath':
        """Sanitize ``name`` as a path below this one."""
        relative = f'{self.relative}/{name}' if self.relative else name
        return sanitize_path(relative, self.root)


def _normalize(raw: str) -> str:
    """Strip the query suffix and collapse separators to single ``/``."""
    without_query = _QUERY_RE.sub('', raw)
    return _SEPARATORS_RE.sub('/', without_query)


def _check_dot_segments(path: str, raw: str) -> None:
    for segment in path.split('/'):
        if len(segment) >= 2 and set(segment) == {'.'}:
            raise PathEscapesRoot(raw)


def _check_traversal(normalized: str, raw: str) -> None:
    if normalized.startswith('/') or _DRIVE_RE.match(normalized):
        raise PathEscapesRoot(raw)
    _check_dot_segments(normalized, raw)


def _check_basename(normalized: str) -> None:
    basename = normalized.rstrip('/').rsplit('/', 1)[-1]
    if basename.lower() in DISALLOWED_NAMES:
        raise DisallowedName(basename)


def _strip_invalid(text: str) -> str:
    return _INVALID_CHARS_RE.sub('', text)


def _prefilter(filtered: str) -> str:
    # Dot runs are removed after invalid characters so none can be rejoined
    cleaned = _MULTI_DOT_RE.sub('', filtered)
    return '/'.join(seg for seg in cleaned.split('/') if seg not in ('', '.'))


def force_suffix(relative: str, extension: str) -> str:
    """Replace the extension of the basename of *relative* with *extension*."""
    extension = extension.lstrip('.')
    head, sep, basename = relative.rpartition('/')
    stem = basename.rsplit('.', 1)[0] if '.' in basename else basename
    return f'{head}{sep}{stem}.{extension}'


def ensure_within_root(candidate: Path, root: Root, raw: str) -> Path:
    """Canonicalize *candidate* and verify it stays inside *root*."""
    resolved = candidate.resolve()
    if not root.contains(resolved):
        raise PathEscapesRoot(raw)
    return resolved


def sanitize_path(raw: str, root: Root, force_extension: str | None = None) -> SanitizedPath:
    """Turn an untrusted path string into a ``SanitizedPath`` under *root*.

    Raises ``EmptyPath``, ``DisallowedName`` or ``PathEscapesRoot``.
    """
    if not isinstance(raw, str) or not raw:
        raise EmptyPath()

    normalized = _normalize(raw)
    if not normalized:
        raise EmptyPath()

    _check_traversal(normalized, raw)
    _check_basename(normalized)

    filtered = _strip_invalid(normalized)
    # Dropped characters can join dots into a new parent segment ('. .')
    _check_dot_segments(filtered, raw)
    relative = _prefilter(filtered)
    if not relative and set(normalized) - {'.', '/'}:
        # Something was supplied but nothing usable survived the filter
        raise EmptyPath()
    if relative:
        _check_basename(relative)

    if force_extension:
        if not relative:
            raise EmptyPath()
        relative = force_suffix(relative, force_extension)

    resolved = ensure_within_root(root.path / relative, root, raw)
    return SanitizedPath(root=root, path=resolved, relative=relative)


def sanitize_filename(filename: str) -> str:
    """Reduce *filename* to a safe basename.

    Directory components are discarded, then the same denylist and character
    filter as ``sanitize_path`` apply. Raises ``EmptyPath`` when nothing
    usable remains and ``DisallowedName`` for denied names.
    """
    if not isinstance(filename, str) or not filename:
        raise EmptyPath('Invalid filename!')
    basename = _normalize(filename).rstrip('/').rsplit('/', 1)[-1]
    if basename.lower() in DISALLOWED_NAMES:
        raise DisallowedName(basename)
    # Leading dots would turn an upload into a hidden file
    cleaned = _MULTI_DOT_RE.sub('', _strip_invalid(basename)).lstrip('.')
    if not cleaned:
        raise EmptyPath('Invalid filename!')
    if cleaned.lower() in DISALLOWED_NAMES:
        raise DisallowedName(cleaned)
    return cleaned
