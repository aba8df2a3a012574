"""Recursive media tree enumeration for the editor's file manager.

The walk uses an explicit stack instead of recursion and is bounded by a
maximum depth and a maximum number of entries. Hidden names are skipped at
every level and siblings are sorted by name.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from utils.errors import IoFailure, TreeTooLarge
from utils.logging import scan_logger as logger
from utils.safe_path import SanitizedPath

FILE = 'file'
FOLDER = 'folder'


@dataclass(frozen=True)
class FileSystemEntry:
    """One node of a scanned tree. Files carry ``size``, folders ``children``."""
    name: str
    kind: str
    relative_path: str
    size: Optional[int] = None
    children: tuple['FileSystemEntry', ...] = ()

    @classmethod
    def file(cls, name: str, relative_path: str, size: int) -> 'FileSystemEntry':
        return cls(name=name, kind=FILE, relative_path=relative_path, size=size)

    @classmethod
    def folder(cls, name: str, relative_path: str, children=()) -> 'FileSystemEntry':
        return cls(name=name, kind=FOLDER, relative_path=relative_path, children=tuple(children))

    def find(self, relative_path: str) -> Optional['FileSystemEntry']:
        """Return the descendant at *relative_path* (``''`` is this node)."""
        node = self
        for part in filter(None, relative_path.split('/')):
            node = next((c for c in node.children if c.name == part), None)
            if node is None:
                return None
        return node

    def to_dict(self) -> dict:
        """Serialize in the shape the editor's file manager expects."""
        data = {'name': self.name, 'type': self.kind, 'path': self.relative_path}
        if self.kind == FILE:
            data['size'] = self.size
        else:
            data['items'] = [child.to_dict() for child in self.children]
        return data


@dataclass
class _Frame:
    path: Path
    real: Path
    name: str
    relative: str
    depth: int
    pending: Iterator[os.DirEntry]
    children: list = field(default_factory=list)


def _list_directory(path: Path) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            entries = [entry for entry in it if entry.name and not entry.name.startswith('.')]
    except OSError as exc:
        raise IoFailure('scanning folder', path, exc) from exc
    return iter(sorted(entries, key=lambda entry: entry.name))


def scan_tree(directory: SanitizedPath, max_depth: int = 32, max_entries: int = 10000) -> FileSystemEntry:
    """Enumerate *directory* into a ``FileSystemEntry`` tree.

    A missing directory yields an empty folder. Relative paths are relative to
    *directory* and always use ``/``. Raises ``TreeTooLarge`` when the depth or
    entry bound is exceeded and ``IoFailure`` when listing fails.
    """
    root_path = directory.path
    if not root_path.exists():
        logger.debug(f"Scan of missing folder '{directory.relative}' returns empty tree")
        return FileSystemEntry.folder('', '')
    if not root_path.is_dir():
        raise IoFailure('scanning folder', root_path, NotADirectoryError(str(root_path)), directory.relative)

    boundary = directory.root
    stack = [_Frame(root_path, root_path, '', '', 0, _list_directory(root_path))]
    count = 0

    while True:
        frame = stack[-1]
        entry = next(frame.pending, None)

        if entry is None:
            stack.pop()
            node = FileSystemEntry.folder(frame.name, frame.relative, frame.children)
            if not stack:
                logger.debug(f"Scanned '{directory.relative}': {count} entries")
                return node
            stack[-1].children.append(node)
            continue

        relative = f'{frame.relative}/{entry.name}' if frame.relative else entry.name
        entry_path = Path(entry.path)
        try:
            real = entry_path.resolve() if entry.is_symlink() else frame.real / entry.name
            is_dir = entry.is_dir()
            size = None if is_dir else entry.stat().st_size
        except FileNotFoundError:
            # Removed between listing and stat, or a dangling symlink
            continue
        except OSError as exc:
            raise IoFailure('scanning folder', entry_path, exc) from exc

        if not boundary.contains(real):
            logger.warning(f"Skipping '{relative}': link target outside the editor root")
            continue

        count += 1
        if count > max_entries:
            raise TreeTooLarge(f'Folder holds more than {max_entries} entries')

        if not is_dir:
            frame.children.append(FileSystemEntry.file(entry.name, relative, size))
            continue

        if any(real == ancestor.real for ancestor in stack):
            logger.warning(f"Skipping '{relative}': link loops back to a parent folder")
            continue
        if frame.depth + 1 > max_depth:
            raise TreeTooLarge(f'Folder nesting exceeds {max_depth} levels')
        stack.append(_Frame(entry_path, real, entry.name, relative, frame.depth + 1,
                            _list_directory(entry_path)))
