"""
Durable file operations on sanitized paths.

Writes never expose a partially written file: content goes to a hidden
temporary file in the target directory, is fsynced, then renamed over the
final name with ``os.replace``. The temporary file is removed on every
failure path. Concurrent writers to the same target are not ordered; the
last rename wins and every visible version is complete.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from data.patterns import SERVER_SIDE_SCRIPT_PATTERN
from utils.errors import (
    ContentPolicyViolation,
    ContentTooLarge,
    IoFailure,
    NotFound,
)
from utils.logging import fs_logger as logger
from utils.safe_path import SanitizedPath, sanitize_path

OVERSIZE_REJECT = 'reject'
OVERSIZE_TRUNCATE = 'truncate'

DEFAULT_FILE_MODE = 0o644
TEMP_PREFIX = '.editor-'

ContentPolicy = Callable[[bytes], None]


def reject_server_side_script(content: bytes) -> None:
    """Content policy refusing embedded PHP markers."""
    if SERVER_SIDE_SCRIPT_PATTERN.search(content):
        raise ContentPolicyViolation()


@dataclass(frozen=True)
class WriteRequest:
    """One write of *content* to *target*, consumed by ``write_file``."""
    target: SanitizedPath
    content: bytes
    force_extension: Optional[str] = None
    max_size: Optional[int] = None
    oversize: str = OVERSIZE_REJECT
    content_policy: Optional[ContentPolicy] = None


def ensure_directory(directory: SanitizedPath | Path) -> Path:
    """Create *directory* and its missing ancestors.

    Safe under concurrent callers: an already existing directory is success.
    """
    path = directory.path if isinstance(directory, SanitizedPath) else Path(directory)
    relative = directory.relative if isinstance(directory, SanitizedPath) else None
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        # FileExistsError here means a non-directory occupies the path
        raise IoFailure('creating folder', path, exc, relative) from exc
    return path


def _apply_size_limit(content: bytes, max_size: Optional[int], oversize: str) -> bytes:
    if max_size is None or len(content) <= max_size:
        return content
    if oversize == OVERSIZE_TRUNCATE:
        cut = _utf8_boundary(content, max_size)
        logger.warning(f"Truncating content from {len(content)} to {cut} bytes")
        return content[:cut]
    raise ContentTooLarge(len(content), max_size)


def _utf8_boundary(content: bytes, limit: int) -> int:
    """Move the cut at *limit* back so it does not split a UTF-8 character."""
    cut = limit
    while cut > 0 and limit - cut < 3 and content[cut] & 0xC0 == 0x80:
        cut -= 1
    if cut == limit or content[cut] & 0xC0 == 0xC0:
        return cut
    # Not UTF-8 text; keep the byte limit
    return limit


def _target_mode(path: Path) -> int:
    try:
        return path.stat().st_mode & 0o777
    except OSError:
        return DEFAULT_FILE_MODE


def _atomic_write(target: SanitizedPath, chunks: Iterable[bytes], max_size: Optional[int] = None) -> int:
    """Stream *chunks* into a temporary file and move it onto *target*."""
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=target.path.parent, prefix=TEMP_PREFIX, suffix='.tmp'
        )
    except OSError as exc:
        raise IoFailure('saving file', target.path, exc, target.relative) from exc
    tmp_path = Path(tmp_name)
    written = 0
    try:
        with os.fdopen(fd, 'wb') as fh:
            for chunk in chunks:
                written += len(chunk)
                if max_size is not None and written > max_size:
                    raise ContentTooLarge(written, max_size)
                fh.write(chunk)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_path, _target_mode(target.path))
        os.replace(tmp_path, target.path)
    except OSError as exc:
        raise IoFailure('saving file', target.path, exc, target.relative) from exc
    finally:
        # No-op after a successful replace; otherwise drops the partial file
        tmp_path.unlink(missing_ok=True)
    return written


def write_file(request: WriteRequest) -> SanitizedPath:
    """Durably write ``request.content`` and return the final path.

    Raises ``ContentTooLarge`` (reject policy), ``ContentPolicyViolation`` or
    ``IoFailure``. Nothing is created on disk when a check fails.
    """
    target = request.target
    if request.force_extension:
        target = sanitize_path(target.relative, target.root, force_extension=request.force_extension)

    content = _apply_size_limit(request.content, request.max_size, request.oversize)
    if request.content_policy is not None:
        request.content_policy(content)

    ensure_directory(target.path.parent)
    _atomic_write(target, [content])
    logger.info(f"File saved '{target.relative}' ({len(content)} bytes)")
    return target


def stream_to_file(target: SanitizedPath, chunks: Iterable[bytes], max_size: Optional[int] = None) -> int:
    """Write an iterable of byte chunks atomically; returns the byte count.

    Exceeding *max_size* raises ``ContentTooLarge`` and leaves no file behind.
    """
    ensure_directory(target.path.parent)
    written = _atomic_write(target, chunks, max_size)
    logger.info(f"Stored '{target.relative}' ({written} bytes)")
    return written


def read_file(target: SanitizedPath) -> bytes:
    try:
        return target.path.read_bytes()
    except FileNotFoundError as exc:
        raise NotFound(target.path, target.relative) from exc
    except OSError as exc:
        raise IoFailure('reading file', target.path, exc, target.relative) from exc


def delete_file(target: SanitizedPath) -> None:
    """Delete a regular file. Directories are refused."""
    try:
        os.unlink(target.path)
    except FileNotFoundError as exc:
        raise NotFound(target.path, target.relative) from exc
    except OSError as exc:
        # IsADirectoryError / PermissionError on directories land here
        raise IoFailure('deleting file', target.path, exc, target.relative) from exc
    logger.info(f"File '{target.relative}' deleted")


def rename_file(source: SanitizedPath, destination: SanitizedPath) -> SanitizedPath:
    """Move *source* onto *destination*, creating the destination folder."""
    if not os.path.lexists(source.path):
        raise NotFound(source.path, source.relative)
    ensure_directory(destination.path.parent)
    try:
        os.replace(source.path, destination.path)
    except FileNotFoundError as exc:
        raise NotFound(source.path, source.relative) from exc
    except OSError as exc:
        raise IoFailure('renaming file', source.path, exc, source.relative) from exc
    logger.info(f"File '{source.relative}' renamed to '{destination.relative}'")
    return destination
