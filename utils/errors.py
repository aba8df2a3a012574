"""Error taxonomy for the filesystem policy layer.

Every failure of the core is raised as an ``EditorFsError`` subclass. The
request layer turns them into responses via ``to_dict()`` and
``status_code``; none of them is fatal to the process.
"""

from __future__ import annotations

from pathlib import Path


class EditorFsError(Exception):
    """Base class for all recoverable filesystem policy errors."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {'status': 'error', 'error': self.kind, 'message': self.message}


# Path errors

class PathError(EditorFsError, ValueError):
    """Raised when a client-supplied path cannot be sanitized."""


class EmptyPath(PathError):
    def __init__(self, message: str = 'Filename is empty!'):
        super().__init__(message)


class DisallowedName(PathError):
    status_code = 403

    def __init__(self, name: str):
        super().__init__('Filename not allowed!')
        self.name = name


class PathEscapesRoot(PathError):
    status_code = 403

    def __init__(self, raw: str):
        super().__init__(f'Path traversal blocked: {raw!r} resolves outside the editor root')
        self.raw = raw


# Extension policy errors

class PolicyError(EditorFsError, ValueError):
    """Raised when a filename's extension is rejected."""

    def __init__(self, message: str, extension: str = ''):
        super().__init__(message)
        self.extension = extension


class MissingExtension(PolicyError):
    def __init__(self, filename: str):
        super().__init__(f'File {filename!r} has no extension!')


class DeniedExtension(PolicyError):
    def __init__(self, extension: str):
        super().__init__(f'File type {extension} not allowed!', extension)


class NotAllowlisted(PolicyError):
    def __init__(self, extension: str):
        super().__init__(f'File type {extension} not allowed!', extension)


class UploadRejected(EditorFsError):
    """A path or policy error raised while a multipart body is being parsed.

    The form parser treats ``ValueError`` as a malformed body and discards it,
    so the original error is carried in ``cause`` instead.
    """

    def __init__(self, cause: EditorFsError):
        super().__init__(cause.message)
        self.cause = cause
        self.status_code = cause.status_code

    @property
    def kind(self) -> str:
        return self.cause.kind


# Content errors

class ContentTooLarge(EditorFsError):
    status_code = 413

    def __init__(self, size: int, limit: int):
        super().__init__(f'Content of {size} bytes exceeds the limit of {limit} bytes')
        self.size = size
        self.limit = limit


class ContentPolicyViolation(EditorFsError):
    def __init__(self, message: str = 'PHP not allowed!'):
        super().__init__(message)


class TreeTooLarge(EditorFsError):
    status_code = 413

    def __init__(self, message: str):
        super().__init__(message)


# Filesystem errors

class FileOperationError(EditorFsError):
    """Raised when an operation on an already sanitized path fails."""
    status_code = 500

    def __init__(self, message: str, path: Path | str):
        super().__init__(message)
        self.path = Path(path)


class IoFailure(FileOperationError):
    """Wraps an ``OSError`` with the path that was being operated on.

    ``message`` is safe to show to clients; ``str(exc)`` also names the
    absolute path and the platform cause for logs.
    """

    def __init__(self, action: str, path: Path | str, cause: OSError, relative: str | None = None):
        shown = relative if relative is not None else Path(path).name
        super().__init__(
            f"Error {action} '{shown}'. Possible causes are missing write "
            f"permission or incorrect file path!",
            path,
        )
        self.action = action
        self.cause = cause

    def __str__(self) -> str:
        return f'{self.action} failed for {self.path}: {self.cause}'


class NotFound(FileOperationError):
    status_code = 404

    def __init__(self, path: Path | str, relative: str | None = None):
        shown = relative if relative is not None else Path(path).name
        super().__init__(f"File '{shown}' does not exist", path)
