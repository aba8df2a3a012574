"""Configuration for the page editor backend.

Values are read once from ``EDITOR_*`` environment variables at import time.
Invalid values fall back to the defaults below.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from data.patterns import (
    DEFAULT_UPLOAD_ALLOW_EXTENSIONS,
    DEFAULT_UPLOAD_DENY_EXTENSIONS,
)

VERSION = '1.0.0'


def _get_env(key: str, default: str) -> str:
    return os.environ.get(f'EDITOR_{key}', default)


def _get_env_int(key: str, default: int) -> int:
    try:
        return int(_get_env(key, str(default)))
    except ValueError:
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    value = os.environ.get(f'EDITOR_{key}')
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _get_env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.environ.get(f'EDITOR_{key}')
    if value is None:
        return default
    return tuple(item.strip().lower() for item in value.split(',') if item.strip())


# Server
HOST = _get_env('HOST', '0.0.0.0')
PORT = _get_env_int('PORT', 8080)
DEBUG = _get_env_bool('DEBUG', False)

# Logging
LOG_LEVEL = logging.DEBUG if DEBUG else getattr(
    logging, _get_env('LOG_LEVEL', 'INFO').upper(), logging.INFO
)
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Storage
EDITOR_ROOT = _get_env('ROOT', os.path.join(os.getcwd(), 'site'))
MEDIA_PATH = _get_env('MEDIA_PATH', 'media')
MEDIA_PATH_MAX_LENGTH = 256

# Saving pages
MAX_FILE_LIMIT = _get_env_int('MAX_FILE_LIMIT', 2 * 1024 * 1024)
OVERSIZE_POLICY = _get_env('OVERSIZE_POLICY', 'reject')
if OVERSIZE_POLICY not in ('reject', 'truncate'):
    OVERSIZE_POLICY = 'reject'
ALLOW_PHP = _get_env_bool('ALLOW_PHP', False)
PAGE_EXTENSION = 'html'

# Uploads
UPLOAD_DENY_EXTENSIONS = _get_env_list('UPLOAD_DENY_EXTENSIONS', DEFAULT_UPLOAD_DENY_EXTENSIONS)
UPLOAD_ALLOW_EXTENSIONS = _get_env_list('UPLOAD_ALLOW_EXTENSIONS', DEFAULT_UPLOAD_ALLOW_EXTENSIONS)
UPLOAD_MAX_SIZE = _get_env_int('UPLOAD_MAX_SIZE', 20 * 1024 * 1024)

# Media tree scanning
SCAN_MAX_DEPTH = _get_env_int('SCAN_MAX_DEPTH', 32)
SCAN_MAX_ENTRIES = _get_env_int('SCAN_MAX_ENTRIES', 10000)


@dataclass(frozen=True)
class EditorSettings:
    """Immutable settings handed to every filesystem component."""
    root: str = EDITOR_ROOT
    media_path: str = MEDIA_PATH
    max_file_limit: int = MAX_FILE_LIMIT
    oversize_policy: str = OVERSIZE_POLICY
    allow_php: bool = ALLOW_PHP
    page_extension: str = PAGE_EXTENSION
    upload_deny_extensions: frozenset[str] = field(
        default_factory=lambda: frozenset(UPLOAD_DENY_EXTENSIONS)
    )
    upload_allow_extensions: frozenset[str] = field(
        default_factory=lambda: frozenset(UPLOAD_ALLOW_EXTENSIONS)
    )
    upload_max_size: int = UPLOAD_MAX_SIZE
    scan_max_depth: int = SCAN_MAX_DEPTH
    scan_max_entries: int = SCAN_MAX_ENTRIES


def load_settings(**overrides) -> EditorSettings:
    """Build the settings value from module defaults plus explicit overrides."""
    for key in ('upload_deny_extensions', 'upload_allow_extensions'):
        if key in overrides:
            overrides[key] = frozenset(ext.lower() for ext in overrides[key])
    return EditorSettings(**overrides)
