# Data modules for the page editor backend
from .patterns import (
    DISALLOWED_NAMES,
    DEFAULT_UPLOAD_DENY_EXTENSIONS,
    DEFAULT_UPLOAD_ALLOW_EXTENSIONS,
    SERVER_SIDE_SCRIPT_PATTERN,
    PAGE_GLOBS,
    PAGE_EXCLUDES,
)
