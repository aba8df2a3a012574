# Static patterns used by the filesystem policy layer

import re

# Basenames that may never be written, whatever directory they sit in
DISALLOWED_NAMES = frozenset({'.htaccess', 'passwd'})

# Upload extension lists (deny is evaluated first, then the allow list)
DEFAULT_UPLOAD_DENY_EXTENSIONS = ('php',)
DEFAULT_UPLOAD_ALLOW_EXTENSIONS = ('ico', 'jpg', 'jpeg', 'png', 'gif', 'webp', 'svg')

# Server-side script markers rejected in saved HTML unless explicitly allowed
SERVER_SIDE_SCRIPT_PATTERN = re.compile(
    rb'<\?php|<\? |<\?=|<\s*script\s*language\s*=\s*"\s*php\s*"\s*>',
    re.IGNORECASE,
)

# Pages offered to the editor's page list, relative to the editor root
PAGE_GLOBS = ('my-pages/*.html', 'demo/**/*.html', 'demo/*.html')
PAGE_EXCLUDES = frozenset({'new-page-blank-template.html', 'editor.html'})
