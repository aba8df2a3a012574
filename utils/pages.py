"""Enumerate the HTML pages offered in the editor's page list."""

from __future__ import annotations

from pathlib import PurePosixPath

from data.patterns import PAGE_EXCLUDES, PAGE_GLOBS
from utils.safe_path import Root


def _page_meta(relative: str) -> dict:
    path = PurePosixPath(relative)
    parts = path.parent.parts
    folder = parts[0] if parts else ''
    subfolder = parts[1] if len(parts) > 1 else ''

    name = path.stem
    # index.html inside a sub-folder is listed under the folder's name
    if name == 'index' and subfolder:
        name = subfolder

    return {
        'name': name,
        'file': relative,
        'title': name[:1].upper() + name[1:],
        'url': relative,
        'folder': folder,
    }


def list_pages(root: Root, patterns: tuple[str, ...] = PAGE_GLOBS) -> list[dict]:
    """Return page metadata for every file under *root* matching *patterns*.

    Files reached through links that leave the root are ignored. Order follows
    *patterns*, sorted within each pattern; duplicates keep their first match.
    """
    seen: set[str] = set()
    pages = []
    for pattern in patterns:
        for match in sorted(root.path.glob(pattern)):
            if match.name in PAGE_EXCLUDES or not match.is_file():
                continue
            if not root.contains(match.resolve()):
                continue
            relative = match.relative_to(root.path).as_posix()
            if relative in seen or any(part.startswith('.') for part in relative.split('/')):
                continue
            seen.add(relative)
            pages.append(_page_meta(relative))
    return pages
