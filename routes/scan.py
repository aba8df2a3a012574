"""Media tree scan route for the editor's file manager."""

from __future__ import annotations

from quart import Blueprint, current_app, jsonify, request
from quart.utils import run_sync

from config import MEDIA_PATH_MAX_LENGTH
from utils.logging import scan_logger as logger
from utils.errors import EmptyPath
from utils.safe_path import sanitize_path
from utils.tree_scanner import scan_tree

scan_bp = Blueprint('scan', __name__)


@scan_bp.route('/scan', methods=['POST'])
async def scan_media():
    """
    Return the media folder as a nested tree.

    Form fields:
        - mediaPath: folder to scan, relative to the editor root
          (default: the configured media folder)
    """
    form = await request.form
    settings = current_app.config['EDITOR_SETTINGS']
    root = current_app.config['EDITOR_ROOT']

    media_path = (form.get('mediaPath') or '')[:MEDIA_PATH_MAX_LENGTH].strip()
    try:
        directory = sanitize_path(media_path or settings.media_path, root)
    except EmptyPath:
        # Nothing usable survived the filter ('@@@'); scan the media folder
        directory = sanitize_path(settings.media_path, root)

    tree = await run_sync(scan_tree)(
        directory,
        max_depth=settings.scan_max_depth,
        max_entries=settings.scan_max_entries,
    )
    logger.debug(f"Scan of '{directory.relative}' returned {len(tree.children)} top-level entries")
    return jsonify(tree.to_dict())
