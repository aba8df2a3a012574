"""Page saving and file action routes.

Accepts the same form fields the editor client has always posted:
``/save.php`` with ``file`` and ``html`` (or ``startTemplateUrl``), and
``/action/<action>`` for rename, delete and reusable block/section saves.
Every target gets a forced ``.html`` extension.
"""

from __future__ import annotations

from quart import Blueprint, current_app, jsonify, request
from quart.utils import run_sync

from routes import error_response
from utils.errors import EditorFsError
from utils.flow import EditorFlow
from utils.logging import save_logger as logger
from utils.safe_path import sanitize_path
from utils.safe_writer import (
    WriteRequest,
    delete_file,
    read_file,
    reject_server_side_script,
    rename_file,
    write_file,
)

save_bp = Blueprint('save', __name__)


def _write_request(target, content: bytes) -> WriteRequest:
    settings = current_app.config['EDITOR_SETTINGS']
    return WriteRequest(
        target=target,
        content=content,
        max_size=settings.max_file_limit,
        oversize=settings.oversize_policy,
        content_policy=None if settings.allow_php else reject_server_side_script,
    )


async def _save(operation: str, raw_file: str, content: bytes):
    """Run one save through Received -> Validated -> Written/Rejected."""
    settings = current_app.config['EDITOR_SETTINGS']
    root = current_app.config['EDITOR_ROOT']
    flow = EditorFlow(operation)
    try:
        target = sanitize_path(raw_file, root, force_extension=settings.page_extension)
        flow.validated()
        saved = await run_sync(write_file)(_write_request(target, content))
    except EditorFsError as exc:
        flow.rejected(exc)
        return error_response(exc)
    flow.written(saved.relative)
    return f"File saved '{saved.relative}'"


@save_bp.route('/save.php', methods=['POST'])
@save_bp.route('/save', methods=['POST'])
async def save_page():
    """Save page HTML, or copy a template page to a new file."""
    form = await request.form
    settings = current_app.config['EDITOR_SETTINGS']
    root = current_app.config['EDITOR_ROOT']

    template_url = (form.get('startTemplateUrl') or '').strip()
    if template_url:
        try:
            template = sanitize_path(template_url, root, force_extension=settings.page_extension)
            content = await run_sync(read_file)(template)
        except EditorFsError as exc:
            logger.warning(f"Template '{template_url}' rejected: {exc.message}")
            return error_response(exc)
    else:
        content = (form.get('html') or '').encode('utf-8')

    if not content:
        return jsonify({'status': 'error', 'message': 'Html content is empty!'}), 400

    return await _save('save', form.get('file') or '', content)


@save_bp.route('/action/<action>', methods=['POST'])
async def file_action(action: str):
    """Rename, delete or store a reusable block/section."""
    form = await request.form
    settings = current_app.config['EDITOR_SETTINGS']
    root = current_app.config['EDITOR_ROOT']
    extension = settings.page_extension

    if action == 'rename':
        source = sanitize_path(form.get('file') or '', root, force_extension=extension)
        destination = sanitize_path(form.get('newfile') or '', root, force_extension=extension)
        await run_sync(rename_file)(source, destination)
        return f"File '{source.relative}' renamed to '{destination.relative}'"

    if action == 'delete':
        target = sanitize_path(form.get('file') or '', root, force_extension=extension)
        await run_sync(delete_file)(target)
        return f"File '{target.relative}' deleted"

    if action == 'saveReusable':
        block_type = form.get('type') or ''
        name = form.get('name') or ''
        html = form.get('html') or ''
        if not (block_type and name and html):
            return jsonify({'status': 'error', 'message': 'Missing reusable element data!'}), 400
        return await _save('saveReusable', f'{block_type}/{name}', html.encode('utf-8'))

    return jsonify({'status': 'error', 'message': f"Invalid action '{action}'!"}), 400
