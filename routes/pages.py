"""Page list route used to populate the editor's page picker."""

from __future__ import annotations

from quart import Blueprint, current_app, jsonify
from quart.utils import run_sync

from utils.pages import list_pages

pages_bp = Blueprint('pages', __name__)


@pages_bp.route('/pages', methods=['GET'])
async def get_pages():
    root = current_app.config['EDITOR_ROOT']
    pages = await run_sync(list_pages)(root)
    return jsonify({'status': 'success', 'pages': pages})
