"""
Page editor backend.

Quart application persisting editor pages, media uploads and media tree
listings below a single configured root directory.
"""

from __future__ import annotations

import os
import time

from quart import Quart, jsonify

from config import DEBUG, HOST, PORT, VERSION, EditorSettings, load_settings
from routes import register_blueprints
from routes.upload import UploadRequest
from utils.extension_policy import ExtensionPolicy
from utils.logging import app_logger as logger
from utils.safe_path import Root

_start_time = time.time()


def create_app(settings: EditorSettings | None = None) -> Quart:
    """Build the application around one immutable settings value."""
    settings = settings or load_settings()

    application = Quart(__name__)
    application.request_class = UploadRequest
    application.config['EDITOR_SETTINGS'] = settings
    application.config['EDITOR_ROOT'] = Root.at(settings.root)
    application.config['UPLOAD_POLICY'] = ExtensionPolicy(
        settings.upload_deny_extensions, settings.upload_allow_extensions
    )
    # Request bodies are bounded by the largest accepted payload plus form overhead
    body_limit = max(settings.upload_max_size, settings.max_file_limit) + 1024 * 1024
    application.config['MAX_CONTENT_LENGTH'] = body_limit
    application.config['MAX_FORM_MEMORY_SIZE'] = settings.max_file_limit * 3 + 1024 * 1024

    @application.route('/health')
    async def health():
        return jsonify({
            'status': 'healthy',
            'version': VERSION,
            'uptime_seconds': round(time.time() - _start_time, 1),
            'root': os.path.isdir(application.config['EDITOR_ROOT'].path),
        })

    register_blueprints(application)
    return application


app = create_app()


def main() -> None:
    root = app.config['EDITOR_ROOT']
    os.makedirs(root.path, exist_ok=True)
    logger.info(f"Serving editor root {root} on http://{HOST}:{PORT}")
    app.run(host=HOST, port=PORT, debug=DEBUG)


if __name__ == '__main__':
    main()
