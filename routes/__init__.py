# Routes package - registers all blueprints with the Quart app

from quart import jsonify

from utils.errors import EditorFsError
from utils.logging import app_logger as logger


def error_response(exc: EditorFsError):
    """Serialize a policy/filesystem error for the editor client."""
    if exc.status_code >= 500:
        logger.error(str(exc))
    return jsonify(exc.to_dict()), exc.status_code


def register_blueprints(app):
    """Register all route blueprints with the app."""
    from .pages import pages_bp
    from .save import save_bp
    from .scan import scan_bp
    from .upload import upload_bp

    app.register_blueprint(save_bp)
    app.register_blueprint(scan_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(pages_bp)

    app.register_error_handler(EditorFsError, error_response)
