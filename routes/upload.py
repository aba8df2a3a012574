"""Media upload route.

File parts are screened while the multipart body is parsed: ``UploadRequest``
wraps the parser's stream factory, which is called with the part's filename
before any of its bytes are buffered. A denied filename aborts parsing there,
so a rejected upload is never spooled to memory or disk. Accepted bodies are
then streamed to a temporary file next to their destination and moved into
place.
"""

from __future__ import annotations

from typing import IO, BinaryIO, Callable, Iterator, Optional

from quart import Blueprint, Request, current_app, jsonify, request
from quart.utils import run_sync

from routes import error_response
from utils.errors import EditorFsError, PathError, PolicyError, UploadRejected
from utils.extension_policy import ExtensionPolicy
from utils.flow import EditorFlow
from utils.logging import upload_logger as logger
from utils.safe_writer import stream_to_file
from utils.upload import resolve_upload, screen_filename

upload_bp = Blueprint('upload', __name__)

CHUNK_SIZE = 64 * 1024

StreamFactory = Callable[[Optional[int], Optional[str], Optional[str], Optional[int]], IO[bytes]]


def screening_stream_factory(stream_factory: StreamFactory, policy: ExtensionPolicy) -> StreamFactory:
    """Wrap *stream_factory* so only policy-approved file parts get a container."""

    def factory(total_content_length, content_type, filename, content_length=None):
        try:
            screen_filename(filename or '', policy)
        except (PathError, PolicyError) as exc:
            logger.warning(f"Upload '{filename}' rejected before receipt: {exc.message}")
            raise UploadRejected(exc) from exc
        return stream_factory(total_content_length, content_type, filename, content_length)

    return factory


class UploadRequest(Request):
    """Request class whose form parser screens file parts by name."""

    def make_form_data_parser(self):
        parser = super().make_form_data_parser()
        parser.stream_factory = screening_stream_factory(
            parser.stream_factory, current_app.config['UPLOAD_POLICY']
        )
        return parser


def _iter_chunks(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


@upload_bp.route('/upload', methods=['POST'])
async def upload_media():
    """
    Store an uploaded image.

    Form fields:
        - file: the uploaded file (multipart)
        - mediaPath: destination folder relative to the editor root
        - onlyFilename: when set, respond with the bare filename

    Returns:
        The stored file's root-relative path (or filename) as plain text.
    """
    form = await request.form
    files = await request.files
    settings = current_app.config['EDITOR_SETTINGS']
    root = current_app.config['EDITOR_ROOT']
    policy = current_app.config['UPLOAD_POLICY']

    upload = files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'status': 'error', 'message': 'Invalid filename!'}), 400

    flow = EditorFlow('upload')
    try:
        resolved = resolve_upload(form.get('mediaPath'), upload.filename, root, policy)
        flow.validated()
        size = await run_sync(stream_to_file)(
            resolved.target, _iter_chunks(upload.stream), settings.upload_max_size
        )
    except EditorFsError as exc:
        flow.rejected(exc)
        return error_response(exc)
    flow.written(resolved.relative)
    logger.info(f"Uploaded '{resolved.relative}' ({size} bytes)")

    if form.get('onlyFilename'):
        return resolved.filename
    return resolved.relative
