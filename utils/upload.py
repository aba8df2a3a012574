"""Upload target resolution.

Everything about an upload that can be rejected is checked here, before a
single byte of the body is written under the editor root.
"""

from __future__ import annotations

from dataclasses import dataclass

from utils.extension_policy import ExtensionDecision, ExtensionPolicy
from utils.safe_path import Root, SanitizedPath, sanitize_filename, sanitize_path


@dataclass(frozen=True)
class UploadTarget:
    """Validated destination of an upload."""
    directory: SanitizedPath
    filename: str
    target: SanitizedPath
    decision: ExtensionDecision

    @property
    def relative(self) -> str:
        """Root-relative path echoed back to the editor."""
        return self.target.relative


def screen_filename(original_filename: str, policy: ExtensionPolicy) -> tuple[str, ExtensionDecision]:
    """Sanitize a client filename and run it through *policy*.

    Needs nothing but the filename, so it can run as soon as a multipart
    part's headers arrive.
    """
    filename = sanitize_filename(original_filename)
    return filename, policy.check(filename)


def resolve_upload(media_path_raw: str | None, original_filename: str, root: Root,
                   policy: ExtensionPolicy) -> UploadTarget:
    """Resolve the destination folder and final filename of an upload.

    An empty media path means the editor root. Raises ``PathError`` or
    ``PolicyError`` subclasses.
    """
    if media_path_raw:
        directory = sanitize_path(media_path_raw, root)
    else:
        directory = SanitizedPath(root=root, path=root.path, relative='')

    filename, decision = screen_filename(original_filename, policy)
    target = directory.child(filename)
    return UploadTarget(directory=directory, filename=filename, target=target, decision=decision)
