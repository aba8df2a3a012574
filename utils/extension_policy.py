"""Deny-then-allow extension policy for uploaded files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from utils.errors import DeniedExtension, MissingExtension, NotAllowlisted, PolicyError

ALLOWED = 'allowed'
DENIED = 'denied'


@dataclass(frozen=True)
class ExtensionDecision:
    """Verdict for one extension; ``reason`` names the error kind when denied."""
    verdict: str
    extension: str
    reason: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.verdict == ALLOWED


def extension_of(filename: str) -> str:
    """Return the lower-cased text after the last ``.`` of the basename."""
    basename = filename.replace('\\', '/').rsplit('/', 1)[-1]
    if '.' not in basename:
        return ''
    return basename.rsplit('.', 1)[1].lower()


class ExtensionPolicy:
    """
    Decide whether a filename may be stored.

    The deny list is consulted first; anything not on the allow list is then
    rejected as well, so omission from the deny list never grants access.
    """

    def __init__(self, deny: Iterable[str], allow: Iterable[str]):
        self.deny = frozenset(ext.lower().lstrip('.') for ext in deny)
        self.allow = frozenset(ext.lower().lstrip('.') for ext in allow)

    def evaluate(self, filename: str) -> ExtensionDecision:
        extension = extension_of(filename)
        if not extension:
            return ExtensionDecision(DENIED, extension, MissingExtension.__name__)
        if extension in self.deny:
            return ExtensionDecision(DENIED, extension, DeniedExtension.__name__)
        if extension not in self.allow:
            return ExtensionDecision(DENIED, extension, NotAllowlisted.__name__)
        return ExtensionDecision(ALLOWED, extension)

    def check(self, filename: str) -> ExtensionDecision:
        """Like ``evaluate`` but raises the matching ``PolicyError`` when denied."""
        decision = self.evaluate(filename)
        if decision.allowed:
            return decision
        raise _build_error(decision, filename)


def _build_error(decision: ExtensionDecision, filename: str) -> PolicyError:
    if decision.reason == MissingExtension.__name__:
        return MissingExtension(filename)
    if decision.reason == DeniedExtension.__name__:
        return DeniedExtension(decision.extension)
    return NotAllowlisted(decision.extension)


def check_extension(filename: str, deny: Iterable[str], allow: Iterable[str]) -> ExtensionDecision:
    """Check *filename* against the given deny and allow lists."""
    return ExtensionPolicy(deny, allow).check(filename)
