"""Lifecycle of a save or upload request.

    Received -> Validated -> Written
        |           |
        +-----------+-----> Rejected
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from utils.errors import EditorFsError
from utils.logging import app_logger as logger


class FlowState(Enum):
    RECEIVED = 'received'
    VALIDATED = 'validated'
    WRITTEN = 'written'
    REJECTED = 'rejected'


TERMINAL_STATES = frozenset({FlowState.WRITTEN, FlowState.REJECTED})


class EditorFlow:
    """Tracks one request through validation to its terminal state."""

    def __init__(self, operation: str):
        self.operation = operation
        self.state = FlowState.RECEIVED
        self.relative_path: Optional[str] = None
        self.error: Optional[EditorFsError] = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def _move(self, expected: FlowState, new_state: FlowState) -> None:
        if self.state is not expected:
            raise RuntimeError(
                f"{self.operation}: cannot move from {self.state.value} to {new_state.value}"
            )
        self.state = new_state

    def validated(self) -> None:
        self._move(FlowState.RECEIVED, FlowState.VALIDATED)

    def written(self, relative_path: str) -> None:
        self._move(FlowState.VALIDATED, FlowState.WRITTEN)
        self.relative_path = relative_path

    def rejected(self, error: EditorFsError) -> None:
        if self.finished:
            raise RuntimeError(f"{self.operation}: already {self.state.value}")
        self.state = FlowState.REJECTED
        self.error = error
        logger.warning(f"{self.operation} rejected ({error.kind}): {error.message}")
