from __future__ import annotations

import logging
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)


class Compensation:
    """Undo stack for a multi-record store mutation (a manual saga).

    Push the undo for a step *before* running the step, so a step that fails
    halfway is still undone. Undo actions must therefore tolerate a step that
    was only partially applied. On failure the actions run newest first; each
    failure is logged and swallowed so the caller sees the original error.

    Used as a context manager: leaving the block with an exception rolls back
    and lets the exception propagate; leaving it normally discards the stack.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._undo: list[tuple[str, Callable[[], object]]] = []

    def __len__(self) -> int:
        return len(self._undo)

    def push(self, description: str, undo: Callable[[], object]) -> None:
        self._undo.append((description, undo))

    def commit(self) -> None:
        self._undo.clear()

    def rollback(self) -> list[str]:
        """Run pending undo actions in reverse order. Returns the ones that failed."""
        failed: list[str] = []
        while self._undo:
            description, undo = self._undo.pop()
            try:
                undo()
                logger.info("Compensated %s: %s", self.operation, description)
            except Exception:
                logger.exception("Compensation step failed for %s: %s", self.operation, description)
                failed.append(description)
        return failed

    def __enter__(self) -> Compensation:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc_type is None:
            self.commit()
            return False
        logger.warning("%s failed (%s), rolling back %d step(s)", self.operation, exc_type.__name__, len(self))
        self.rollback()
        return False
