"""
Run Lifecycle
Start-of-run validation and the latch that keeps one workflow instance from
being run concurrently or re-run before it is reset.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional
import contextlib
import logging
import threading

from .exceptions import (
    ERR_WORKFLOW_HAS_RUN,
    ERR_WORKFLOW_IS_RUNNING,
    InvalidInitialStatus,
    LifecycleViolation,
    WorkflowError,
)
from .step import StepReader, StepStatus

logger = logging.getLogger(__name__)


def check_initial_status(steps: Iterable[StepReader]) -> None:
    """
    Ensures every step is Pending before a run starts.

    Raises:
        InvalidInitialStatus: Listing, in order, each step in any other status.
    """
    unexpected = [step for step in steps if step.status != StepStatus.PENDING]
    if unexpected:
        raise InvalidInitialStatus(unexpected)


class RunLatch:
    """
    Tracks the run lifecycle of a single workflow instance.

    `start()` hands the scheduler a fresh `WorkflowError` to record into;
    `finish()` freezes it and keeps it as the instance's result until
    `reset()` is called. Starting again while a run is active, or while a
    result is held, raises a `LifecycleViolation` carrying the matching sentinel.
    """

    def __init__(self, name: str = "workflow"):
        self.name = name
        self._lock = threading.Lock()
        self._current: Optional[WorkflowError] = None
        self._result: Optional[WorkflowError] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._current is not None

    @property
    def result(self) -> Optional[WorkflowError]:
        with self._lock:
            return self._result

    def err(self) -> Optional[WorkflowError]:
        """Returns the held result if any step failed, otherwise None."""
        result = self.result
        if result is None or result.is_nil():
            return None
        return result

    def start(self) -> WorkflowError:
        with self._lock:
            if self._current is not None:
                raise LifecycleViolation(ERR_WORKFLOW_IS_RUNNING)
            if self._result is not None:
                raise LifecycleViolation(ERR_WORKFLOW_HAS_RUN)
            current = self._current = WorkflowError()
        logger.debug("Run of '%s' started", self.name)
        return current

    def finish(self) -> WorkflowError:
        with self._lock:
            if self._current is None:
                raise RuntimeError(f"'{self.name}' has no run in progress")
            result, self._current = self._current, None
            result.freeze()
            self._result = result
        logger.debug(
            "Run of '%s' finished with %d failed step(s)",
            self.name,
            len(result.failures()),
        )
        return result

    @contextlib.contextmanager
    def run(self) -> Iterator[WorkflowError]:
        """Context manager form of `start()`/`finish()`."""
        result = self.start()
        try:
            yield result
        finally:
            self.finish()

    def reset(self) -> None:
        with self._lock:
            if self._current is not None:
                raise LifecycleViolation(ERR_WORKFLOW_IS_RUNNING)
            self._result = None
        logger.debug("Run of '%s' reset", self.name)
