"""
Step Handle Contract
This module defines the minimal view of a step that the error types consume:
a stable display name and a current lifecycle status. Steps themselves are
owned by the scheduler; nothing here creates or drives them.
"""

from __future__ import annotations

import enum
from typing import Any, Protocol, runtime_checkable


class StepStatus(str, enum.Enum):
    """Lifecycle status of a step, as reported by the scheduler."""

    PENDING = "Pending"
    RUNNING = "Running"
    FAILED = "Failed"
    SUCCEEDED = "Succeeded"
    CANCELED = "Canceled"
    SKIPPED = "Skipped"

    def __str__(self) -> str:
        return self.value

    def is_terminal(self) -> bool:
        return self not in (StepStatus.PENDING, StepStatus.RUNNING)


@runtime_checkable
class StepReader(Protocol):
    """
    The read-only protocol every step handle must satisfy.

    Handles are used as mapping keys, so implementations must be hashable.
    `status` is read each time a message is rendered, so it reflects the
    step's state at that instant.
    """

    @property
    def name(self) -> str: ...

    @property
    def status(self) -> Any: ...


def describe(step: StepReader) -> str:
    """Renders a step as `<name> [<status>]`."""
    return "%s [%s]" % (step.name, step.status)
