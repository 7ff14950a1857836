"""
Custom Exceptions
This module defines the errors a workflow run can produce: failures relayed
along a data edge, the per-step aggregate that forms a run's outcome, the
structural errors that abort a run before any step executes, and the
lifecycle sentinels returned on disallowed re-entrant use.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from .step import StepReader, describe


class StepflowError(Exception):
    """Base exception for all errors raised by the stepflow library."""

    pass


class DefinitionError(StepflowError):
    """The workflow cannot start (e.g., a cycle or a step in the wrong state)."""

    pass


class ExecutionError(StepflowError):
    """An error occurred during the execution of a step."""

    pass


class ConfigurationError(StepflowError):
    """An error related to library configuration."""

    pass


class LifecycleError(StepflowError):
    """A workflow instance was used in a way its run lifecycle does not allow."""

    pass


class LifecycleViolation(LifecycleError):
    """
    Raised on lifecycle misuse, carrying the sentinel that names the condition.

    A new instance is raised each time so the shared sentinels never pick up
    a traceback or context; match on `exc.sentinel is ERR_WORKFLOW_IS_RUNNING`.
    """

    def __init__(self, sentinel: LifecycleError):
        super().__init__(*sentinel.args)
        self.sentinel = sentinel


class FlowError(StepflowError):
    """
    Raised while passing a dependee's output into a depender's input.

    Keeps the step whose output was being consumed, so the failure can still
    be traced to its origin after it is folded into a `WorkflowError`.
    """

    def __init__(self, err: BaseException, origin: StepReader):
        super().__init__(err, origin)
        self._err = err
        self._origin = origin
        if isinstance(err, BaseException):
            self.__cause__ = err

    @property
    def err(self) -> BaseException:
        return self._err

    @property
    def origin(self) -> StepReader:
        return self._origin

    def __str__(self) -> str:
        return "ErrFlow(From %s): %s" % (describe(self._origin), self._err)


class WorkflowError(StepflowError, Mapping):
    """
    The outcome of a workflow run: every step's terminal error, keyed by step.

    The scheduler records exactly one entry per terminated step, then freezes
    the aggregate. A `None` entry means the step ended without error; a run
    where every entry is `None` (or with no entries at all) succeeded.
    """

    # Compared and hashed by identity like any other exception.
    __eq__ = StepflowError.__eq__
    __hash__ = StepflowError.__hash__

    def __init__(
        self, entries: Mapping[StepReader, Optional[BaseException]] | None = None
    ):
        super().__init__()
        self._errors: Dict[StepReader, Optional[BaseException]] = dict(entries or {})
        self._frozen = False

    def record(self, step: StepReader, err: Optional[BaseException]) -> None:
        """Records the terminal error of `step`. Each step is recorded once."""
        if self._frozen:
            raise RuntimeError("Cannot record into a finished workflow result")
        if step in self._errors:
            raise ValueError(f"Step '{step.name}' already has a terminal error recorded")
        self._errors[step] = err

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_nil(self) -> bool:
        """True when no step failed, including when nothing was recorded."""
        return all(err is None for err in self._errors.values())

    def failures(self) -> Dict[StepReader, BaseException]:
        """Returns only the entries that carry an error."""
        return {step: err for step, err in self._errors.items() if err is not None}

    def __getitem__(self, step: StepReader) -> Optional[BaseException]:
        return self._errors[step]

    def __iter__(self) -> Iterator[StepReader]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        # Truthy like any exception; use is_nil() to test for success.
        return True

    def __str__(self) -> str:
        entries = list(self._errors.items())
        return "\n".join(
            "%s: %s" % (describe(step), err) for step, err in entries if err is not None
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._errors!r})"


class InvalidInitialStatus(DefinitionError):
    """Raised when a run starts while some steps are not Pending."""

    def __init__(self, steps: Iterable[StepReader]):
        self.steps: Tuple[StepReader, ...] = tuple(steps)
        super().__init__(self.steps)

    def __iter__(self) -> Iterator[StepReader]:
        return iter(self.steps)

    def __str__(self) -> str:
        lines = ["Unexpected step initial status:"]
        lines.extend(describe(step) for step in self.steps)
        return "\n".join(lines)


class CycleReport(DefinitionError):
    """
    Raised when the dependency relation between steps contains a cycle.

    Every step taking part in a cycle is listed with its full dependency
    list, not only the edges that close the cycle.
    """

    def __init__(self, dependencies: Mapping[StepReader, Iterable[StepReader]]):
        self.dependencies: Mapping[StepReader, Tuple[StepReader, ...]] = (
            types.MappingProxyType(
                {step: tuple(deps) for step, deps in dependencies.items()}
            )
        )
        super().__init__(dict(self.dependencies))

    def __str__(self) -> str:
        lines = ["Cycle dependency error:"]
        for step, deps in self.dependencies.items():
            lines.append(
                "%s: [%s]" % (step.name, ", ".join(dep.name for dep in deps))
            )
        return "\n".join(lines)


class FaultError(ExecutionError):
    """
    The default error a step fault is converted into.

    Its message is exactly the string form of the fault payload.
    """

    def __init__(self, payload: Any):
        super().__init__(payload)
        self.payload = payload

    def __str__(self) -> str:
        return str(self.payload)


class Panic(Exception):
    """
    Aborts step logic with an arbitrary payload, which need not be an error.

    The payload is what fault extractors receive.
    """

    def __init__(self, payload: Any):
        super().__init__(payload)
        self.payload = payload

    def __str__(self) -> str:
        return str(self.payload)


ERR_WORKFLOW_IS_RUNNING = LifecycleError(
    "Workflow is running, please wait for it to terminate"
)
ERR_WORKFLOW_HAS_RUN = LifecycleError(
    "Workflow has run, check the result via err(), or reset the workflow via reset()"
)
