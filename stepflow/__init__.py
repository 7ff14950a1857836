"""
stepflow: Public API
This module exposes the error types, the fault boundary and the run
lifecycle helpers a workflow scheduler builds on.
"""

from .step import StepReader, StepStatus, describe
from .exceptions import (
    StepflowError,
    DefinitionError,
    ExecutionError,
    ConfigurationError,
    LifecycleError,
    LifecycleViolation,
    FlowError,
    WorkflowError,
    InvalidInitialStatus,
    CycleReport,
    FaultError,
    Panic,
    ERR_WORKFLOW_IS_RUNNING,
    ERR_WORKFLOW_HAS_RUN,
)
from .guard import Extractor, PanicGuard, catch_panic_as_error, extract_type, panic
from .lifecycle import RunLatch, check_initial_status

__all__ = [
    "StepReader",
    "StepStatus",
    "describe",
    "StepflowError",
    "DefinitionError",
    "ExecutionError",
    "ConfigurationError",
    "LifecycleError",
    "LifecycleViolation",
    "FlowError",
    "WorkflowError",
    "InvalidInitialStatus",
    "CycleReport",
    "FaultError",
    "Panic",
    "ERR_WORKFLOW_IS_RUNNING",
    "ERR_WORKFLOW_HAS_RUN",
    "Extractor",
    "PanicGuard",
    "catch_panic_as_error",
    "extract_type",
    "panic",
    "RunLatch",
    "check_initial_status",
]
