"""Exceptions raised by odestep.

All exceptions derive from :class:`StepSizeControlError`.  Where a
built-in exception describes the same category of failure, it is also a
base class, so callers catching ``ValueError`` or ``RuntimeError`` keep
working.
"""

from __future__ import annotations


class StepSizeControlError(Exception):
    """Base exception for step-size control errors."""


class DimensionMismatchError(StepSizeControlError, ValueError):
    """Raised when a tolerance or scale vector does not match the state.

    Args:
        expected: Dimension required by the state.
        actual: Dimension that was supplied.
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Dimension mismatch: expected {expected}, got {actual}")


class MinimalStepSizeError(StepSizeControlError):
    """Raised when a step falls below the minimal step size.

    This is terminal for the integration run: the step is not retried.

    Args:
        step: Magnitude of the offending step.
        min_step: Configured minimal step size.
    """

    def __init__(self, step: float, min_step: float) -> None:
        self.step = step
        self.min_step = min_step
        super().__init__(
            f"Minimal step size ({min_step:.2e}) reached, "
            f"integration needs {step:.2e}"
        )


class MaxEvaluationsExceededError(StepSizeControlError, RuntimeError):
    """Raised when the right-hand side evaluation budget is exhausted.

    Args:
        max_evaluations: The evaluation budget that was exceeded.
    """

    def __init__(self, max_evaluations: int) -> None:
        self.max_evaluations = max_evaluations
        super().__init__(f"Maximal count ({max_evaluations}) of evaluations exceeded")
