"""Evaluation budget for the ODE right-hand side.

:class:`EvaluationCounter` wraps a dynamics function ``f(t, y) -> dy`` and
counts how many times it is called.  Once the budget is exhausted, the
next call raises :class:`~odestep.exceptions.MaxEvaluationsExceededError`
without evaluating the dynamics.

Not thread-safe: use one counter per integration run.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

from odestep.exceptions import MaxEvaluationsExceededError

logger = logging.getLogger(__name__)

_UNLIMITED = sys.maxsize


class EvaluationCounter:
    """Callable wrapper enforcing a maximal number of dynamics evaluations.

    Args:
        dynamics: ODE right-hand side function ``f(t, y) -> dy/dt``.
        max_evaluations: Maximal number of evaluations. ``None`` means
            unlimited.
    """

    def __init__(
        self,
        dynamics: Callable[[Any, Any], Any],
        max_evaluations: int | None = None,
    ) -> None:
        if max_evaluations is not None and max_evaluations < 0:
            raise ValueError(f"max_evaluations must be >= 0, got {max_evaluations}")
        self._dynamics = dynamics
        self._max_evaluations = _UNLIMITED if max_evaluations is None else max_evaluations
        self._count = 0

    @property
    def count(self) -> int:
        """Number of evaluations performed since the last reset."""
        return self._count

    @property
    def max_evaluations(self) -> int:
        """Evaluation budget (``sys.maxsize`` when unlimited)."""
        return self._max_evaluations

    def reset(self) -> None:
        """Reset the evaluation count to zero."""
        self._count = 0

    def __call__(self, t: Any, y: Any) -> Any:
        if self._count >= self._max_evaluations:
            logger.debug("Evaluation budget of %d exhausted at t=%s", self._max_evaluations, t)
            raise MaxEvaluationsExceededError(self._max_evaluations)
        self._count += 1
        return self._dynamics(t, y)

    def __repr__(self) -> str:
        limit = "unlimited" if self._max_evaluations == _UNLIMITED else self._max_evaluations
        return f"EvaluationCounter(count={self._count}, max_evaluations={limit})"
