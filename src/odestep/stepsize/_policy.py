"""Step-size policy of an adaptive integrator.

A :class:`StepSizePolicy` holds the step-size control configuration of one
integration: step bounds, either scalar or per-component tolerances, an
optional user supplied initial step, and the current step context. It is
constructed independently of any integrator and passed into the
integration loop, which calls

- :meth:`StepSizePolicy.validate` during the state sanity checks,
- :meth:`StepSizePolicy.estimate_initial_step` once at integration start,
- :meth:`StepSizePolicy.filter_step` after every step-size adjustment.

Note that *only* the primary part of the state is used for error control;
secondary blocks are ignored by :meth:`StepSizePolicy.validate` and
:meth:`StepSizePolicy.error_thresholds`.

A policy is mutable and not thread-safe: concurrent integrations need
independent instances.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import Any

import jax
import numpy as np
from jax import Array

from odestep.exceptions import DimensionMismatchError
from odestep.state import ODEState
from odestep.stepsize._adaptive import compute_error_norm, compute_error_thresholds
from odestep.stepsize._filter import filter_step
from odestep.stepsize._initial_step import estimate_initial_step
from odestep.stepsize._types import ScalarTolerance, VectorTolerance

logger = logging.getLogger(__name__)


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (jax.Array, np.ndarray)):
        return value.ndim > 0
    return not isinstance(value, (str, bytes)) and hasattr(value, "__len__")


class StepSizePolicy:
    """Adaptive step-size control parameters and heuristics.

    The error threshold of primary component *i* is::

        threshold_i = abs_tol_i + rel_tol_i * max(|y_old_i|, |y_new_i|)

    where scalar tolerances apply to every component.

    Args:
        min_step: Minimal step (sign is irrelevant, regardless of
            integration direction). The last step can be smaller.
        max_step: Maximal step (sign is irrelevant).
        absolute_tolerance: Allowed absolute error, a scalar or one value
            per primary component.
        relative_tolerance: Allowed relative error, a scalar or one value
            per primary component.

    Raises:
        TypeError: If one tolerance is a scalar and the other a sequence.

    Examples:
        ```python
        import jax.numpy as jnp
        from odestep import ODEState, StepSizePolicy

        def decay(t, y):
            return -y

        policy = StepSizePolicy(1e-8, 10.0, 1e-10, 1e-8)
        y0 = jnp.array([1.0, 2.0])
        state0 = ODEState(0.0, y0, decay(0.0, y0))
        policy.validate(state0)
        h = policy.estimate_initial_step(decay, True, 5, jnp.abs(y0), state0)
        ```
    """

    def __init__(
        self,
        min_step: float,
        max_step: float,
        absolute_tolerance: float | Sequence[float],
        relative_tolerance: float | Sequence[float],
    ) -> None:
        self._min_step = 0.0
        self._max_step = 0.0
        self._scalar = ScalarTolerance(0.0, 0.0)
        self._vector: VectorTolerance | None = None
        self._initial_step: float | None = None
        self._main_set_dimension: int | None = None
        self.step_start: ODEState | None = None
        self.step_size: Any = None

        self.set_step_size_control(min_step, max_step, absolute_tolerance, relative_tolerance)
        self.reset_internal_state()

    def set_step_size_control(
        self,
        min_step: float,
        max_step: float,
        absolute_tolerance: float | Sequence[float],
        relative_tolerance: float | Sequence[float],
    ) -> None:
        """Set the adaptive step-size control parameters.

        Dispatches to :meth:`configure_scalar` or :meth:`configure_vector`
        depending on the type of the tolerances.

        Raises:
            TypeError: If one tolerance is a scalar and the other a sequence.
        """
        abs_is_seq = _is_sequence(absolute_tolerance)
        rel_is_seq = _is_sequence(relative_tolerance)
        if abs_is_seq != rel_is_seq:
            raise TypeError(
                "absolute_tolerance and relative_tolerance must both be scalars "
                "or both be sequences"
            )
        if abs_is_seq:
            self.configure_vector(min_step, max_step, absolute_tolerance, relative_tolerance)
        else:
            self.configure_scalar(min_step, max_step, absolute_tolerance, relative_tolerance)

    def configure_scalar(
        self,
        min_step: float,
        max_step: float,
        absolute_tolerance: float,
        relative_tolerance: float,
    ) -> None:
        """Use one tolerance pair for all primary components.

        Clears any per-component tolerances. As a side effect the user
        supplied initial step is reset, so the next integration estimates
        it unless :meth:`set_initial_step` is called again.

        Args:
            min_step: Minimal step (absolute value is stored).
            max_step: Maximal step (absolute value is stored).
            absolute_tolerance: Allowed absolute error.
            relative_tolerance: Allowed relative error.
        """
        self._min_step = abs(float(min_step))
        self._max_step = abs(float(max_step))
        self._initial_step = None

        self._scalar = ScalarTolerance(float(absolute_tolerance), float(relative_tolerance))
        self._vector = None

    def configure_vector(
        self,
        min_step: float,
        max_step: float,
        absolute_tolerance: Sequence[float],
        relative_tolerance: Sequence[float],
    ) -> None:
        """Use per-component tolerances.

        The tolerances are copied. The scalar tolerances read back as
        ``0.0`` while vector tolerances are active. As a side effect the
        user supplied initial step is reset.

        Args:
            min_step: Minimal step (absolute value is stored).
            max_step: Maximal step (absolute value is stored).
            absolute_tolerance: Allowed absolute error of each primary component.
            relative_tolerance: Allowed relative error of each primary component.
        """
        self._min_step = abs(float(min_step))
        self._max_step = abs(float(max_step))
        self._initial_step = None

        self._scalar = ScalarTolerance(0.0, 0.0)
        self._vector = VectorTolerance(
            tuple(float(v) for v in absolute_tolerance),
            tuple(float(v) for v in relative_tolerance),
        )

    def set_initial_step(self, initial_step: float) -> None:
        """Set the initial step size instead of letting it be estimated.

        The value must be positive even for backward integration. A value
        that is not positive or lies outside ``[min_step, max_step]`` is
        ignored: the initial step will then be estimated.

        Args:
            initial_step: Initial step magnitude.
        """
        if initial_step <= 0 or initial_step < self._min_step or initial_step > self._max_step:
            logger.debug(
                "Ignoring initial step %g outside [%g, %g], it will be estimated",
                initial_step,
                self._min_step,
                self._max_step,
            )
            self._initial_step = None
        else:
            self._initial_step = float(initial_step)

    def validate(self, state: ODEState) -> None:
        """Check the tolerance configuration against a state.

        Records the main set dimension (the primary dimension of
        ``state``). Must be called before per-component tolerances are used.

        Args:
            state: Initial state of the integration.

        Raises:
            DimensionMismatchError: If vector tolerances do not have the
                main set dimension.
        """
        self._main_set_dimension = state.primary_dimension

        if self._vector is not None:
            if len(self._vector.absolute) != self._main_set_dimension:
                raise DimensionMismatchError(self._main_set_dimension, len(self._vector.absolute))
            if len(self._vector.relative) != self._main_set_dimension:
                raise DimensionMismatchError(self._main_set_dimension, len(self._vector.relative))

    def estimate_initial_step(
        self,
        dynamics: Callable[[Any, Any], Any],
        forward: bool,
        order: int,
        scale: Sequence[Any],
        state0: ODEState,
    ) -> float:
        """Initialize the integration step.

        See :func:`~odestep.stepsize.estimate_initial_step`; the bounds and
        the user supplied initial step come from this policy.

        Args:
            dynamics: ODE right-hand side over the complete state.
            forward: Forward integration indicator.
            order: Order of the method.
            scale: Scaling vector for the state (can be shorter than the
                state vector).
            state0: State at integration start, with derivative.

        Returns:
            float: Signed first integration step.
        """
        return estimate_initial_step(
            dynamics,
            forward,
            order,
            scale,
            state0,
            self._min_step,
            self._max_step,
            initial_step=self._initial_step,
        )

    def filter_step(self, h: Any, forward: bool, accept_small: bool) -> Any:
        """Bound a signed step into ``[min_step, max_step]`` in magnitude.

        See :func:`~odestep.stepsize.filter_step`.

        Raises:
            MinimalStepSizeError: If the step is too small and
                ``accept_small`` is False.
        """
        return filter_step(h, forward, accept_small, self._min_step, self._max_step)

    def error_thresholds(self, state_old, state_new) -> Array:
        """Allowed error of each primary component.

        Args:
            state_old: Primary state at the beginning of the step.
            state_new: Primary state at the end of the step.

        Returns:
            jax.Array: Threshold for each primary component.

        Raises:
            DimensionMismatchError: If vector tolerances do not match the
                number of primary components.
        """
        abs_tol, rel_tol = self._vector if self._vector is not None else self._scalar
        return compute_error_thresholds(state_old, state_new, abs_tol, rel_tol)

    def error_norm(self, error_vec, state_old, state_new) -> Array:
        """Root-mean-square of the primary error scaled by the thresholds.

        Returns:
            jax.Array: Scalar normalized error, < 1.0 for an acceptable step.
        """
        abs_tol, rel_tol = self._vector if self._vector is not None else self._scalar
        return compute_error_norm(error_vec, state_old, state_new, abs_tol, rel_tol)

    def reset_internal_state(self) -> None:
        """Reset the current step context to its neutral defaults.

        There is no previous step, and the provisional step size is the
        geometric mean of the step bounds.
        """
        self.step_start = None
        self.step_size = math.sqrt(self._min_step * self._max_step)

    @property
    def min_step(self) -> float:
        """Minimal step magnitude."""
        return self._min_step

    @property
    def max_step(self) -> float:
        """Maximal step magnitude."""
        return self._max_step

    @property
    def initial_step(self) -> float | None:
        """User supplied initial step magnitude, ``None`` when it is estimated."""
        return self._initial_step

    @property
    def scalar_absolute_tolerance(self) -> float:
        """Scalar absolute tolerance, ``0.0`` when vector tolerances are active."""
        return self._scalar.absolute

    @property
    def scalar_relative_tolerance(self) -> float:
        """Scalar relative tolerance, ``0.0`` when vector tolerances are active."""
        return self._scalar.relative

    @property
    def vector_absolute_tolerance(self) -> tuple[float, ...] | None:
        """Per-component absolute tolerances, ``None`` when scalar tolerances are active."""
        return None if self._vector is None else self._vector.absolute

    @property
    def vector_relative_tolerance(self) -> tuple[float, ...] | None:
        """Per-component relative tolerances, ``None`` when scalar tolerances are active."""
        return None if self._vector is None else self._vector.relative

    @property
    def main_set_dimension(self) -> int | None:
        """Primary dimension of the last validated state."""
        return self._main_set_dimension

    def __repr__(self) -> str:
        tolerance = self._vector if self._vector is not None else self._scalar
        return (
            f"StepSizePolicy(min_step={self._min_step}, max_step={self._max_step}, "
            f"tolerance={tolerance!r}, initial_step={self._initial_step})"
        )
