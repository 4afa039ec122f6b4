"""Adaptive step-size control for ODE integrators.

Provides the step-size policy consumed by adaptive integrators, working
over any field of scalar elements (see :mod:`odestep.field`):

- :class:`StepSizePolicy` -- Step bounds, scalar or per-component
  tolerances, and user supplied initial step
- :func:`estimate_initial_step` -- First step from a local Euler probe
- :func:`filter_step` -- Bound any proposed step into ``[min_step, max_step]``
- :func:`compute_error_thresholds`, :func:`compute_error_norm` -- Tolerance
  driven error normalization
- :func:`compute_next_step_size` -- Step-size update from an error estimate

A typical error-control loop::

    policy.validate(state0)
    h = policy.estimate_initial_step(dynamics, forward, order, scale, state0)
    while ...:
        error = policy.error_norm(error_vec, y_old, y_new)
        h = policy.filter_step(compute_next_step_size(error, h, order), forward, False)
"""

from odestep.stepsize._adaptive import (
    compute_error_norm,
    compute_error_thresholds,
    compute_next_step_size,
)
from odestep.stepsize._filter import filter_step
from odestep.stepsize._initial_step import estimate_initial_step
from odestep.stepsize._policy import StepSizePolicy
from odestep.stepsize._types import ScalarTolerance, StepControlConfig, VectorTolerance

__all__ = [
    "ScalarTolerance",
    "VectorTolerance",
    "StepControlConfig",
    "StepSizePolicy",
    "estimate_initial_step",
    "filter_step",
    "compute_error_thresholds",
    "compute_error_norm",
    "compute_next_step_size",
]
