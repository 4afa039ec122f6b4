"""Error-control utilities shared by adaptive step-size integrators.

The hosting integrator's error-control loop uses these helpers:

1. Compute per-component error thresholds from the tolerances.
2. Compute the root-mean-square of the error scaled by those thresholds;
   the step is accepted if the result is < 1.0.
3. Propose the next step size from the error and the method order, then
   bound it with :func:`~odestep.stepsize.filter_step`.

Only the primary part of the state is subject to error control: callers
pass the primary components (``ODEState.primary_state``) to these
functions, never the secondary blocks.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from odestep.config import get_dtype
from odestep.exceptions import DimensionMismatchError
from odestep.field import to_real_array
from odestep.stepsize._types import StepControlConfig


def compute_error_thresholds(
    state_old,
    state_new,
    abs_tol: ArrayLike,
    rel_tol: ArrayLike,
) -> Array:
    """Compute the allowed error of each primary component.

    .. math::

        \\text{tol}_i = \\text{abs\\_tol}_i + \\text{rel\\_tol}_i
            \\cdot \\max(|y^{\\text{old}}_i|, |y^{\\text{new}}_i|)

    Scalar tolerances are broadcast to every component.

    Args:
        state_old: Primary state at the beginning of the step.
        state_new: Primary state at the end of the step.
        abs_tol: Absolute tolerance, scalar or one value per component.
        rel_tol: Relative tolerance, scalar or one value per component.

    Returns:
        jax.Array: Threshold for each component.

    Raises:
        DimensionMismatchError: If the states or tolerance vectors do not
            have the same number of components.
    """
    dtype = get_dtype()
    state_old = to_real_array(state_old)
    state_new = to_real_array(state_new)
    abs_tol = jnp.asarray(abs_tol, dtype=dtype)
    rel_tol = jnp.asarray(rel_tol, dtype=dtype)

    n = state_old.shape[0]
    if state_new.shape[0] != n:
        raise DimensionMismatchError(n, state_new.shape[0])
    for tol in (abs_tol, rel_tol):
        if tol.ndim > 0 and tol.shape[0] != n:
            raise DimensionMismatchError(n, tol.shape[0])

    return abs_tol + rel_tol * jnp.maximum(jnp.abs(state_old), jnp.abs(state_new))


def compute_error_norm(
    error_vec,
    state_old,
    state_new,
    abs_tol: ArrayLike,
    rel_tol: ArrayLike,
) -> Array:
    """Compute the normalized error norm for adaptive step-size control.

    .. math::

        \\sqrt{\\frac{1}{n} \\sum_i \\left(\\frac{\\text{err}_i}{\\text{tol}_i}\\right)^2}

    where *n* is the main set dimension. The step is accepted when the
    returned value is < 1.0.

    Args:
        error_vec: Estimated local error of each primary component.
        state_old: Primary state at the beginning of the step.
        state_new: Primary state at the end of the step.
        abs_tol: Absolute tolerance, scalar or one value per component.
        rel_tol: Relative tolerance, scalar or one value per component.

    Returns:
        jax.Array: Scalar normalized error.

    Raises:
        DimensionMismatchError: If the error vector, the states or the
            tolerance vectors do not have the same number of components.
    """
    thresholds = compute_error_thresholds(state_old, state_new, abs_tol, rel_tol)
    error_vec = to_real_array(error_vec)
    if error_vec.shape[0] != thresholds.shape[0]:
        raise DimensionMismatchError(thresholds.shape[0], error_vec.shape[0])
    return jnp.sqrt(jnp.mean((error_vec / thresholds) ** 2))


def compute_next_step_size(
    error: ArrayLike,
    h: ArrayLike,
    order: float,
    config: StepControlConfig | None = None,
) -> Array:
    """Propose the next step size based on the current error estimate.

    Uses the standard optimal step-size formula:

    .. math::

        h_{\\text{next}} = |h| \\cdot S \\cdot
            \\left(\\frac{1}{\\text{error}}\\right)^{1/(p+1)}

    where *S* is the safety factor and *p* is the method order. The ratio
    ``|h_next| / |h|`` is clamped by the scale-factor bounds and the sign
    of ``h`` is preserved for backward integration. The result is not
    bounded by the minimal and maximal step sizes: pass it through
    :func:`~odestep.stepsize.filter_step` before use.

    Args:
        error: Normalized error from :func:`compute_error_norm`.
        h: Current step size (may be negative for backward integration).
        order: Order of the error estimator.
        config: Update parameters. Uses default :class:`StepControlConfig`
            if ``None``.

    Returns:
        jax.Array: Proposed next step size with the same sign as ``h``.
    """
    if config is None:
        config = StepControlConfig()

    error = jnp.asarray(error, dtype=get_dtype())
    h = jnp.asarray(h, dtype=get_dtype())

    exponent = 1.0 / (order + 1.0)
    raw_scale = jnp.where(
        error > 0.0,
        jnp.power(1.0 / error, exponent),
        config.max_scale_factor,
    )
    scale = jnp.clip(
        config.safety_factor * raw_scale,
        config.min_scale_factor,
        config.max_scale_factor,
    )

    return h * scale
