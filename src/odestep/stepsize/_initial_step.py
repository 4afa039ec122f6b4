"""Initial step size estimation.

The estimator chooses a first trial step with the right order of
magnitude from the local behavior of the solution:

1. A rough guess ``h = 0.01 * ||y/scale|| / ||y'/scale||`` drives one
   explicit Euler step.
2. The derivative at the end of that Euler step gives an estimate of the
   second derivative.
3. The step is then chosen such that

   .. math::

       h^{p} \\cdot \\max(\\|y'/\\text{scale}\\|, \\|y''/\\text{scale}\\|) = 0.01

   where *p* is the order of the method that will consume the step.

The norms are computed in double precision on the real projection of the
field elements, whatever the configured dtype and even when the
integration field is not real: the result only sizes a step and
never feeds back into the solution.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import Any

import numpy as np

from odestep.exceptions import DimensionMismatchError
from odestep.field import is_numeric_array, real_part, to_double_array
from odestep.state import ODEState

logger = logging.getLogger(__name__)


def _euler_probe(y0: Any, y_dot0: Any, h: float) -> Any:
    """Return ``y0 + y_dot0 * h`` in the field of the state."""
    if is_numeric_array(y0) and is_numeric_array(y_dot0):
        return y0 + y_dot0 * h
    return [y + y_dot * h for y, y_dot in zip(y0, y_dot0)]


def estimate_initial_step(
    dynamics: Callable[[Any, Any], Any],
    forward: bool,
    order: int,
    scale: Sequence[Any],
    state0: ODEState,
    min_step: float,
    max_step: float,
    initial_step: float | None = None,
) -> float:
    """Estimate the first integration step.

    When ``initial_step`` is given, it is returned with the sign of the
    integration direction and ``dynamics`` is not evaluated. Otherwise
    ``dynamics`` is evaluated exactly once, at the end of an Euler probe.

    Args:
        dynamics: ODE right-hand side ``f(t, y) -> dy/dt`` over the complete
            state. Any exception it raises propagates unchanged.
        forward: Forward integration indicator.
        order: Order of the method that will consume the step.
        scale: Scaling vector for the state. May be shorter than the
            complete state: only its leading components are used.
        state0: State at integration start, with its derivative attached.
        min_step: Minimal step magnitude.
        max_step: Maximal step magnitude.
        initial_step: User supplied step magnitude, or ``None`` to estimate.

    Returns:
        float: Signed first step.

    Raises:
        ValueError: If ``order`` is not positive.
        DimensionMismatchError: If ``scale`` is longer than the complete state.
    """
    if initial_step is not None:
        return initial_step if forward else -initial_step

    if order <= 0:
        raise ValueError(f"Method order must be positive, got {order}")

    y0 = state0.complete_state()
    y_dot0 = state0.complete_derivative()

    scale_r = to_double_array(scale)
    n = scale_r.shape[0]
    y0_r = to_double_array(y0)
    if n > y0_r.shape[0]:
        raise DimensionMismatchError(y0_r.shape[0], n)
    y0_r = y0_r[:n]
    y_dot0_r = to_double_array(y_dot0)[:n]

    # Very rough first guess: h = 0.01 * ||y/scale|| / ||y'/scale||
    y_on_scale2 = float(np.sum((y0_r / scale_r) ** 2))
    y_dot_on_scale2 = float(np.sum((y_dot0_r / scale_r) ** 2))
    if y_on_scale2 < 1.0e-10 or y_dot_on_scale2 < 1.0e-10:
        h = 1.0e-6
    else:
        h = 0.01 * math.sqrt(y_on_scale2 / y_dot_on_scale2)
    if not forward:
        h = -h

    y1 = _euler_probe(y0, y_dot0, h)
    y_dot1 = dynamics(state0.time + h, y1)

    # Second derivative of the solution
    y_dot1_r = to_double_array(y_dot1)[:n]
    y_ddot_on_scale = math.sqrt(float(np.sum(((y_dot1_r - y_dot0_r) / scale_r) ** 2))) / h

    max_inv2 = max(math.sqrt(y_dot_on_scale2), y_ddot_on_scale)
    if max_inv2 < 1.0e-15:
        h1 = max(1.0e-6, 0.001 * abs(h))
    else:
        h1 = (0.01 / max_inv2) ** (1.0 / order)
    h = min(100.0 * abs(h), h1)
    # Keeps t1 - t0 representable for large start times
    h = max(h, 1.0e-12 * abs(real_part(state0.time)))
    if h < min_step:
        h = min_step
    if h > max_step:
        h = max_step

    if not forward:
        h = -h

    logger.debug("Estimated initial step %g for order %d at t0=%g", h, order, real_part(state0.time))
    return h
