"""Type definitions for step-size control.

- :class:`ScalarTolerance`: one absolute/relative tolerance pair applied
  to every primary state component.
- :class:`VectorTolerance`: per-component absolute/relative tolerances.
- :class:`StepControlConfig`: parameters of the step-size update formula
  used by :func:`~odestep.stepsize.compute_next_step_size`.

All types are :class:`~typing.NamedTuple` instances: immutable, and JAX
pytrees when used inside ``jax.jit``.
"""

from __future__ import annotations

from typing import NamedTuple


class ScalarTolerance(NamedTuple):
    """Tolerance pair broadcast to all primary state components.

    Attributes:
        absolute: Allowed absolute error.
        relative: Allowed relative error.
    """

    absolute: float
    relative: float


class VectorTolerance(NamedTuple):
    """Per-component tolerances.

    Both tuples must have the main set dimension of the state they are
    validated against.

    Attributes:
        absolute: Allowed absolute error for each primary component.
        relative: Allowed relative error for each primary component.
    """

    absolute: tuple[float, ...]
    relative: tuple[float, ...]


class StepControlConfig(NamedTuple):
    """Configuration of the step-size update after an error estimate.

    Attributes:
        safety_factor: Multiplicative safety factor applied to step-size
            predictions. Values < 1.0 produce conservative step sizes.
        min_scale_factor: Minimum allowed ratio ``|h_next| / |h|``.
        max_scale_factor: Maximum allowed ratio ``|h_next| / |h|``.
    """

    safety_factor: float = 0.9
    min_scale_factor: float = 0.2
    max_scale_factor: float = 10.0
