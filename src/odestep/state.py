"""ODE state split into a primary block and secondary blocks.

Only the primary block is subject to step-size error control. Secondary
blocks (variational equations, parameter sensitivities, other extended
equations) are appended after it in the complete state vector and are
ignored by the tolerance checks, although the initial step estimator and
the right-hand side see the complete state.

:class:`ODEState` is a :class:`~typing.NamedTuple`, so it is a JAX pytree
when its blocks are arrays.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple

import jax.numpy as jnp

from odestep.field import is_numeric_array


def _concatenate(blocks: Sequence[Any]) -> Any:
    """Join state blocks, keeping arrays as arrays."""
    if len(blocks) == 1:
        return blocks[0]
    if all(is_numeric_array(block) for block in blocks):
        return jnp.concatenate([jnp.ravel(block) for block in blocks])
    return [value for block in blocks for value in block]


class ODEState(NamedTuple):
    """State of an ODE at a given time, optionally with its derivative.

    Attributes:
        time: Time of the state (field element or real).
        primary_state: Primary state block, subject to step-size control.
        primary_derivative: Derivative of the primary block, or ``None``
            when the state has not been evaluated yet.
        secondary_states: Secondary state blocks, in equation order.
        secondary_derivatives: Derivatives of the secondary blocks.
    """

    time: Any
    primary_state: Any
    primary_derivative: Any = None
    secondary_states: tuple = ()
    secondary_derivatives: tuple = ()

    @property
    def primary_dimension(self) -> int:
        """Dimension of the primary block (the main set dimension)."""
        return len(self.primary_state)

    @property
    def complete_dimension(self) -> int:
        """Dimension of the complete state, primary plus secondary blocks."""
        return self.primary_dimension + sum(len(block) for block in self.secondary_states)

    def complete_state(self) -> Any:
        """Return the primary and secondary blocks joined into one vector."""
        return _concatenate((self.primary_state, *self.secondary_states))

    def complete_derivative(self) -> Any:
        """Return the primary and secondary derivatives joined into one vector.

        Raises:
            ValueError: If no derivative is attached to the state, or if the
                secondary derivatives do not match the secondary blocks.
        """
        if self.primary_derivative is None:
            raise ValueError("ODEState has no derivative attached")
        if len(self.secondary_derivatives) != len(self.secondary_states):
            raise ValueError(
                f"Expected {len(self.secondary_states)} secondary derivatives, "
                f"got {len(self.secondary_derivatives)}"
            )
        return _concatenate((self.primary_derivative, *self.secondary_derivatives))
