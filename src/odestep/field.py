"""Field element capability and dispatch helpers.

Step-size control only needs a handful of operations from the scalars an
ODE is integrated over: field arithmetic, a real-valued projection used
for comparisons, and a magnitude.  :class:`FieldElement` describes that
capability so the estimator and the filter work uniformly across

- plain Python reals (``float``, ``int``, ``fractions.Fraction``),
- JAX and NumPy numeric scalars or 0-d arrays,
- user-defined element types carrying extra structure, such as dual
  numbers propagating derivatives for sensitivity analysis.

Built-in numbers and arrays do not implement ``get_real``/``norm``; the
module-level helpers dispatch to the protocol methods when present and
fall back to the numeric equivalents otherwise.
"""

from __future__ import annotations

import numbers
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array

from odestep.config import get_dtype


@runtime_checkable
class FieldElement(Protocol):
    """Scalar supporting field arithmetic plus a real projection and a magnitude.

    Implementations must accept Python floats as the other operand of
    ``+``, ``-`` and ``*`` so that real constants can be combined with
    elements ("zero plus scalar").
    """

    def __add__(self, other: Any) -> Any: ...

    def __sub__(self, other: Any) -> Any: ...

    def __mul__(self, other: Any) -> Any: ...

    def __truediv__(self, other: Any) -> Any: ...

    def get_real(self) -> float:
        """Return the real part used for ordering comparisons."""
        ...

    def norm(self) -> Any:
        """Return the magnitude of the element, in the element's own metric."""
        ...


def real_part(x: Any) -> float:
    """Project a field element onto a Python float.

    Args:
        x: Field element, real number, or numeric scalar/0-d array.

    Returns:
        float: ``x.get_real()`` if available, otherwise the real part of ``x``.
    """
    get_real = getattr(x, "get_real", None)
    if get_real is not None:
        return float(get_real())
    if isinstance(x, numbers.Real):
        return float(x)
    return float(jnp.real(x))


def norm(x: Any) -> Any:
    """Magnitude of a field element under the field's own metric.

    Args:
        x: Field element, real number, or numeric scalar/0-d array.

    Returns:
        ``x.norm()`` if available, otherwise ``abs(x)``.
    """
    element_norm = getattr(x, "norm", None)
    if element_norm is not None and not isinstance(x, (jax.Array, np.ndarray)):
        return element_norm()
    return abs(x)


def constant_like(x: Any, value: float) -> Any:
    """Build the element of ``x``'s field equal to the real constant ``value``.

    Args:
        x: Template element whose field (type, dtype) is reused.
        value: Real constant.

    Returns:
        ``value`` as a float for reals, as a 0-d array of ``x``'s dtype for
        arrays, and ``x * 0.0 + value`` for other field elements.
    """
    if isinstance(x, numbers.Real):
        return float(value)
    if isinstance(x, jax.Array):
        return jnp.asarray(value, dtype=x.dtype)
    if isinstance(x, np.ndarray):
        return np.asarray(value, dtype=x.dtype)
    return x * 0.0 + value


def to_real_array(values: Iterable[Any]) -> Array:
    """Project a sequence of field elements onto a 1-D real array.

    Numeric JAX/NumPy arrays are converted in one operation; any other
    sequence is projected element by element with :func:`real_part`.

    Args:
        values: Array or sequence of field elements.

    Returns:
        jax.Array: Real parts, with the dtype from :func:`~odestep.config.get_dtype`.
    """
    dtype = get_dtype()
    if is_numeric_array(values):
        return jnp.real(jnp.asarray(values)).reshape(-1).astype(dtype)
    return jnp.asarray([real_part(v) for v in values], dtype=dtype)


def to_double_array(values: Iterable[Any]) -> np.ndarray:
    """Project a sequence of field elements onto a 1-D float64 NumPy array.

    Unlike :func:`to_real_array`, the result does not follow the configured
    dtype: step-size heuristics need the range of double precision.

    Args:
        values: Array or sequence of field elements.

    Returns:
        numpy.ndarray: Real parts as ``float64``.
    """
    if is_numeric_array(values):
        return np.real(np.asarray(values)).reshape(-1).astype(np.float64)
    return np.asarray([real_part(v) for v in values], dtype=np.float64)


def is_numeric_array(values: Any) -> bool:
    """Return True if ``values`` supports vectorized numeric arithmetic."""
    return isinstance(values, (jax.Array, np.ndarray)) and values.dtype != np.object_
