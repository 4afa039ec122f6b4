"""Bounding of proposed integration steps.

:func:`filter_step` is called after every step-size adjustment, so it
performs pure arithmetic on the step and never evaluates the dynamics.
Comparisons go through the field's own magnitude (:func:`~odestep.field.norm`)
rather than the real projection alone, since extended field elements may
carry a non-scalar magnitude.
"""

from __future__ import annotations

import logging
from typing import Any

from odestep.exceptions import MinimalStepSizeError
from odestep.field import constant_like, norm, real_part

logger = logging.getLogger(__name__)


def filter_step(
    h: Any,
    forward: bool,
    accept_small: bool,
    min_step: float,
    max_step: float,
) -> Any:
    """Bound a signed step into ``[min_step, max_step]`` in magnitude.

    Steps smaller than ``min_step`` are either raised to ``min_step`` with
    the sign given by ``forward``, or rejected. Steps larger than
    ``max_step`` are clamped to ``+max_step`` or ``-max_step`` according
    to their own sign.

    Args:
        h: Signed step (field element or real).
        forward: Forward integration indicator.
        accept_small: If True, steps smaller than ``min_step`` are silently
            increased to ``min_step``. If False, they raise.
        min_step: Minimal step magnitude.
        max_step: Maximal step magnitude.

    Returns:
        The bounded step, in the same field as ``h``. ``h`` itself is
        returned when no bound is reached.

    Raises:
        MinimalStepSizeError: If ``|h| < min_step`` and ``accept_small``
            is False.
    """
    filtered = h
    if real_part(norm(h) - min_step) < 0:
        if not accept_small:
            raise MinimalStepSizeError(abs(real_part(h)), min_step)
        logger.debug("Step %s below minimal step %g, using minimal step", h, min_step)
        filtered = constant_like(h, min_step if forward else -min_step)

    if real_part(filtered - max_step) > 0:
        filtered = constant_like(h, max_step)
    elif real_part(filtered + max_step) < 0:
        filtered = constant_like(h, -max_step)

    return filtered
