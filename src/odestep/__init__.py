"""
odestep is a small library of adaptive step-size control for ODE integrators, working over generic fields of scalar elements and implemented with JAX.
"""

from .config import set_dtype, get_dtype

from .exceptions import (
    StepSizeControlError,
    DimensionMismatchError,
    MinimalStepSizeError,
    MaxEvaluationsExceededError,
)

from .field import (
    FieldElement,
    real_part,
    norm,
    constant_like,
    to_real_array,
    to_double_array,
)

from .state import ODEState
from .evaluation import EvaluationCounter

from .stepsize import (
    ScalarTolerance,
    VectorTolerance,
    StepControlConfig,
    StepSizePolicy,
    estimate_initial_step,
    filter_step,
    compute_error_thresholds,
    compute_error_norm,
    compute_next_step_size,
)
