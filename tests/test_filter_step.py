"""Tests for bounding of proposed integration steps."""

import logging

import jax.numpy as jnp
import pytest
from dual_numbers import Dual

from odestep.exceptions import MinimalStepSizeError, StepSizeControlError
from odestep.stepsize import StepSizePolicy, filter_step

_MIN_STEP = 1.0
_MAX_STEP = 10.0


@pytest.fixture
def policy():
    return StepSizePolicy(_MIN_STEP, _MAX_STEP, 1e-6, 1e-6)


# ──────────────────────────────────────────────
# Clamping of real steps
# ──────────────────────────────────────────────

class TestClamp:
    def test_small_forward_step_raised_to_min(self, policy):
        """A too-small forward step becomes +min_step."""
        assert policy.filter_step(0.5, True, True) == 1.0

    def test_small_backward_step_raised_to_min(self, policy):
        """A too-small backward step becomes -min_step."""
        assert policy.filter_step(-0.5, False, True) == -1.0

    def test_small_step_sign_follows_direction(self, policy):
        """The replacement sign comes from the direction flag, not from h."""
        assert policy.filter_step(-0.5, True, True) == 1.0

    def test_large_positive_step_clamped(self, policy):
        assert policy.filter_step(50.0, True, True) == 10.0

    def test_large_negative_step_clamped(self, policy):
        assert policy.filter_step(-50.0, False, True) == -10.0

    def test_in_bounds_step_unchanged(self, policy):
        assert policy.filter_step(3.0, True, False) == 3.0
        assert policy.filter_step(-3.0, False, False) == -3.0

    def test_bounds_are_inclusive(self, policy):
        assert policy.filter_step(1.0, True, False) == 1.0
        assert policy.filter_step(-10.0, False, False) == -10.0

    def test_idempotent(self, policy):
        """Filtering an already bounded step returns the same value."""
        for h, forward in ((0.5, True), (-0.5, False), (50.0, True), (-50.0, False), (3.0, True)):
            once = policy.filter_step(h, forward, True)
            twice = policy.filter_step(once, forward, True)
            assert twice == once

    def test_module_function(self):
        assert filter_step(0.25, True, True, 0.5, 2.0) == 0.5
        assert filter_step(-4.0, False, True, 0.5, 2.0) == -2.0


# ──────────────────────────────────────────────
# Minimal step size reached
# ──────────────────────────────────────────────

class TestMinimalStep:
    def test_small_step_raises(self, policy):
        with pytest.raises(MinimalStepSizeError) as excinfo:
            policy.filter_step(0.5, True, False)
        assert excinfo.value.step == 0.5
        assert excinfo.value.min_step == 1.0

    def test_reports_magnitude_for_backward_step(self, policy):
        with pytest.raises(MinimalStepSizeError) as excinfo:
            policy.filter_step(-0.25, False, False)
        assert excinfo.value.step == 0.25

    def test_error_hierarchy(self, policy):
        with pytest.raises(StepSizeControlError, match="Minimal step size"):
            policy.filter_step(0.5, True, False)

    def test_zero_min_step_never_raises(self):
        policy = StepSizePolicy(0.0, 10.0, 1e-6, 1e-6)
        assert policy.filter_step(1e-300, True, False) == 1e-300


# ──────────────────────────────────────────────
# Non-float field elements
# ──────────────────────────────────────────────

class TestFieldElements:
    def test_jax_scalar_keeps_dtype(self, policy):
        h = policy.filter_step(jnp.asarray(50.0, dtype=jnp.float64), True, True)
        assert h.dtype == jnp.float64
        assert float(h) == 10.0

    def test_jax_scalar_small_step_raises(self, policy):
        with pytest.raises(MinimalStepSizeError):
            policy.filter_step(jnp.asarray(0.5), True, False)

    def test_dual_in_bounds_is_returned_unchanged(self, policy):
        h = Dual(5.0, 2.0)
        assert policy.filter_step(h, True, False) is h

    def test_dual_clamped_to_constant(self, policy):
        h = policy.filter_step(Dual(0.5, 3.0), True, True)
        assert isinstance(h, Dual)
        assert h.value == 1.0
        assert h.derivative == 0.0

    def test_dual_large_negative(self, policy):
        h = policy.filter_step(Dual(-20.0, 1.0), False, True)
        assert h.value == -10.0

    def test_minimum_compares_field_magnitude(self, policy):
        """The minimum uses the element's norm, not only its real part."""
        h = 0.5 + 2.0j
        assert policy.filter_step(h, True, False) == h


class TestLogging:
    def test_debug_message_on_raised_step(self, policy, caplog):
        with caplog.at_level(logging.DEBUG, logger="odestep.stepsize._filter"):
            policy.filter_step(0.5, True, True)
        assert "Step 0.5 below minimal step 1" in caplog.text
