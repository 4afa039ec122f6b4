# /// script
# requires-python = ">=3.11"
# dependencies = ["odestep"]
#
# [tool.uv.sources]
# odestep = { path = ".." }
# ///
"""Integrate a harmonic oscillator with an embedded Heun/Euler pair.

Shows how a hosting integrator drives a StepSizePolicy: validate the
tolerances against the initial state, estimate the first step, then bound
every step proposed by the error-control loop.

Usage:
    uv run examples/harmonic_oscillator.py
"""

import logging
import math

import jax.numpy as jnp

from odestep import (
    EvaluationCounter,
    ODEState,
    StepSizePolicy,
    compute_next_step_size,
    set_dtype,
)

ORDER = 2


def harmonic(t, x):
    return jnp.array([x[1], -x[0]])


def heun_euler_step(dynamics, t, y, h):
    k1 = dynamics(t, y)
    k2 = dynamics(t + h, y + h * k1)
    y_high = y + 0.5 * h * (k1 + k2)
    return y_high, y_high - (y + h * k1)


def main():
    logging.basicConfig(level=logging.DEBUG)
    set_dtype(jnp.float64)

    dynamics = EvaluationCounter(harmonic, max_evaluations=100_000)
    policy = StepSizePolicy(1e-6, 0.5, [1e-8, 1e-8], [1e-6, 1e-6])

    t, t_end = 0.0, 2.0 * math.pi
    y = jnp.array([1.0, 0.0])
    state0 = ODEState(t, y, dynamics(t, y))
    policy.validate(state0)

    h = policy.estimate_initial_step(dynamics, True, ORDER, jnp.ones(2), state0)
    accepted = rejected = 0
    while t_end - t > 1e-12:
        h = min(h, t_end - t)
        y_new, error_vec = heun_euler_step(dynamics, t, y, h)
        error = policy.error_norm(error_vec, y, y_new)
        if float(error) <= 1.0:
            t, y = t + h, y_new
            accepted += 1
        else:
            rejected += 1
        proposed = compute_next_step_size(error, h, ORDER - 1)
        h = float(policy.filter_step(proposed, True, True))

    print(f"y(2 pi) = {y}, expected [1, 0]")
    print(f"{accepted} accepted steps, {rejected} rejected, {dynamics.count} evaluations")


if __name__ == "__main__":
    main()
