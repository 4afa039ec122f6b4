"""Tests for the odestep.evaluation module."""

import sys

import pytest

from odestep.evaluation import EvaluationCounter
from odestep.exceptions import MaxEvaluationsExceededError, StepSizeControlError


def _decay(t, y):
    return [-v for v in y]


class TestEvaluationCounter:
    def test_counts_calls(self):
        counter = EvaluationCounter(_decay)
        assert counter.count == 0
        assert counter(0.0, [2.0]) == [-2.0]
        counter(0.1, [1.0])
        assert counter.count == 2

    def test_unlimited_by_default(self):
        assert EvaluationCounter(_decay).max_evaluations == sys.maxsize

    def test_budget_exceeded_raises_before_evaluation(self):
        calls = []

        def dynamics(t, y):
            calls.append(t)
            return y

        counter = EvaluationCounter(dynamics, max_evaluations=2)
        counter(0.0, [1.0])
        counter(1.0, [1.0])
        with pytest.raises(MaxEvaluationsExceededError) as excinfo:
            counter(2.0, [1.0])
        assert excinfo.value.max_evaluations == 2
        assert calls == [0.0, 1.0]
        assert counter.count == 2

    def test_error_hierarchy(self):
        counter = EvaluationCounter(_decay, max_evaluations=0)
        with pytest.raises(RuntimeError):
            counter(0.0, [1.0])
        with pytest.raises(StepSizeControlError):
            counter(0.0, [1.0])

    def test_reset(self):
        counter = EvaluationCounter(_decay, max_evaluations=1)
        counter(0.0, [1.0])
        counter.reset()
        assert counter.count == 0
        counter(0.0, [1.0])

    def test_negative_budget_raises(self):
        with pytest.raises(ValueError, match="max_evaluations"):
            EvaluationCounter(_decay, max_evaluations=-1)

    def test_repr(self):
        assert repr(EvaluationCounter(_decay)) == (
            "EvaluationCounter(count=0, max_evaluations=unlimited)"
        )
        assert repr(EvaluationCounter(_decay, 5)) == "EvaluationCounter(count=0, max_evaluations=5)"
