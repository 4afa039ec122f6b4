"""First-order dual numbers used as a derivative-carrying field element in tests."""

from __future__ import annotations

import math


class Dual:
    """Value with its derivative with respect to one parameter."""

    __slots__ = ("value", "derivative")

    def __init__(self, value: float, derivative: float = 0.0) -> None:
        self.value = float(value)
        self.derivative = float(derivative)

    @staticmethod
    def _lift(other) -> Dual:
        return other if isinstance(other, Dual) else Dual(other)

    def __add__(self, other) -> Dual:
        other = self._lift(other)
        return Dual(self.value + other.value, self.derivative + other.derivative)

    __radd__ = __add__

    def __sub__(self, other) -> Dual:
        other = self._lift(other)
        return Dual(self.value - other.value, self.derivative - other.derivative)

    def __rsub__(self, other) -> Dual:
        return self._lift(other) - self

    def __mul__(self, other) -> Dual:
        other = self._lift(other)
        return Dual(
            self.value * other.value,
            self.derivative * other.value + self.value * other.derivative,
        )

    __rmul__ = __mul__

    def __truediv__(self, other) -> Dual:
        other = self._lift(other)
        return Dual(
            self.value / other.value,
            (self.derivative * other.value - self.value * other.derivative) / other.value**2,
        )

    def __rtruediv__(self, other) -> Dual:
        return self._lift(other) / self

    def __neg__(self) -> Dual:
        return Dual(-self.value, -self.derivative)

    def get_real(self) -> float:
        return self.value

    def norm(self) -> Dual:
        return Dual(abs(self.value), math.copysign(1.0, self.value) * self.derivative)

    def __repr__(self) -> str:
        return f"Dual({self.value}, {self.derivative})"
